import logging

from flask import current_app, jsonify, request
from flask_login import current_user, login_required

from pickem import db
from pickem.errors import APIError, conflict, forbidden, not_found
from pickem.forms import validate_json_form
from pickem.forms.leagues import CreateLeagueForm
from pickem.models import League, LeagueMember, ScoringType, TieBreaker
from pickem.models.game import MAX_WEEK
from pickem.models.league import DEFAULT_MAX_PARTICIPANTS
from pickem.routes.leagues import bp
from pickem.services.standings_service import get_league_standings
from pickem.utils.cache_utils import get_cached_standings, invalidate_league_standings

logger = logging.getLogger(__name__)


def get_league_or_404(league_id):
    league = db.session.get(League, league_id)
    if league is None:
        raise not_found("League not found")
    return league


def parse_week_arg():
    """Optional ?week= filter; must be a valid week number when given"""
    raw = request.args.get("week")
    if raw in (None, ""):
        return None
    try:
        week = int(raw)
    except ValueError:
        raise APIError("Week must be an integer", 400) from None
    if not 1 <= week <= MAX_WEEK:
        raise APIError(f"Week must be between 1 and {MAX_WEEK}", 400)
    return week


@bp.route("", methods=["GET"])
def list_leagues():
    """Get all public, active leagues"""
    page = max(request.args.get("page", 1, type=int), 1)
    limit = request.args.get(
        "limit", current_app.config.get("ITEMS_PER_PAGE", 10), type=int
    )
    limit = min(max(limit, 1), current_app.config.get("MAX_ITEMS_PER_PAGE", 100))
    season_year = request.args.get("seasonYear", type=int)

    query = League.query.filter_by(is_public=True, is_active=True)
    if season_year:
        query = query.filter_by(season_year=season_year)

    pagination = query.order_by(League.created_at.desc(), League.id.desc()).paginate(
        page=page, per_page=limit, error_out=False
    )

    return jsonify(
        {
            "leagues": [
                league.to_dict(include_commissioner=True) for league in pagination.items
            ],
            "pagination": {
                "page": page,
                "limit": limit,
                "total": pagination.total,
                "pages": pagination.pages,
            },
        }
    )


@bp.route("/<int:league_id>", methods=["GET"])
def league_detail(league_id):
    league = get_league_or_404(league_id)
    return jsonify({"league": league.to_dict(include_commissioner=True)})


@bp.route("", methods=["POST"])
@login_required
def create_league():
    """Create a new league; the creator becomes commissioner and first participant"""
    form = validate_json_form(CreateLeagueForm)

    league = League(
        name=form.name.data.strip(),
        description=form.description.data or None,
        commissioner_id=current_user.id,
        is_public=form.is_public.data,
        max_participants=form.max_participants.data or DEFAULT_MAX_PARTICIPANTS,
        scoring_type=ScoringType(form.scoring_type.data or ScoringType.CONFIDENCE),
        season_year=form.season_year.data,
        settings={
            "tie_breaker": form.tie_breaker.data or TieBreaker.CONFIDENCE.value,
            "allow_late_picks": form.allow_late_picks.data,
        },
    )

    db.session.add(league)
    db.session.flush()  # Get the league ID

    success, message = league.add_participant(current_user)
    if not success:
        db.session.rollback()
        raise APIError(f"Error creating league: {message}", 400)

    db.session.commit()
    logger.info(f"User {current_user.id} created league {league.id} ({league.name})")

    return (
        jsonify(
            {
                "message": "League created successfully",
                "league": league.to_dict(include_commissioner=True),
            }
        ),
        201,
    )


@bp.route("/<int:league_id>/join", methods=["POST"])
@login_required
def join_league(league_id):
    league = get_league_or_404(league_id)

    if not league.is_active:
        raise APIError("League is not active", 400)

    if league.has_participant(current_user.id):
        raise conflict("User is already a participant in this league")

    success, message = league.add_participant(current_user)
    if not success:
        db.session.rollback()
        raise APIError(message, 400)

    db.session.commit()
    invalidate_league_standings(league.id)

    return jsonify({"message": message, "league": league.to_dict()})


@bp.route("/<int:league_id>/leave", methods=["POST"])
@login_required
def leave_league(league_id):
    league = get_league_or_404(league_id)

    if league.commissioner_id == current_user.id:
        raise APIError("Commissioner cannot leave the league", 400)

    success, message = league.remove_participant(current_user.id)
    if not success:
        raise APIError(message, 400)

    db.session.commit()
    invalidate_league_standings(league.id)

    return jsonify({"message": message})


@bp.route("/<int:league_id>/participants/<int:user_id>", methods=["DELETE"])
@login_required
def remove_participant(league_id, user_id):
    """Remove a participant (commissioner only)"""
    league = get_league_or_404(league_id)

    if league.commissioner_id != current_user.id:
        raise forbidden("Only the commissioner can remove participants")

    success, message = league.remove_participant(user_id)
    if not success:
        raise APIError(message, 400)

    db.session.commit()
    invalidate_league_standings(league.id)
    logger.info(f"Commissioner {current_user.id} removed user {user_id} from league {league.id}")

    return jsonify({"message": "Participant removed successfully"})


@bp.route("/<int:league_id>/participants", methods=["GET"])
def league_participants(league_id):
    league = get_league_or_404(league_id)

    memberships = league.members.order_by(LeagueMember.joined_at, LeagueMember.id).all()

    return jsonify({"participants": [member.to_dict() for member in memberships]})


@bp.route("/<int:league_id>/standings", methods=["GET"])
def league_standings(league_id):
    """Get league standings, for the season or a single week"""
    league = get_league_or_404(league_id)
    week = parse_week_arg()

    return jsonify(get_cached_standings(league, week, get_league_standings))
