import logging

from flask import jsonify, request
from flask_login import current_user, login_required
from sqlalchemy.orm import joinedload

from pickem import db
from pickem.errors import APIError, conflict, forbidden, not_found
from pickem.forms import validate_json_form
from pickem.forms.picks import MakePickForm, UpdatePickForm
from pickem.models import Game, League, OverUnderSide, Pick, PickType
from pickem.routes.picks import bp
from pickem.utils.cache_utils import invalidate_league_standings

logger = logging.getLogger(__name__)


def picks_closed(game, league):
    """Final games are always closed; started games unless the league takes late picks"""
    if game.is_final:
        return True
    return game.has_started() and not league.allow_late_picks


def get_own_pick_or_404(pick_id):
    pick = db.session.get(Pick, pick_id)
    if pick is None:
        raise not_found("Pick not found")
    if pick.user_id != current_user.id:
        raise forbidden("You can only modify your own picks")
    return pick


@bp.route("", methods=["GET"])
@login_required
def list_picks():
    """Get the current user's picks, newest first"""
    week = request.args.get("week", type=int)
    league_id = request.args.get("leagueId", type=int)

    query = Pick.query.options(
        joinedload(Pick.game), joinedload(Pick.picked_team)
    ).filter(Pick.user_id == current_user.id)

    if league_id:
        query = query.filter(Pick.league_id == league_id)
    if week:
        query = query.join(Game, Pick.game_id == Game.id).filter(Game.week == week)

    picks = query.order_by(Pick.created_at.desc(), Pick.id.desc()).all()

    return jsonify({"picks": [pick.to_dict() for pick in picks]})


@bp.route("", methods=["POST"])
@login_required
def make_pick():
    form = validate_json_form(MakePickForm)

    game = db.session.get(Game, form.game_id.data)
    if game is None:
        raise not_found("Game not found")

    league = db.session.get(League, form.league_id.data)
    if league is None:
        raise not_found("League not found")

    if picks_closed(game, league):
        raise APIError("Cannot make picks for games that have already started", 400)

    pick_type = PickType(form.pick_type.data)
    side = form.side.data or None
    is_valid, message = Pick.validate_choice(
        game,
        league,
        pick_type,
        form.picked_team_id.data,
        side,
        form.confidence_points.data,
    )
    if not is_valid:
        raise APIError(message, 400)

    if not league.has_participant(current_user.id):
        raise forbidden("You are not a participant in this league")

    if Pick.find_existing(current_user.id, league.id, game.id, pick_type):
        raise conflict("Pick already exists for this game and type")

    pick = Pick(
        user_id=current_user.id,
        league_id=league.id,
        game_id=game.id,
        pick_type=pick_type,
        picked_team_id=form.picked_team_id.data,
        side=OverUnderSide(side) if side else None,
        confidence_points=form.confidence_points.data,
    )
    db.session.add(pick)
    db.session.commit()

    invalidate_league_standings(league.id)
    logger.info(f"User {current_user.id} picked game {game.id} ({pick_type.value}) in league {league.id}")

    return jsonify({"message": "Pick created successfully", "pick": pick.to_dict()}), 201


@bp.route("/<int:pick_id>", methods=["PUT"])
@login_required
def update_pick(pick_id):
    pick = get_own_pick_or_404(pick_id)

    if picks_closed(pick.game, pick.league):
        raise APIError("Cannot modify picks for games that have already started", 400)

    form = validate_json_form(UpdatePickForm)

    picked_team_id = pick.picked_team_id
    if form.picked_team_id.data is not None:
        picked_team_id = form.picked_team_id.data
    side = form.side.data or (pick.side.value if pick.side else None)
    confidence_points = pick.confidence_points
    if form.confidence_points.data is not None:
        confidence_points = form.confidence_points.data

    is_valid, message = Pick.validate_choice(
        pick.game, pick.league, pick.pick_type, picked_team_id, side, confidence_points
    )
    if not is_valid:
        raise APIError(message, 400)

    pick.picked_team_id = picked_team_id
    pick.side = OverUnderSide(side) if side else None
    pick.confidence_points = confidence_points
    db.session.commit()

    invalidate_league_standings(pick.league_id)

    return jsonify({"message": "Pick updated successfully", "pick": pick.to_dict()})


@bp.route("/<int:pick_id>", methods=["DELETE"])
@login_required
def delete_pick(pick_id):
    pick = get_own_pick_or_404(pick_id)

    if picks_closed(pick.game, pick.league):
        raise APIError("Cannot delete picks for games that have already started", 400)

    league_id = pick.league_id
    db.session.delete(pick)
    db.session.commit()

    invalidate_league_standings(league_id)

    return jsonify({"message": "Pick deleted successfully"})
