from datetime import datetime, timezone

from flask import request
from sqlalchemy.orm import joinedload

from pickem import db
from pickem.errors import APIError, not_found
from pickem.models import Game, Team
from pickem.models.game import MAX_WEEK
from pickem.routes.games import bp
from pickem.utils.cache_utils import cached_route


def current_season_year():
    return datetime.now(timezone.utc).year


# Cached views return plain dicts; Flask serializes them on the way out.


@bp.route("", methods=["GET"])
@cached_route(timeout=60, key_prefix="games")
def list_games():
    """Get games for a season, optionally a single week"""
    season_year = request.args.get("seasonYear", type=int) or current_season_year()
    week = request.args.get("week", type=int)

    query = Game.query.options(
        joinedload(Game.home_team), joinedload(Game.away_team)
    ).filter_by(season_year=season_year)
    if week:
        query = query.filter_by(week=week)

    games = query.order_by(Game.week, Game.game_time, Game.id).all()

    return {"games": [game.to_dict() for game in games], "seasonYear": season_year}


@bp.route("/week/<int:week>", methods=["GET"])
@cached_route(timeout=60, key_prefix="games_week")
def games_for_week(week):
    if not 1 <= week <= MAX_WEEK:
        raise APIError(f"Week must be between 1 and {MAX_WEEK}", 400)

    season_year = request.args.get("seasonYear", type=int) or current_season_year()
    games = Game.get_games_for_week(season_year, week)

    return {
        "games": [game.to_dict() for game in games],
        "week": week,
        "seasonYear": season_year,
    }


@bp.route("/<int:game_id>", methods=["GET"])
def game_detail(game_id):
    game = db.session.get(Game, game_id)
    if game is None:
        raise not_found("Game not found")
    return {"game": game.to_dict()}


@bp.route("/teams/all", methods=["GET"])
@cached_route(timeout=3600, key_prefix="teams")
def list_teams():
    return {"teams": [team.to_dict() for team in Team.get_all_ordered()]}
