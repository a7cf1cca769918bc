"""
Scoring rules for League Pick'em

This module judges individual picks against game results and converts a
verdict into points for a league's scoring type. Aggregation into
standings lives in pickem/services/standings_service.py.

A verdict is tri-state, matching Pick.is_correct:
    True   - pick is correct
    False  - pick is incorrect (includes ties and pushes)
    None   - undecided, the game is not final yet
"""

from pickem.errors import ScoringError
from pickem.models.enums import OverUnderSide, PickType, ScoringType


def evaluate_pick(pick, game):
    """
    Judge a single pick against its game.

    Args:
        pick: Pick with pick_type and picked_team_id or side
        game: Game the pick was made on

    Returns:
        True, False, or None when the game is not decided
    """
    score = game.final_score
    if score is None:
        return None

    try:
        pick_type = PickType(pick.pick_type)
    except ValueError:
        raise ScoringError(f"Unknown pick type: {pick.pick_type!r}") from None

    if pick_type == PickType.STRAIGHT:
        # A tied final has no winning team, so no straight pick is correct
        if score.home == score.away:
            return False
        winner_id = game.home_team_id if score.home > score.away else game.away_team_id
        return pick.picked_team_id == winner_id

    if pick_type == PickType.SPREAD:
        if game.spread is None:
            return None
        adjusted_home = score.home + game.spread
        if pick.picked_team_id == game.home_team_id:
            return adjusted_home > score.away
        if pick.picked_team_id == game.away_team_id:
            return score.away > adjusted_home
        return False

    if pick_type == PickType.OVER_UNDER:
        if game.over_under is None:
            return None
        # Pushes (total exactly on the line) lose
        if pick.side == OverUnderSide.OVER:
            return score.total > game.over_under
        if pick.side == OverUnderSide.UNDER:
            return score.total < game.over_under
        return False

    raise ScoringError(f"Unhandled pick type: {pick_type.value}")


def score_pick(pick, verdict, scoring_type):
    """
    Points earned by a pick in a league.

    Returns:
        confidence points (default 1) in confidence leagues, 1 in straight
        and survivor leagues, 0 when the verdict is not True
    """
    try:
        scoring_type = ScoringType(scoring_type)
    except ValueError:
        raise ScoringError(f"Unknown scoring type: {scoring_type!r}") from None

    if verdict is not True:
        return 0

    if scoring_type == ScoringType.CONFIDENCE:
        return pick.confidence_points or 1

    # Survivor elimination is not tracked; a surviving pick scores like straight
    return 1
