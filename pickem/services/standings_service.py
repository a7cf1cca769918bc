"""
Standings engine for League Pick'em

Folds a league's picks into one row per participant and ranks the rows.
aggregate_standings() and rank_standings() are pure: they read already
loaded participants, picks and games and never touch the session, so
concurrent standings requests share no state. get_league_standings()
is the database-facing entry point used by the API and the CLI.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from sqlalchemy.orm import joinedload

from pickem.errors import ScoringError
from pickem.models import Game, League, Pick
from pickem.models.enums import PickType, ScoringType
from pickem.utils.logging_config import ContextualLogger, get_logger
from pickem.utils.scoring import evaluate_pick, score_pick

logger = get_logger(__name__)


@dataclass
class StandingsRow:
    user_id: int
    user: object = None
    total_points: int = 0
    correct_picks: int = 0
    total_picks: int = 0
    win_percentage: float = 0.0
    weekly_points: Dict[int, int] = field(default_factory=dict)
    rank: Optional[int] = None

    @property
    def sort_key(self):
        return (self.total_points, self.correct_picks, self.win_percentage)

    def to_dict(self):
        """Serialize for the standings endpoint"""
        user = self.user
        return {
            "userId": self.user_id,
            "user": user.to_summary_dict() if user is not None else {"id": self.user_id},
            "totalPoints": self.total_points,
            "correctPicks": self.correct_picks,
            "totalPicks": self.total_picks,
            "winPercentage": self.win_percentage,
            "rank": self.rank,
            "weeklyPoints": {
                str(week): points for week, points in sorted(self.weekly_points.items())
            },
        }


def _has_choice(pick):
    """Team-based picks need their picked team, over/under picks their side"""
    try:
        pick_type = PickType(pick.pick_type)
    except ValueError:
        raise ScoringError(f"Unknown pick type: {pick.pick_type!r}") from None

    if pick_type.picks_team:
        return pick.picked_team is not None
    return pick.side is not None


def aggregate_standings(
    participants: Iterable,
    picks: Iterable,
    scoring_type,
    week: Optional[int] = None,
) -> Dict[int, StandingsRow]:
    """
    Fold picks into one StandingsRow per participant.

    Args:
        participants: users currently in the league
        picks: the league's picks with game and picked_team loaded
        scoring_type: the league's ScoringType
        week: optional week filter; None folds every week

    Returns:
        dict of user_id -> StandingsRow, one per participant
    """
    try:
        scoring_type = ScoringType(scoring_type)
    except ValueError:
        raise ScoringError(f"Unknown scoring type: {scoring_type!r}") from None

    rows = {user.id: StandingsRow(user_id=user.id, user=user) for user in participants}

    for pick in picks:
        game = pick.game
        if game is None:
            logger.warning(f"Skipping pick {pick.id}: game is missing")
            continue

        if week is not None and game.week != week:
            continue

        if not _has_choice(pick):
            logger.warning(f"Skipping pick {pick.id}: picked team or side is missing")
            continue

        # Standings reflect current membership only
        row = rows.get(pick.user_id)
        if row is None:
            continue

        row.total_picks += 1

        verdict = evaluate_pick(pick, game)
        if verdict is not True:
            continue

        points = score_pick(pick, verdict, scoring_type)
        row.correct_picks += 1
        row.total_points += points
        row.weekly_points[game.week] = row.weekly_points.get(game.week, 0) + points

    for row in rows.values():
        row.win_percentage = (
            row.correct_picks / row.total_picks if row.total_picks > 0 else 0.0
        )

    return rows


def rank_standings(rows: Iterable[StandingsRow]) -> List[StandingsRow]:
    """
    Order rows by total points, then correct picks, then win percentage
    (all descending) and number them from 1.

    Rows tied on every key keep their input order and still receive
    distinct consecutive ranks.
    """
    ordered = sorted(rows, key=lambda row: row.sort_key, reverse=True)
    for position, row in enumerate(ordered, start=1):
        row.rank = position
    return ordered


def load_league_picks(league_id, week=None):
    """Picks for a league joined with their game, game teams and picked team"""
    query = (
        Pick.query.filter(Pick.league_id == league_id)
        .join(Game, Pick.game_id == Game.id)
        .options(
            joinedload(Pick.game).joinedload(Game.home_team),
            joinedload(Pick.game).joinedload(Game.away_team),
            joinedload(Pick.picked_team),
        )
        .order_by(Game.week, Pick.id)
    )
    if week is not None:
        query = query.filter(Game.week == week)
    return query.all()


def compute_standings(league: League, week: Optional[int] = None) -> List[StandingsRow]:
    """Load a league's participants and picks and return ranked rows"""
    log = ContextualLogger(__name__, {"league_id": league.id, "week": week or "season"})

    participants = league.get_participants()
    picks = load_league_picks(league.id, week)

    rows = aggregate_standings(participants, picks, league.scoring_type, week)
    ranked = rank_standings(rows.values())

    log.info(
        f"Computed standings for {len(ranked)} participants from {len(picks)} picks"
    )
    return ranked


def get_league_standings(league: League, week: Optional[int] = None):
    """Standings payload for the API"""
    return {
        "standings": [row.to_dict() for row in compute_standings(league, week)],
        "week": week,
        "leagueId": str(league.id),
        "scoringType": ScoringType(league.scoring_type).value,
    }
