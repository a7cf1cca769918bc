from pickem import db  # noqa: F401 - imported for model imports

from .enums import GameStatus, OverUnderSide, PickType, ScoringType, TieBreaker
from .game import FinalScore, Game
from .league import League
from .league_member import LeagueMember
from .pick import Pick
from .team import Team
from .user import User

__all__ = [
    "User",
    "Team",
    "Game",
    "FinalScore",
    "League",
    "LeagueMember",
    "Pick",
    "GameStatus",
    "OverUnderSide",
    "PickType",
    "ScoringType",
    "TieBreaker",
]
