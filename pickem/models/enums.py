import enum


class ScoringType(str, enum.Enum):
    CONFIDENCE = "confidence"
    STRAIGHT = "straight"
    SURVIVOR = "survivor"


class GameStatus(str, enum.Enum):
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    FINAL = "final"


class PickType(str, enum.Enum):
    STRAIGHT = "straight"
    SPREAD = "spread"
    OVER_UNDER = "over_under"

    @property
    def picks_team(self):
        """Straight and spread picks name a team; over/under picks name a side"""
        return self is not PickType.OVER_UNDER


class OverUnderSide(str, enum.Enum):
    OVER = "over"
    UNDER = "under"


class TieBreaker(str, enum.Enum):
    CONFIDENCE = "confidence"
    HEAD_TO_HEAD = "headToHead"
    RANDOM = "random"


def enum_column_type(enum_cls):
    """Store enum values (not member names) in a portable VARCHAR column"""
    from pickem import db

    return db.Enum(
        enum_cls,
        values_callable=lambda members: [member.value for member in members],
        native_enum=False,
        validate_strings=True,
        length=20,
    )
