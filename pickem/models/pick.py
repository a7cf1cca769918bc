from datetime import datetime, timezone

from pickem import db

from .enums import OverUnderSide, PickType, ScoringType, enum_column_type

MIN_CONFIDENCE_POINTS = 1
MAX_CONFIDENCE_POINTS = 16  # Max 16 games per week


class Pick(db.Model):
    __tablename__ = "picks"

    id = db.Column(db.Integer, primary_key=True)

    # Pick identification
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    league_id = db.Column(db.Integer, db.ForeignKey("leagues.id"), nullable=False)
    game_id = db.Column(db.Integer, db.ForeignKey("games.id"), nullable=False)

    # Pick details
    pick_type = db.Column(enum_column_type(PickType), nullable=False)
    picked_team_id = db.Column(
        db.Integer, db.ForeignKey("teams.id"), nullable=True
    )  # straight and spread picks
    side = db.Column(enum_column_type(OverUnderSide), nullable=True)  # over_under picks
    confidence_points = db.Column(db.Integer)

    # Cached verdict for display; standings always recompute from the game
    is_correct = db.Column(db.Boolean)

    # Timestamps
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    picked_team = db.relationship("Team", foreign_keys=[picked_team_id])

    # Constraints and indexes
    __table_args__ = (
        db.UniqueConstraint(
            "user_id",
            "league_id",
            "game_id",
            "pick_type",
            name="unique_user_league_game_pick_type",
        ),
        db.Index("idx_pick_league", "league_id"),
        db.Index("idx_pick_user", "user_id"),
        db.Index("idx_pick_game", "game_id"),
        db.CheckConstraint(
            f"confidence_points IS NULL OR (confidence_points >= {MIN_CONFIDENCE_POINTS} "
            f"AND confidence_points <= {MAX_CONFIDENCE_POINTS})",
            name="valid_confidence_points",
        ),
    )

    def __repr__(self):
        choice = (
            self.picked_team.abbreviation
            if self.picked_team
            else (self.side.value if self.side else "TBD")
        )
        return f"<Pick user_id={self.user_id} game_id={self.game_id} {self.pick_type} {choice}>"

    @property
    def week(self):
        """Get the week number from the associated game"""
        return self.game.week if self.game else None

    @staticmethod
    def find_existing(user_id, league_id, game_id, pick_type):
        """A user's pick of this type for a game in a league, if any"""
        return Pick.query.filter_by(
            user_id=user_id,
            league_id=league_id,
            game_id=game_id,
            pick_type=PickType(pick_type),
        ).first()

    @staticmethod
    def validate_choice(game, league, pick_type, picked_team_id, side, confidence_points):
        """Check the shape of a pick against its game and league.

        Returns:
            (is_valid, message)
        """
        pick_type = PickType(pick_type)

        if pick_type.picks_team:
            if picked_team_id is None:
                return False, f"A {pick_type.value} pick requires a picked team"
            if side is not None:
                return False, "Only over/under picks take a side"
            if not game.involves_team(picked_team_id):
                return False, "Picked team is not playing in this game"
        else:
            if side is None:
                return False, "An over/under pick requires a side (over or under)"
            if picked_team_id is not None:
                return False, "Over/under picks cannot name a team"

        if confidence_points is not None:
            if league.scoring_type != ScoringType.CONFIDENCE:
                return False, "Confidence points are only used in confidence leagues"
            if pick_type != PickType.STRAIGHT:
                return False, "Confidence points can only be assigned to straight picks"
            if not MIN_CONFIDENCE_POINTS <= confidence_points <= MAX_CONFIDENCE_POINTS:
                return (
                    False,
                    f"Confidence points must be between {MIN_CONFIDENCE_POINTS} "
                    f"and {MAX_CONFIDENCE_POINTS}",
                )

        return True, "Valid pick"

    def refresh_result(self):
        """Recompute the cached is_correct verdict from the game"""
        from pickem.utils.scoring import evaluate_pick

        if not self.game:
            return
        self.is_correct = evaluate_pick(self, self.game)

    def to_dict(self, include_game=True):
        """Convert pick to dictionary for API responses"""
        data = {
            "id": self.id,
            "user_id": self.user_id,
            "league_id": self.league_id,
            "game_id": self.game_id,
            "week": self.week,
            "pick_type": self.pick_type.value if self.pick_type else None,
            "picked_team_id": self.picked_team_id,
            "picked_team": self.picked_team.to_dict() if self.picked_team else None,
            "side": self.side.value if self.side else None,
            "confidence_points": self.confidence_points,
            "is_correct": self.is_correct,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
        if include_game:
            data["game"] = self.game.to_dict() if self.game else None
            data["league"] = (
                {"id": self.league.id, "name": self.league.name}
                if self.league
                else None
            )
        return data
