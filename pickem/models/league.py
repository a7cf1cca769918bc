import logging
from datetime import datetime, timezone

from pickem import db

from .enums import ScoringType, TieBreaker, enum_column_type

logger = logging.getLogger(__name__)

DEFAULT_MAX_PARTICIPANTS = 20


def default_settings():
    return {
        "tie_breaker": TieBreaker.CONFIDENCE.value,
        "allow_late_picks": False,
    }


class League(db.Model):
    __tablename__ = "leagues"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text)

    # League settings
    commissioner_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    is_public = db.Column(db.Boolean, default=False, nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    scoring_type = db.Column(
        enum_column_type(ScoringType), nullable=False, default=ScoringType.CONFIDENCE
    )
    max_participants = db.Column(
        db.Integer, nullable=False, default=DEFAULT_MAX_PARTICIPANTS
    )
    season_year = db.Column(db.Integer, nullable=False)
    settings = db.Column(db.JSON, nullable=False, default=default_settings)

    # Maintained by add/remove_participant; guards capacity atomically
    participant_count = db.Column(db.Integer, nullable=False, default=0)

    # Timestamps
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    members = db.relationship(
        "LeagueMember", backref="league", lazy="dynamic", cascade="all, delete-orphan"
    )
    picks = db.relationship(
        "Pick", backref="league", lazy="dynamic", cascade="all, delete-orphan"
    )

    __table_args__ = (
        db.Index("idx_league_public_active", "is_public", "is_active"),
        db.Index("idx_league_commissioner", "commissioner_id"),
        db.CheckConstraint(
            "max_participants >= 2 AND max_participants <= 100",
            name="valid_max_participants",
        ),
        db.CheckConstraint(
            "participant_count <= max_participants", name="league_capacity"
        ),
    )

    def __repr__(self):
        return f"<League {self.name}>"

    @property
    def tie_breaker(self):
        return (self.settings or {}).get("tie_breaker", TieBreaker.CONFIDENCE.value)

    @property
    def allow_late_picks(self):
        return bool((self.settings or {}).get("allow_late_picks", False))

    def is_full(self):
        return self.participant_count >= self.max_participants

    def has_participant(self, user_id):
        """Check if user is a participant"""
        from .league_member import LeagueMember

        return (
            db.session.query(LeagueMember.id)
            .filter_by(league_id=self.id, user_id=user_id)
            .first()
            is not None
        )

    def count_participants(self):
        return self.members.count()

    def get_participants(self):
        """Participants in join order"""
        from .league_member import LeagueMember
        from .user import User

        return (
            User.query.join(LeagueMember, LeagueMember.user_id == User.id)
            .filter(LeagueMember.league_id == self.id)
            .order_by(LeagueMember.joined_at, LeagueMember.id)
            .all()
        )

    def add_participant(self, user):
        """Add a user to the league.

        Capacity is claimed with a conditional UPDATE so concurrent joins
        cannot overshoot max_participants; a concurrent duplicate insert
        fails on the unique constraint when the session flushes.
        """
        from .league_member import LeagueMember

        if self.has_participant(user.id):
            return False, "User is already a participant in this league"

        claimed = db.session.execute(
            db.update(League)
            .where(
                League.id == self.id,
                League.participant_count < League.max_participants,
            )
            .values(participant_count=League.participant_count + 1)
            .execution_options(synchronize_session=False)
        )
        db.session.expire(self, ["participant_count"])

        if claimed.rowcount == 0:
            return False, "League is full"

        db.session.add(LeagueMember(league_id=self.id, user_id=user.id))
        db.session.flush()
        logger.info(f"User {user.id} joined league {self.id}")
        return True, "Successfully joined league"

    def remove_participant(self, user_id):
        """Remove a user from the league (never the commissioner)"""
        from .league_member import LeagueMember

        if user_id == self.commissioner_id:
            return False, "Commissioner cannot be removed from the league"

        removed = LeagueMember.query.filter_by(
            league_id=self.id, user_id=user_id
        ).delete(synchronize_session=False)
        if not removed:
            return False, "User is not a participant in this league"

        db.session.execute(
            db.update(League)
            .where(League.id == self.id, League.participant_count > 0)
            .values(participant_count=League.participant_count - 1)
            .execution_options(synchronize_session=False)
        )
        db.session.expire(self, ["participant_count"])
        logger.info(f"User {user_id} left league {self.id}")
        return True, "Successfully left league"

    def to_dict(self, include_commissioner=False):
        """Convert league to dictionary for API responses"""
        data = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "commissioner_id": self.commissioner_id,
            "is_public": self.is_public,
            "is_active": self.is_active,
            "scoring_type": self.scoring_type.value if self.scoring_type else None,
            "max_participants": self.max_participants,
            "participant_count": self.participant_count,
            "is_full": self.is_full(),
            "season_year": self.season_year,
            "settings": self.settings,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

        if include_commissioner:
            data["commissioner"] = (
                self.commissioner.to_summary_dict() if self.commissioner else None
            )

        return data
