import logging
from datetime import datetime, timezone
from typing import NamedTuple

from pickem import db

from .enums import GameStatus, enum_column_type

logger = logging.getLogger(__name__)

MAX_WEEK = 22  # 18 regular season weeks plus four playoff rounds


class FinalScore(NamedTuple):
    """Score of a decided game; only exists once a game is final"""

    home: int
    away: int

    @property
    def total(self):
        return self.home + self.away


class Game(db.Model):
    __tablename__ = "games"

    id = db.Column(db.Integer, primary_key=True)

    # Game identification
    week = db.Column(db.Integer, nullable=False)
    season_year = db.Column(db.Integer, nullable=False)

    # Teams
    home_team_id = db.Column(db.Integer, db.ForeignKey("teams.id"), nullable=False)
    away_team_id = db.Column(db.Integer, db.ForeignKey("teams.id"), nullable=False)

    # Kickoff
    game_time = db.Column(db.DateTime, nullable=False)

    # Scores
    home_score = db.Column(db.Integer)
    away_score = db.Column(db.Integer)

    # Lines
    spread = db.Column(db.Float)  # Home-relative (negative = home team favored)
    over_under = db.Column(db.Float)  # Total points line

    status = db.Column(
        enum_column_type(GameStatus), nullable=False, default=GameStatus.SCHEDULED
    )

    # Timestamps
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    picks = db.relationship(
        "Pick", backref="game", lazy="dynamic", cascade="all, delete-orphan"
    )

    __table_args__ = (
        db.Index("idx_game_season_week", "season_year", "week"),
        db.Index("idx_game_time", "game_time"),
        db.CheckConstraint("home_team_id != away_team_id", name="different_teams"),
        db.CheckConstraint(f"week >= 1 AND week <= {MAX_WEEK}", name="valid_week"),
    )

    def __repr__(self):
        return f'<Game {self.away_team.abbreviation if self.away_team else "TBD"} @ {self.home_team.abbreviation if self.home_team else "TBD"} Week {self.week}>'

    @property
    def is_final(self):
        return self.status == GameStatus.FINAL

    @property
    def final_score(self):
        """FinalScore when the game is final with both scores, otherwise None"""
        if not self.is_final or self.home_score is None or self.away_score is None:
            return None
        return FinalScore(self.home_score, self.away_score)

    @property
    def winning_team_id(self):
        """Winning team id (None if game not final or tie)"""
        score = self.final_score
        if score is None or score.home == score.away:
            return None
        return self.home_team_id if score.home > score.away else self.away_team_id

    @property
    def is_tie(self):
        score = self.final_score
        return score is not None and score.home == score.away

    def involves_team(self, team_id):
        return team_id in (self.home_team_id, self.away_team_id)

    def has_started(self):
        """Check if kickoff has passed"""
        if self.status in (GameStatus.IN_PROGRESS, GameStatus.FINAL):
            return True
        if not self.game_time:
            return False
        now_utc = datetime.now(timezone.utc)
        game_time = self.game_time

        # If game_time is timezone-naive, assume it's in UTC
        if game_time.tzinfo is None:
            game_time = game_time.replace(tzinfo=timezone.utc)

        return now_utc >= game_time

    def update_score(self, home_score, away_score, status=GameStatus.FINAL):
        """Record a result and refresh the cached verdict on every pick.

        Cached standings are cleared when the caller commits.
        """
        status = GameStatus(status)
        if status == GameStatus.FINAL and (home_score is None or away_score is None):
            raise ValueError("A final game needs both scores")
        if status == GameStatus.SCHEDULED:
            home_score = away_score = None

        self.home_score = home_score
        self.away_score = away_score
        self.status = status

        # NOTE: picks is lazy="dynamic", so we need .all() to get actual list
        picks = self.picks.all()
        for pick in picks:
            pick.refresh_result()

        logger.info(
            f"Game {self.id} week {self.week} now {status.value} "
            f"({away_score}-{home_score}); refreshed {len(picks)} picks"
        )

        from pickem.utils.cache_utils import mark_standings_stale

        mark_standings_stale()

    @staticmethod
    def get_games_for_week(season_year, week):
        """Get all games for a specific week with eager loading"""
        from sqlalchemy.orm import joinedload

        return (
            Game.query.filter_by(season_year=season_year, week=week)
            .options(joinedload(Game.home_team), joinedload(Game.away_team))
            .order_by(Game.game_time)
            .all()
        )

    def to_dict(self):
        """Convert game to dictionary for API responses"""
        return {
            "id": self.id,
            "week": self.week,
            "season_year": self.season_year,
            "game_time": self.game_time.isoformat() if self.game_time else None,
            "home_team": self.home_team.to_dict() if self.home_team else None,
            "away_team": self.away_team.to_dict() if self.away_team else None,
            "home_score": self.home_score,
            "away_score": self.away_score,
            "spread": self.spread,
            "over_under": self.over_under,
            "status": self.status.value if self.status else None,
            "winning_team_id": self.winning_team_id,
            "is_pickable": not self.has_started(),
        }
