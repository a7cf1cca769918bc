from datetime import datetime, timezone

from pickem import db

# Static reference data for the 32 franchises: (city, name, abbreviation, conference, division)
NFL_TEAMS = [
    ("Buffalo", "Bills", "BUF", "AFC", "East"),
    ("Miami", "Dolphins", "MIA", "AFC", "East"),
    ("New England", "Patriots", "NE", "AFC", "East"),
    ("New York", "Jets", "NYJ", "AFC", "East"),
    ("Baltimore", "Ravens", "BAL", "AFC", "North"),
    ("Cincinnati", "Bengals", "CIN", "AFC", "North"),
    ("Cleveland", "Browns", "CLE", "AFC", "North"),
    ("Pittsburgh", "Steelers", "PIT", "AFC", "North"),
    ("Houston", "Texans", "HOU", "AFC", "South"),
    ("Indianapolis", "Colts", "IND", "AFC", "South"),
    ("Jacksonville", "Jaguars", "JAX", "AFC", "South"),
    ("Tennessee", "Titans", "TEN", "AFC", "South"),
    ("Denver", "Broncos", "DEN", "AFC", "West"),
    ("Kansas City", "Chiefs", "KC", "AFC", "West"),
    ("Las Vegas", "Raiders", "LV", "AFC", "West"),
    ("Los Angeles", "Chargers", "LAC", "AFC", "West"),
    ("Dallas", "Cowboys", "DAL", "NFC", "East"),
    ("New York", "Giants", "NYG", "NFC", "East"),
    ("Philadelphia", "Eagles", "PHI", "NFC", "East"),
    ("Washington", "Commanders", "WAS", "NFC", "East"),
    ("Chicago", "Bears", "CHI", "NFC", "North"),
    ("Detroit", "Lions", "DET", "NFC", "North"),
    ("Green Bay", "Packers", "GB", "NFC", "North"),
    ("Minnesota", "Vikings", "MIN", "NFC", "North"),
    ("Atlanta", "Falcons", "ATL", "NFC", "South"),
    ("Carolina", "Panthers", "CAR", "NFC", "South"),
    ("New Orleans", "Saints", "NO", "NFC", "South"),
    ("Tampa Bay", "Buccaneers", "TB", "NFC", "South"),
    ("Arizona", "Cardinals", "ARI", "NFC", "West"),
    ("Los Angeles", "Rams", "LAR", "NFC", "West"),
    ("San Francisco", "49ers", "SF", "NFC", "West"),
    ("Seattle", "Seahawks", "SEA", "NFC", "West"),
]


class Team(db.Model):
    __tablename__ = "teams"

    id = db.Column(db.Integer, primary_key=True)

    # Team identification
    name = db.Column(db.String(100), nullable=False)
    city = db.Column(db.String(100), nullable=False)
    abbreviation = db.Column(db.String(10), unique=True, nullable=False, index=True)

    # Team details
    conference = db.Column(db.String(10), nullable=False)  # AFC or NFC
    division = db.Column(db.String(20), nullable=False)  # North, South, East, West

    logo_url = db.Column(db.String(500))

    # Timestamps
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    # Relationships
    home_games = db.relationship(
        "Game",
        foreign_keys="Game.home_team_id",
        backref=db.backref("home_team", lazy="joined"),
        lazy="dynamic",
    )
    away_games = db.relationship(
        "Game",
        foreign_keys="Game.away_team_id",
        backref=db.backref("away_team", lazy="joined"),
        lazy="dynamic",
    )

    __table_args__ = (
        db.CheckConstraint("conference IN ('AFC', 'NFC')", name="valid_conference"),
    )

    def __repr__(self):
        return f"<Team {self.city} {self.name}>"

    @property
    def full_name(self):
        """Return full team name"""
        return f"{self.city} {self.name}"

    @staticmethod
    def get_by_abbreviation(abbreviation):
        return Team.query.filter_by(abbreviation=abbreviation.upper()).first()

    @staticmethod
    def get_all_ordered():
        """All teams grouped by conference and division"""
        return Team.query.order_by(Team.conference, Team.division, Team.name).all()

    @staticmethod
    def seed_all():
        """Insert any missing franchises; returns the number created"""
        existing = {abbr for (abbr,) in db.session.query(Team.abbreviation).all()}
        created = 0
        for city, name, abbreviation, conference, division in NFL_TEAMS:
            if abbreviation in existing:
                continue
            db.session.add(
                Team(
                    city=city,
                    name=name,
                    abbreviation=abbreviation,
                    conference=conference,
                    division=division,
                )
            )
            created += 1
        return created

    def to_dict(self):
        """Convert team to dictionary for API responses"""
        return {
            "id": self.id,
            "name": self.name,
            "city": self.city,
            "full_name": self.full_name,
            "abbreviation": self.abbreviation,
            "conference": self.conference,
            "division": self.division,
            "logo_url": self.logo_url,
        }
