from datetime import datetime, timedelta, timezone

import pytest
from flask import g

from pickem import create_app, db
from pickem.models import Game, GameStatus, League, ScoringType, Team, User


@pytest.fixture
def app():
    app = create_app("testing")
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    # Requests reuse the fixture's app context, so g outlives each request
    @app.teardown_request
    def forget_login_user(exc):
        g.pop("_login_user", None)

    return app.test_client()


@pytest.fixture
def make_user(app):
    counter = {"n": 0}

    def _make_user(username=None, password="Password123", **kwargs):
        counter["n"] += 1
        username = username or f"player{counter['n']}"
        user = User(username=username, email=f"{username}@example.com", **kwargs)
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        return user

    return _make_user


@pytest.fixture
def auth_headers():
    def _auth_headers(user):
        return {"Authorization": f"Bearer {user.generate_auth_token()}"}

    return _auth_headers


@pytest.fixture
def teams(app):
    Team.seed_all()
    db.session.commit()
    return {team.abbreviation: team for team in Team.query.all()}


@pytest.fixture
def make_game(app, teams):
    def _make_game(
        home="KC",
        away="BUF",
        week=1,
        season_year=2025,
        kickoff=None,
        **kwargs,
    ):
        if kickoff is None:
            kickoff = datetime.now(timezone.utc) + timedelta(days=2)
        game = Game(
            home_team_id=teams[home].id,
            away_team_id=teams[away].id,
            week=week,
            season_year=season_year,
            game_time=kickoff,
            status=kwargs.pop("status", GameStatus.SCHEDULED),
            **kwargs,
        )
        db.session.add(game)
        db.session.commit()
        return game

    return _make_game


@pytest.fixture
def make_league(app):
    def _make_league(commissioner, scoring_type=ScoringType.STRAIGHT, **kwargs):
        league = League(
            name=kwargs.pop("name", "Sunday Crew"),
            commissioner_id=commissioner.id,
            scoring_type=scoring_type,
            season_year=kwargs.pop("season_year", 2025),
            **kwargs,
        )
        db.session.add(league)
        db.session.flush()
        league.add_participant(commissioner)
        db.session.commit()
        return league

    return _make_league
