from datetime import datetime, timedelta, timezone

from pickem import db
from pickem.models import GameStatus


def test_list_games_by_season_and_week(client, make_game):
    make_game(week=1, home="KC", away="BUF")
    make_game(week=2, home="DAL", away="PHI")
    make_game(week=1, home="GB", away="CHI", season_year=2024)

    data = client.get("/api/v1/games?seasonYear=2025").get_json()
    assert data["seasonYear"] == 2025
    assert [game["week"] for game in data["games"]] == [1, 2]

    data = client.get("/api/v1/games?seasonYear=2025&week=2").get_json()
    assert [game["home_team"]["abbreviation"] for game in data["games"]] == ["DAL"]


def test_list_games_defaults_to_current_season(client, make_game):
    this_year = datetime.now(timezone.utc).year
    make_game(season_year=this_year)

    data = client.get("/api/v1/games").get_json()
    assert data["seasonYear"] == this_year
    assert len(data["games"]) == 1


def test_games_for_week(client, make_game):
    make_game(week=5, home="SF", away="SEA")

    data = client.get("/api/v1/games/week/5?seasonYear=2025").get_json()
    assert data["week"] == 5
    assert data["games"][0]["away_team"]["abbreviation"] == "SEA"


def test_games_for_invalid_week(client):
    assert client.get("/api/v1/games/week/30").status_code == 400


def test_game_detail(client, make_game):
    game = make_game(spread=-3.5, over_under=47.5)

    data = client.get(f"/api/v1/games/{game.id}").get_json()["game"]
    assert data["spread"] == -3.5
    assert data["over_under"] == 47.5
    assert data["status"] == "scheduled"
    assert data["is_pickable"] is True
    assert data["winning_team_id"] is None


def test_game_detail_final(client, make_game, teams):
    game = make_game(
        kickoff=datetime.now(timezone.utc) - timedelta(hours=4),
        home_score=17,
        away_score=20,
        status=GameStatus.FINAL,
    )

    data = client.get(f"/api/v1/games/{game.id}").get_json()["game"]
    assert data["winning_team_id"] == teams["BUF"].id
    assert data["is_pickable"] is False


def test_game_not_found(client):
    assert client.get("/api/v1/games/12345").status_code == 404


def test_score_update_refreshes_game_listing(client, make_game):
    game = make_game()
    url = "/api/v1/games?seasonYear=2025"
    assert client.get(url).get_json()["games"][0]["status"] == "scheduled"

    game.update_score(31, 28)
    db.session.commit()

    assert client.get(url).get_json()["games"][0]["status"] == "final"


def test_teams(client, teams):
    data = client.get("/api/v1/games/teams/all").get_json()

    assert len(data["teams"]) == 32
    assert {team["conference"] for team in data["teams"]} == {"AFC", "NFC"}
