from datetime import datetime, timedelta, timezone

import pytest

from pickem import db
from pickem.models import Pick, ScoringType


@pytest.fixture
def setup(make_user, make_league, make_game, teams, auth_headers):
    owner = make_user("owner")
    league = make_league(owner, scoring_type=ScoringType.CONFIDENCE)
    game = make_game(spread=-3.5, over_under=44.5)
    return {
        "user": owner,
        "league": league,
        "game": game,
        "teams": teams,
        "headers": auth_headers(owner),
    }


def make_pick(client, setup, **overrides):
    payload = {
        "game_id": setup["game"].id,
        "league_id": setup["league"].id,
        "pick_type": "straight",
        "picked_team_id": setup["teams"]["KC"].id,
    }
    payload.update(overrides)
    return client.post("/api/v1/picks", json=payload, headers=setup["headers"])


class TestMakePick:
    def test_straight_pick_with_confidence(self, client, setup):
        response = make_pick(client, setup, confidence_points=12)

        assert response.status_code == 201
        pick = response.get_json()["pick"]
        assert pick["pick_type"] == "straight"
        assert pick["confidence_points"] == 12
        assert pick["picked_team"]["abbreviation"] == "KC"
        assert pick["is_correct"] is None

    def test_over_under_pick(self, client, setup):
        response = make_pick(
            client, setup, pick_type="over_under", picked_team_id=None, side="over"
        )

        assert response.status_code == 201
        pick = response.get_json()["pick"]
        assert pick["side"] == "over"
        assert pick["picked_team_id"] is None

    def test_over_under_needs_side(self, client, setup):
        response = make_pick(client, setup, pick_type="over_under", picked_team_id=None)
        assert response.status_code == 400

    def test_over_under_rejects_team(self, client, setup):
        response = make_pick(client, setup, pick_type="over_under", side="under")
        assert response.status_code == 400

    def test_team_pick_rejects_side(self, client, setup):
        response = make_pick(client, setup, pick_type="spread", side="over")
        assert response.status_code == 400

    def test_team_not_in_game(self, client, setup):
        response = make_pick(client, setup, picked_team_id=setup["teams"]["DAL"].id)

        assert response.status_code == 400
        assert response.get_json()["error"] == "Picked team is not playing in this game"

    def test_confidence_only_on_straight_picks(self, client, setup):
        response = make_pick(client, setup, pick_type="spread", confidence_points=5)
        assert response.status_code == 400

    def test_confidence_only_in_confidence_leagues(
        self, client, setup, make_league
    ):
        straight_league = make_league(setup["user"], name="Flat")
        response = make_pick(
            client, setup, league_id=straight_league.id, confidence_points=5
        )
        assert response.status_code == 400

    def test_confidence_out_of_range(self, client, setup):
        response = make_pick(client, setup, confidence_points=17)

        assert response.status_code == 400
        assert "confidence_points" in response.get_json()["details"]

    def test_missing_game(self, client, setup):
        assert make_pick(client, setup, game_id=9999).status_code == 404

    def test_missing_league(self, client, setup):
        assert make_pick(client, setup, league_id=9999).status_code == 404

    def test_not_a_participant(self, client, setup, make_user, auth_headers):
        outsider = make_user("outsider")
        response = client.post(
            "/api/v1/picks",
            json={
                "game_id": setup["game"].id,
                "league_id": setup["league"].id,
                "pick_type": "straight",
                "picked_team_id": setup["teams"]["KC"].id,
            },
            headers=auth_headers(outsider),
        )
        assert response.status_code == 403

    def test_after_kickoff(self, client, setup, make_game):
        started = make_game(
            home="DAL", away="PHI", kickoff=datetime.now(timezone.utc) - timedelta(minutes=5)
        )
        response = make_pick(
            client, setup, game_id=started.id, picked_team_id=setup["teams"]["DAL"].id
        )
        assert response.status_code == 400

    def test_late_picks_allowed_by_league(self, client, setup, make_game):
        setup["league"].settings = {"tie_breaker": "confidence", "allow_late_picks": True}
        db.session.commit()
        started = make_game(
            home="DAL", away="PHI", kickoff=datetime.now(timezone.utc) - timedelta(minutes=5)
        )

        response = make_pick(
            client, setup, game_id=started.id, picked_team_id=setup["teams"]["DAL"].id
        )
        assert response.status_code == 201

    def test_duplicate(self, client, setup):
        assert make_pick(client, setup).status_code == 201

        response = make_pick(client, setup, picked_team_id=setup["teams"]["BUF"].id)
        assert response.status_code == 409

    def test_duplicate_insert_after_lookup(self, client, setup, monkeypatch):
        assert make_pick(client, setup).status_code == 201

        # A concurrent request that passed the lookup before this one committed
        monkeypatch.setattr(Pick, "find_existing", staticmethod(lambda *args: None))
        response = make_pick(client, setup, picked_team_id=setup["teams"]["BUF"].id)

        assert response.status_code == 409
        assert response.get_json()["error"] == "Resource already exists"
        assert Pick.query.filter_by(league_id=setup["league"].id).count() == 1
        assert make_pick(client, setup, pick_type="spread").status_code == 201

    def test_same_game_different_type_allowed(self, client, setup):
        assert make_pick(client, setup).status_code == 201
        assert make_pick(client, setup, pick_type="spread").status_code == 201

    def test_missing_fields(self, client, setup):
        response = client.post("/api/v1/picks", json={}, headers=setup["headers"])

        assert response.status_code == 400
        assert {"game_id", "league_id", "pick_type"} <= set(
            response.get_json()["details"]
        )

    def test_pick_updates_standings(self, client, setup):
        url = f"/api/v1/leagues/{setup['league'].id}/standings"
        assert client.get(url).get_json()["standings"][0]["totalPicks"] == 0

        make_pick(client, setup)

        assert client.get(url).get_json()["standings"][0]["totalPicks"] == 1


class TestListPicks:
    def test_filters(self, client, setup, make_game):
        week2 = make_game(home="DAL", away="PHI", week=2)
        make_pick(client, setup)
        make_pick(client, setup, game_id=week2.id, picked_team_id=setup["teams"]["PHI"].id)

        all_picks = client.get("/api/v1/picks", headers=setup["headers"]).get_json()["picks"]
        assert len(all_picks) == 2

        week2_picks = client.get(
            "/api/v1/picks?week=2", headers=setup["headers"]
        ).get_json()["picks"]
        assert [pick["game_id"] for pick in week2_picks] == [week2.id]

        other_league = client.get(
            "/api/v1/picks?leagueId=9999", headers=setup["headers"]
        ).get_json()["picks"]
        assert other_league == []

    def test_only_own_picks(self, client, setup, make_user, auth_headers):
        make_pick(client, setup)
        stranger = make_user("stranger")

        picks = client.get("/api/v1/picks", headers=auth_headers(stranger)).get_json()["picks"]
        assert picks == []


class TestChangePick:
    def test_update_team(self, client, setup):
        pick_id = make_pick(client, setup).get_json()["pick"]["id"]

        response = client.put(
            f"/api/v1/picks/{pick_id}",
            json={"picked_team_id": setup["teams"]["BUF"].id, "confidence_points": 3},
            headers=setup["headers"],
        )

        assert response.status_code == 200
        pick = response.get_json()["pick"]
        assert pick["picked_team"]["abbreviation"] == "BUF"
        assert pick["confidence_points"] == 3

    def test_update_validates_team(self, client, setup):
        pick_id = make_pick(client, setup).get_json()["pick"]["id"]

        response = client.put(
            f"/api/v1/picks/{pick_id}",
            json={"picked_team_id": setup["teams"]["DAL"].id},
            headers=setup["headers"],
        )
        assert response.status_code == 400

    def test_update_someone_elses_pick(self, client, setup, make_user, auth_headers):
        pick_id = make_pick(client, setup).get_json()["pick"]["id"]

        response = client.put(
            f"/api/v1/picks/{pick_id}",
            json={"picked_team_id": setup["teams"]["BUF"].id},
            headers=auth_headers(make_user("thief")),
        )
        assert response.status_code == 403

    def test_update_after_kickoff(self, client, setup):
        pick_id = make_pick(client, setup).get_json()["pick"]["id"]
        setup["game"].game_time = datetime.now(timezone.utc) - timedelta(minutes=1)
        db.session.commit()

        response = client.put(
            f"/api/v1/picks/{pick_id}",
            json={"picked_team_id": setup["teams"]["BUF"].id},
            headers=setup["headers"],
        )
        assert response.status_code == 400

    def test_delete(self, client, setup):
        pick_id = make_pick(client, setup).get_json()["pick"]["id"]

        response = client.delete(f"/api/v1/picks/{pick_id}", headers=setup["headers"])

        assert response.status_code == 200
        assert db.session.get(Pick, pick_id) is None

    def test_delete_final_game(self, client, setup):
        pick_id = make_pick(client, setup).get_json()["pick"]["id"]
        setup["game"].update_score(30, 10)
        db.session.commit()

        response = client.delete(f"/api/v1/picks/{pick_id}", headers=setup["headers"])
        assert response.status_code == 400

    def test_delete_missing(self, client, setup):
        response = client.delete("/api/v1/picks/4242", headers=setup["headers"])
        assert response.status_code == 404

