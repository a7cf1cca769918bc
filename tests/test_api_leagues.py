from datetime import datetime, timedelta, timezone

from pickem import cache, db
from pickem.models import GameStatus, League, Pick, PickType, ScoringType
from pickem.utils.cache_utils import STANDINGS_STALE_FLAG, standings_cache_key


def test_create_league(client, make_user, auth_headers):
    user = make_user()

    response = client.post(
        "/api/v1/leagues",
        json={
            "name": "Office Pool",
            "season_year": 2025,
            "is_public": True,
            "scoring_type": "straight",
            "max_participants": 8,
            "allow_late_picks": True,
        },
        headers=auth_headers(user),
    )

    assert response.status_code == 201
    league = response.get_json()["league"]
    assert league["commissioner_id"] == user.id
    assert league["participant_count"] == 1
    assert league["is_full"] is False
    assert league["scoring_type"] == "straight"
    assert league["settings"] == {"tie_breaker": "confidence", "allow_late_picks": True}
    assert league["commissioner"]["username"] == user.username


def test_create_league_defaults(client, make_user, auth_headers):
    response = client.post(
        "/api/v1/leagues",
        json={"name": "Defaults", "season_year": 2025},
        headers=auth_headers(make_user()),
    )

    league = response.get_json()["league"]
    assert league["scoring_type"] == "confidence"
    assert league["max_participants"] == 20
    assert league["is_public"] is False


def test_create_league_validation(client, make_user, auth_headers):
    response = client.post(
        "/api/v1/leagues",
        json={"name": "", "season_year": 1999, "scoring_type": "parlay", "max_participants": 1},
        headers=auth_headers(make_user()),
    )

    assert response.status_code == 400
    details = response.get_json()["details"]
    assert {"name", "season_year", "scoring_type", "max_participants"} <= set(details)


def test_create_league_requires_auth(client):
    response = client.post("/api/v1/leagues", json={"name": "X", "season_year": 2025})
    assert response.status_code == 401


def test_list_public_leagues(client, make_user, make_league):
    owner = make_user()
    make_league(owner, name="Public 2025", is_public=True)
    make_league(owner, name="Public 2024", is_public=True, season_year=2024)
    make_league(owner, name="Private", is_public=False)

    data = client.get("/api/v1/leagues").get_json()
    assert {league["name"] for league in data["leagues"]} == {"Public 2025", "Public 2024"}
    assert data["pagination"]["total"] == 2

    data = client.get("/api/v1/leagues?seasonYear=2024").get_json()
    assert [league["name"] for league in data["leagues"]] == ["Public 2024"]


def test_list_leagues_pagination(client, make_user, make_league):
    owner = make_user()
    for i in range(3):
        make_league(owner, name=f"League {i}", is_public=True)

    data = client.get("/api/v1/leagues?page=2&limit=2").get_json()
    assert len(data["leagues"]) == 1
    assert data["pagination"] == {"page": 2, "limit": 2, "total": 3, "pages": 2}


def test_get_league(client, make_user, make_league):
    league = make_league(make_user())

    assert client.get(f"/api/v1/leagues/{league.id}").status_code == 200
    assert client.get("/api/v1/leagues/9999").status_code == 404


class TestMembership:
    def test_join(self, client, make_user, make_league, auth_headers):
        league = make_league(make_user())
        joiner = make_user()

        response = client.post(
            f"/api/v1/leagues/{league.id}/join", headers=auth_headers(joiner)
        )

        assert response.status_code == 200
        assert response.get_json()["league"]["participant_count"] == 2
        assert league.has_participant(joiner.id)

    def test_join_twice(self, client, make_user, make_league, auth_headers):
        owner = make_user()
        league = make_league(owner)

        response = client.post(
            f"/api/v1/leagues/{league.id}/join", headers=auth_headers(owner)
        )
        assert response.status_code == 409

    def test_join_full_league(self, client, make_user, make_league, auth_headers):
        league = make_league(make_user(), max_participants=2)
        league.add_participant(make_user())
        db.session.commit()

        response = client.post(
            f"/api/v1/leagues/{league.id}/join", headers=auth_headers(make_user())
        )

        assert response.status_code == 400
        assert response.get_json()["error"] == "League is full"

    def test_join_inactive_league(self, client, make_user, make_league, auth_headers):
        league = make_league(make_user(), is_active=False)

        response = client.post(
            f"/api/v1/leagues/{league.id}/join", headers=auth_headers(make_user())
        )
        assert response.status_code == 400

    def test_join_missing_league(self, client, make_user, auth_headers):
        response = client.post("/api/v1/leagues/404/join", headers=auth_headers(make_user()))
        assert response.status_code == 404

    def test_leave(self, client, make_user, make_league, auth_headers):
        league = make_league(make_user())
        member = make_user()
        league.add_participant(member)
        db.session.commit()

        response = client.post(
            f"/api/v1/leagues/{league.id}/leave", headers=auth_headers(member)
        )

        assert response.status_code == 200
        assert not league.has_participant(member.id)
        assert db.session.get(League, league.id).participant_count == 1

    def test_commissioner_cannot_leave(self, client, make_user, make_league, auth_headers):
        owner = make_user()
        league = make_league(owner)

        response = client.post(
            f"/api/v1/leagues/{league.id}/leave", headers=auth_headers(owner)
        )
        assert response.status_code == 400

    def test_leave_when_not_member(self, client, make_user, make_league, auth_headers):
        league = make_league(make_user())

        response = client.post(
            f"/api/v1/leagues/{league.id}/leave", headers=auth_headers(make_user())
        )
        assert response.status_code == 400

    def test_commissioner_removes_participant(
        self, client, make_user, make_league, auth_headers
    ):
        owner = make_user()
        league = make_league(owner)
        member = make_user()
        league.add_participant(member)
        db.session.commit()

        response = client.delete(
            f"/api/v1/leagues/{league.id}/participants/{member.id}",
            headers=auth_headers(owner),
        )

        assert response.status_code == 200
        assert not league.has_participant(member.id)

    def test_only_commissioner_removes(self, client, make_user, make_league, auth_headers):
        league = make_league(make_user())
        member = make_user()
        other = make_user()
        for user in (member, other):
            league.add_participant(user)
        db.session.commit()

        response = client.delete(
            f"/api/v1/leagues/{league.id}/participants/{member.id}",
            headers=auth_headers(other),
        )
        assert response.status_code == 403

    def test_participants_in_join_order(self, client, make_user, make_league):
        owner = make_user("owner")
        league = make_league(owner)
        late = make_user("latecomer")
        league.add_participant(late)
        db.session.commit()

        data = client.get(f"/api/v1/leagues/{league.id}/participants").get_json()
        assert [p["username"] for p in data["participants"]] == ["owner", "latecomer"]


class TestStandingsEndpoint:
    def _final_game(self, make_game, **kwargs):
        return make_game(
            kickoff=datetime.now(timezone.utc) - timedelta(days=1),
            home_score=24,
            away_score=21,
            status=GameStatus.FINAL,
            **kwargs,
        )

    def test_standings_payload(self, client, make_user, make_league, make_game, teams):
        owner, rival = make_user("owner"), make_user("rival")
        league = make_league(owner, scoring_type=ScoringType.CONFIDENCE)
        league.add_participant(rival)
        game = self._final_game(make_game)
        db.session.add_all(
            [
                Pick(
                    user_id=owner.id,
                    league_id=league.id,
                    game_id=game.id,
                    pick_type=PickType.STRAIGHT,
                    picked_team_id=teams["KC"].id,
                    confidence_points=10,
                ),
                Pick(
                    user_id=rival.id,
                    league_id=league.id,
                    game_id=game.id,
                    pick_type=PickType.STRAIGHT,
                    picked_team_id=teams["BUF"].id,
                    confidence_points=16,
                ),
            ]
        )
        db.session.commit()

        response = client.get(f"/api/v1/leagues/{league.id}/standings")

        assert response.status_code == 200
        data = response.get_json()
        assert data["leagueId"] == str(league.id)
        assert data["scoringType"] == "confidence"
        assert data["week"] is None
        first, second = data["standings"]
        assert first["userId"] == owner.id
        assert first["totalPoints"] == 10
        assert first["weeklyPoints"] == {"1": 10}
        assert first["rank"] == 1
        assert second["userId"] == rival.id
        assert second["totalPicks"] == 1
        assert second["totalPoints"] == 0
        assert second["rank"] == 2

    def test_week_filter(self, client, make_user, make_league, make_game, teams):
        owner = make_user()
        league = make_league(owner)
        game = self._final_game(make_game, week=3)
        db.session.add(
            Pick(
                user_id=owner.id,
                league_id=league.id,
                game_id=game.id,
                pick_type=PickType.STRAIGHT,
                picked_team_id=teams["KC"].id,
            )
        )
        db.session.commit()

        week3 = client.get(f"/api/v1/leagues/{league.id}/standings?week=3").get_json()
        week4 = client.get(f"/api/v1/leagues/{league.id}/standings?week=4").get_json()

        assert week3["week"] == 3
        assert week3["standings"][0]["totalPoints"] == 1
        assert week4["standings"][0]["totalPicks"] == 0

    def test_zero_pick_participants_listed(self, client, make_user, make_league):
        league = make_league(make_user())
        league.add_participant(make_user())
        db.session.commit()

        rows = client.get(f"/api/v1/leagues/{league.id}/standings").get_json()["standings"]
        assert [row["rank"] for row in rows] == [1, 2]
        assert all(row["totalPicks"] == 0 for row in rows)

    def test_invalid_week(self, client, make_user, make_league):
        league = make_league(make_user())

        assert client.get(f"/api/v1/leagues/{league.id}/standings?week=abc").status_code == 400
        assert client.get(f"/api/v1/leagues/{league.id}/standings?week=0").status_code == 400

    def test_missing_league(self, client):
        response = client.get("/api/v1/leagues/9999/standings")

        assert response.status_code == 404
        assert response.get_json()["error"] == "League not found"

    def test_membership_change_refreshes_cache(
        self, client, make_user, make_league, auth_headers
    ):
        league = make_league(make_user())
        url = f"/api/v1/leagues/{league.id}/standings"
        assert len(client.get(url).get_json()["standings"]) == 1

        client.post(f"/api/v1/leagues/{league.id}/join", headers=auth_headers(make_user()))

        assert len(client.get(url).get_json()["standings"]) == 2

    def test_result_refreshes_standings_on_commit(
        self, client, make_user, make_league, make_game, teams
    ):
        owner = make_user()
        league = make_league(owner)
        game = make_game()
        db.session.add(
            Pick(
                user_id=owner.id,
                league_id=league.id,
                game_id=game.id,
                pick_type=PickType.STRAIGHT,
                picked_team_id=teams["KC"].id,
            )
        )
        db.session.commit()
        url = f"/api/v1/leagues/{league.id}/standings"
        before = client.get(url).get_json()
        assert before["standings"][0]["totalPoints"] == 0

        game.update_score(24, 21)
        # A reader that has not seen the result yet caches the old table
        cache.set(standings_cache_key(league.id), before)
        assert client.get(url).get_json()["standings"][0]["totalPoints"] == 0
        db.session.commit()

        assert client.get(url).get_json()["standings"][0]["totalPoints"] == 1

    def test_rolled_back_result_keeps_cache(
        self, client, make_user, make_league, make_game
    ):
        league = make_league(make_user())
        game = make_game()
        url = f"/api/v1/leagues/{league.id}/standings"
        client.get(url)

        game.update_score(24, 21)
        db.session.rollback()

        assert STANDINGS_STALE_FLAG not in db.session.info
        assert cache.get(standings_cache_key(league.id)) is not None
