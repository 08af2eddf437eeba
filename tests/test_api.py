"""
API tests - a full scored match and a small knockout, over HTTP.
"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from main import app
from app.database import get_db


@pytest.fixture
def client(db_engine):
    """TestClient bound to the in-memory database (startup hook not run)"""
    TestingSession = sessionmaker(bind=db_engine)

    def override_get_db():
        db = TestingSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def squads(seed_teams):
    """{team_id: [player ids]} for two teams"""
    return seed_teams(["Lions", "Tigers"])


def start_match(client, squads, overs_limit=20):
    (lions, lion_players), (tigers, tiger_players) = squads.items()
    match = client.post("/api/matches", json={
        "team1_id": lions, "team2_id": tigers, "overs_limit": overs_limit,
    }).json()
    client.post(f"/api/matches/{match['id']}/toss", json={"toss_winner_id": lions, "elected_to": "bat"})
    client.post(f"/api/matches/{match['id']}/lineups", json={"team_id": lions, "player_ids": lion_players})
    client.post(f"/api/matches/{match['id']}/lineups", json={"team_id": tigers, "player_ids": tiger_players})
    client.put(f"/api/matches/{match['id']}/phase", json={"phase": "inning_one"})
    return match["id"]


class TestHealth:
    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "running"

    def test_health(self, client):
        assert client.get("/api/health").json() == {"status": "healthy"}


class TestMatchFlow:
    def test_create_match(self, client, squads):
        lions, tigers = squads
        response = client.post("/api/matches", json={"team1_id": lions, "team2_id": tigers})
        assert response.status_code == 201
        body = response.json()
        assert body["phase"] == "toss"
        assert body["overs_limit"] == 20
        assert body["round"] == 0

    def test_create_match_against_itself(self, client, squads):
        lions, _ = squads
        response = client.post("/api/matches", json={"team1_id": lions, "team2_id": lions})
        assert response.status_code == 400
        assert response.json()["error"] == "ValidationError"

    def test_unknown_match_is_404(self, client):
        response = client.get("/api/matches/999/phase")
        assert response.status_code == 404
        assert response.json()["status"] == "error"

    def test_toss_moves_to_team_selection(self, client, squads):
        lions, tigers = squads
        match = client.post("/api/matches", json={"team1_id": lions, "team2_id": tigers}).json()
        response = client.post(f"/api/matches/{match['id']}/toss", json={"toss_winner_id": tigers, "elected_to": "bowl"})

        assert response.status_code == 200
        body = response.json()
        assert body["phase"] == "team_selection"
        assert body["completed_phases"] == ["toss"]
        assert body["batting_team_id"] == lions

    def test_skipping_phase_rejected(self, client, squads):
        lions, tigers = squads
        match = client.post("/api/matches", json={"team1_id": lions, "team2_id": tigers}).json()
        client.post(f"/api/matches/{match['id']}/toss", json={"toss_winner_id": lions, "elected_to": "bat"})

        response = client.put(f"/api/matches/{match['id']}/phase", json={"phase": "finished"})
        assert response.status_code == 400
        assert response.json()["error"] == "PhaseTransitionError"

    def test_scoring_an_over(self, client, squads):
        match_id = start_match(client, squads)
        (lions, lion_players), (tigers, tiger_players) = squads.items()

        innings = client.post(f"/api/matches/{match_id}/innings", json={
            "batting_team_id": lions, "bowling_team_id": tigers,
        })
        assert innings.status_code == 201
        innings_id = innings.json()["innings_id"]

        assert client.get(f"/api/innings/{innings_id}/next-ball").json() == {"over": 1, "ball": 1}

        last = None
        for runs in (1, 4, 0, 6, 2, 1):
            last = client.post(f"/api/innings/{innings_id}/deliveries", json={
                "batsman_id": lion_players[0], "bowler_id": tiger_players[10], "runs": runs,
            })
            assert last.status_code == 201

        body = last.json()
        assert (body["over_number"], body["ball_number"]) == (1, 6)
        assert body["innings"]["total_runs"] == 14
        assert body["innings"]["overs_played"] == 1.0
        assert body["next_ball"] == {"over": 2, "ball": 1}

    def test_wide_keeps_coordinate(self, client, squads):
        match_id = start_match(client, squads)
        (lions, lion_players), (tigers, tiger_players) = squads.items()
        innings_id = client.post(f"/api/matches/{match_id}/innings", json={
            "batting_team_id": lions, "bowling_team_id": tigers,
        }).json()["innings_id"]

        response = client.post(f"/api/innings/{innings_id}/deliveries", json={
            "over_number": 1, "ball_number": 1,
            "batsman_id": lion_players[0], "bowler_id": tiger_players[10],
            "extras": 1, "extra_type": "wide",
        })
        assert response.status_code == 201
        assert response.json()["next_ball"] == {"over": 1, "ball": 1}
        assert response.json()["innings"]["legal_balls"] == 0

    def test_out_of_sequence_delivery(self, client, squads):
        match_id = start_match(client, squads)
        (lions, lion_players), (tigers, tiger_players) = squads.items()
        innings_id = client.post(f"/api/matches/{match_id}/innings", json={
            "batting_team_id": lions, "bowling_team_id": tigers,
        }).json()["innings_id"]

        response = client.post(f"/api/innings/{innings_id}/deliveries", json={
            "over_number": 2, "ball_number": 1,
            "batsman_id": lion_players[0], "bowler_id": tiger_players[10],
        })
        assert response.status_code == 400

    def test_full_match_and_player_stats(self, client, squads):
        match_id = start_match(client, squads)
        (lions, lion_players), (tigers, tiger_players) = squads.items()

        first = client.post(f"/api/matches/{match_id}/innings", json={
            "batting_team_id": lions, "bowling_team_id": tigers,
        }).json()["innings_id"]
        client.post(f"/api/innings/{first}/deliveries", json={
            "batsman_id": lion_players[0], "bowler_id": tiger_players[10], "runs": 4,
        })
        finalized = client.post(f"/api/innings/{first}/finalize").json()
        assert finalized["total_runs"] == 4

        assert client.put(f"/api/matches/{match_id}/phase", json={"phase": "inning_two"}).status_code == 200
        score = client.get(f"/api/matches/{match_id}/score").json()
        assert score["target"] == 5

        second = client.post(f"/api/matches/{match_id}/innings", json={
            "batting_team_id": tigers, "bowling_team_id": lions,
        }).json()["innings_id"]
        client.post(f"/api/innings/{second}/deliveries", json={
            "batsman_id": tiger_players[0], "bowler_id": lion_players[10], "runs": 6,
        })
        client.post(f"/api/innings/{second}/finalize")

        finished = client.put(f"/api/matches/{match_id}/phase", json={"phase": "finished"}).json()
        assert finished["winner_id"] == tigers
        assert client.get(f"/api/matches/{match_id}").json()["winner_id"] == tigers

        stats = client.post(f"/api/matches/{match_id}/player-stats").json()
        assert stats["players"] == 4
        again = client.post(f"/api/matches/{match_id}/player-stats").json()
        assert again["stats"] == stats["stats"]

        summaries = client.get(f"/api/teams/{tigers}/player-stats").json()
        assert summaries[0]["player_id"] == tiger_players[0]
        assert summaries[0]["runs"] == 6

        batsmen = client.get(f"/api/innings/{second}/current-batsmen").json()
        assert batsmen == [{"player_id": tiger_players[0], "name": "Tigers Player 1", "runs": 6}]


class TestTournamentFlow:
    def test_entrants_bracket_and_champion(self, client, seed_teams):
        teams = list(seed_teams(["A", "B", "C"]))
        tournament = client.post("/api/tournaments", json={"name": "Sunday Cup", "overs_limit": 6}).json()
        tid = tournament["id"]
        assert tournament["status"] == "ongoing"

        for team_id in teams:
            assert client.post(f"/api/tournaments/{tid}/entrants", json={"team_id": team_id}).status_code == 201
            client.patch(f"/api/tournaments/{tid}/entrants/{team_id}", json={"status": "accepted", "is_present": True})

        duplicate = client.post(f"/api/tournaments/{tid}/entrants", json={"team_id": teams[0]})
        assert duplicate.status_code == 400

        accepted = client.get(f"/api/tournaments/{tid}/entrants", params={"status": "accepted"}).json()
        assert len(accepted) == 3

        generated = client.post(f"/api/tournaments/{tid}/bracket")
        assert generated.status_code == 201
        body = generated.json()
        assert body["total_matches"] == 2

        again = client.post(f"/api/tournaments/{tid}/bracket")
        assert again.status_code == 400

        opener, final = body["matches"]
        assert opener["round"] == 1
        result = client.post(f"/api/matches/{opener['match_id']}/winner", json={
            "winner_team_id": opener["team1_id"],
        }).json()
        assert result["next_match_id"] == final["match_id"]
        assert result["slot"] == "team2"

        conflict = client.post(f"/api/matches/{opener['match_id']}/winner", json={
            "winner_team_id": opener["team2_id"],
        })
        assert conflict.status_code == 409
        assert conflict.json()["error"] == "ConcurrencyConflict"

        result = client.post(f"/api/matches/{final['match_id']}/winner", json={
            "winner_team_id": final["team1_id"],
        }).json()
        assert result["champion_team_id"] == final["team1_id"]

        tournament = client.get(f"/api/tournaments/{tid}").json()
        assert tournament["status"] == "completed"
        assert tournament["champion_team_id"] == final["team1_id"]

    def test_bracket_needs_two_entrants(self, client, seed_teams):
        (only,) = seed_teams(["Solo"])
        tid = client.post("/api/tournaments", json={"name": "Tiny Cup"}).json()["id"]
        client.post(f"/api/tournaments/{tid}/entrants", json={"team_id": only})
        client.patch(f"/api/tournaments/{tid}/entrants/{only}", json={"status": "accepted", "is_present": True})

        response = client.post(f"/api/tournaments/{tid}/bracket")
        assert response.status_code == 400
        assert response.json()["error"] == "InsufficientEntrants"

    def test_bracket_not_found_before_generation(self, client):
        tid = client.post("/api/tournaments", json={"name": "Later Cup"}).json()["id"]
        assert client.get(f"/api/tournaments/{tid}/bracket").status_code == 404

    def test_blank_name_rejected(self, client):
        assert client.post("/api/tournaments", json={"name": "  "}).status_code == 400


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
