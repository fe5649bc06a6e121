import pytest
from fastapi.testclient import TestClient

from hockey_admin.api import create_app
from hockey_admin.service import LeagueService


@pytest.fixture
def client(store) -> TestClient:
    return TestClient(create_app(LeagueService(store)))


def _game(**overrides) -> dict:
    body = {
        "date": "2025-01-10T20:00:00",
        "homeTeamId": "Cobras",
        "awayTeamId": "Penguins",
        "division": "A",
    }
    body.update(overrides)
    return body


def test_health(client) -> None:
    assert client.get("/api/health").json() == {"status": "ok"}


def test_game_lifecycle(client) -> None:
    created = client.post("/api/games", json=_game(homeScore=4, awayScore=2, homeGoals=[{"scorer": "Ava Stone"}]))
    assert created.status_code == 200
    game_id = created.json()["game"]["id"]

    standings = client.get("/api/standings", params={"division": "a"}).json()
    assert standings[0]["team"] == "Cobras"
    assert standings[0]["points"] == 2

    edited = client.put(f"/api/games/{game_id}", json=_game(homeScore=2, awayScore=4))
    assert edited.json()["game"]["awayScore"] == 4
    standings = client.get("/api/standings").json()
    assert standings[0]["team"] == "Penguins"

    players = client.get("/api/players", params={"division": "A"}).json()
    ava = next(row for row in players if row["player"] == "Ava Stone")
    assert (ava["g"], ava["gp"]) == (0, 1)

    assert client.get(f"/api/games/{game_id}").json()["gameNumber"] == 1
    assert client.delete(f"/api/games/{game_id}").json()["deleted"] == game_id
    assert client.get(f"/api/games/{game_id}").status_code == 404


def test_missing_game_is_404(client) -> None:
    assert client.put("/api/games/nope", json=_game()).status_code == 404
    assert client.delete("/api/games/nope").status_code == 404


def test_bad_division_and_window_are_400(client) -> None:
    assert client.get("/api/standings", params={"division": "Z"}).status_code == 400
    assert client.post("/api/games", json=_game(division="Q")).status_code == 400
    assert client.get("/api/schedule", params={"window": "later"}).status_code == 400


def test_invalid_payload_is_rejected(client) -> None:
    response = client.post("/api/games", json={"homeTeamId": "Cobras"})
    assert response.status_code == 422


def test_roster_endpoints(client) -> None:
    assert client.post("/api/teams", json={"name": "Cobras"}).status_code == 400
    team = client.post("/api/teams", json={"name": "Vipers", "division": "B"}).json()
    assert team["division"] == "B"

    player = client.post("/api/players", json={"name": "Moe Finn", "teamId": team["id"], "jerseyNumber": 7})
    assert player.json()["jerseyNumber"] == 7
    assert client.post("/api/players", json={"name": "Moe Finn", "teamId": "nope"}).status_code == 404

    goalie = client.post("/api/goalies", json={"name": "Vic Dunn", "teamId": team["id"]}).json()
    assert goalie["savePercentage"] == 0.0


def test_admin_endpoints(client) -> None:
    populated = client.post(
        "/api/admin/populate-schedule",
        json={"division": "A", "start": "2025-02-01", "games_per_matchup": 2},
    ).json()
    assert populated["games"] == 2
    assert len(client.get("/api/schedule", params={"division": "A"}).json()) == 2

    assert client.post("/api/admin/reset-goalie-stats").json()["reset"] == 3
    assert client.post("/api/admin/rebuild-goalie-stats").json()["stats"]["ok"] is True
    assert client.get("/api/goalies").status_code == 200


@pytest.mark.regression
def test_lowercase_division_is_stored_upper_case(client) -> None:
    team = client.post("/api/teams", json={"name": "Vipers", "division": "b"}).json()
    assert team["division"] == "B"

    created = client.post("/api/games", json=_game(division="a", homeScore=1, awayScore=0)).json()
    assert created["game"]["division"] == "A"
    game_id = created["game"]["id"]
    edited = client.put(f"/api/games/{game_id}", json=_game(division="a", homeScore=2, awayScore=0)).json()
    assert edited["game"]["division"] == "A"

    assert [row["team"] for row in client.get("/api/standings", params={"division": "A"}).json()] == ["Cobras", "Penguins"]
    assert [row["team"] for row in client.get("/api/standings", params={"division": "B"}).json()] == ["Spitfires", "Vipers"]
    assert len(client.get("/api/schedule", params={"division": "A"}).json()) == 1


def test_player_and_goalie_roster_routes(client, store) -> None:
    ava = store.find_player_by_name("Ava Stone", store.find_team_by_name("Cobras").team_id)

    updated = client.put(f"/api/players/{ava.player_id}", json={"position": "LW", "jerseyNumber": 10})
    assert (updated.json()["position"], updated.json()["jerseyNumber"]) == ("LW", 10)
    assert client.put(f"/api/players/{ava.player_id}", json={"teamId": "nope"}).status_code == 404
    assert client.put("/api/players/nope", json={"position": "D"}).status_code == 404

    assert client.delete(f"/api/players/{ava.player_id}").json()["deleted"] == ava.player_id
    assert client.delete(f"/api/players/{ava.player_id}").status_code == 404

    ike = store.find_goalie_by_name("Ike Lund")
    assert client.delete(f"/api/goalies/{ike.goalie_id}").json()["ok"] is True
    assert client.delete(f"/api/goalies/{ike.goalie_id}").status_code == 404
    assert [row["goalie"] for row in client.get("/api/goalies").json()] == ["Gus Hale", "Hal Moss"]
