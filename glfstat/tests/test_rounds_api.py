from __future__ import annotations

import json

from fastapi.testclient import TestClient

from glfstat.config import get_settings


def _player(client: TestClient, name: str = "Alice", color: str = "#ff0000") -> str:
    resp = client.post("/api/players", json={"name": name, "color": color})
    assert resp.status_code == 201
    return resp.json()["id"]


def _round(client: TestClient, players: list[str], course_type: str = "academic") -> dict:
    resp = client.post(
        "/api/rounds",
        json={
            "date": "2024-06-01",
            "course": "Royal Links",
            "courseType": course_type,
            "playerIds": players,
        },
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


def _shot(client: TestClient, round_id: str, hole: str, **body):
    return client.post(f"/api/rounds/{round_id}/holes/{hole}/shots", json=body)


def test_players_crud(client: TestClient) -> None:
    player_id = _player(client)
    assert client.get("/api/players").json() == [
        {"id": player_id, "name": "Alice", "color": "#ff0000"}
    ]

    missing = client.post("/api/players", json={"name": "Bob"})
    assert missing.status_code == 400

    assert client.delete(f"/api/players/{player_id}").json() == {
        "message": "Player deleted successfully"
    }
    assert client.delete(f"/api/players/{player_id}").status_code == 404


def test_round_lifecycle(client: TestClient) -> None:
    player_id = _player(client)
    created = _round(client, [player_id])
    assert created["courseType"] == "academic"
    assert sorted(created["holes"], key=int) == [str(n) for n in range(1, 10)]
    assert created["players"] == [player_id]

    listing = client.get("/api/rounds").json()
    assert listing == [
        {"id": created["id"], "date": "2024-06-01", "course": "Royal Links"}
    ]
    assert client.get(f"/api/rounds/{created['id']}").json() == created
    assert client.get("/api/rounds/nope").status_code == 404


def test_create_round_validation(client: TestClient) -> None:
    player_id = _player(client)
    bad_type = client.post(
        "/api/rounds",
        json={
            "date": "2024-06-01",
            "course": "X",
            "courseType": "par3",
            "playerIds": [player_id],
        },
    )
    assert bad_type.status_code == 400
    unknown = client.post(
        "/api/rounds",
        json={
            "date": "2024-06-01",
            "course": "X",
            "courseType": "academic",
            "playerIds": ["ghost"],
        },
    )
    assert unknown.status_code == 400
    assert "ghost" in unknown.json()["detail"]


def test_shot_routes(client: TestClient) -> None:
    alice = _player(client)
    bob = _player(client, "Bob", "#0000ff")
    round_id = _round(client, [alice, bob])["id"]

    first = _shot(
        client, round_id, "1", playerId=alice, club="DR", distance=230, result="success"
    )
    assert first.status_code == 201
    body = first.json()
    assert body["holeId"] == "1"
    assert body["shot"]["shotNumber"] == 1
    assert body["shot"]["targetLocation"] == "other"
    assert "error" not in body["shot"]

    second = _shot(
        client,
        round_id,
        "1",
        playerId=bob,
        club="3W",
        distance=190,
        result="fail",
        error="slice",
        location="tee",
        targetLocation="rough",
    )
    assert second.json()["shot"]["shotNumber"] == 1
    assert second.json()["shot"]["error"] == "slice"

    no_error = _shot(
        client, round_id, "1", playerId=bob, club="3W", distance=190, result="fail"
    )
    assert no_error.status_code == 400
    assert no_error.json()["detail"] == "Error field is required for failed shots"

    bad_hole = _shot(
        client, round_id, "10", playerId=bob, club="PT", distance=1, result="success"
    )
    assert bad_hole.status_code == 400
    assert "Must be 1-9" in bad_hole.json()["detail"]

    missing_round = _shot(
        client, "nope", "1", playerId=bob, club="PT", distance=1, result="success"
    )
    assert missing_round.status_code == 404

    last = client.get(
        f"/api/rounds/{round_id}/holes/1/shots/last", params={"playerId": alice}
    )
    assert last.json()["shot"]["club"] == "DR"


def test_update_distance_route(client: TestClient) -> None:
    alice = _player(client)
    round_id = _round(client, [alice])["id"]
    _shot(client, round_id, "2", playerId=alice, club="7I", distance=0, result="success")

    url = f"/api/rounds/{round_id}/holes/2/shots/1"
    resp = client.put(url, json={"distance": 147, "playerId": alice})
    assert resp.status_code == 200
    assert resp.json()["message"] == "Shot updated successfully"
    assert resp.json()["shot"]["distance"] == 147
    assert resp.json()["shot"]["club"] == "7I"

    assert client.put(url, json={"distance": -3, "playerId": alice}).status_code == 400
    assert client.put(url, json={"distance": 5, "playerId": "x"}).status_code == 404
    assert (
        client.put(
            f"/api/rounds/{round_id}/holes/2/shots/abc",
            json={"distance": 5, "playerId": alice},
        ).status_code
        == 404
    )


def test_delete_last_route(client: TestClient) -> None:
    alice = _player(client)
    round_id = _round(client, [alice])["id"]
    url = f"/api/rounds/{round_id}/holes/1/shots/last"

    assert client.delete(url).status_code == 404

    _shot(client, round_id, "1", playerId=alice, club="PW", distance=80, result="success")
    resp = client.delete(url)
    assert resp.status_code == 200
    assert resp.json()["message"] == "Last shot deleted successfully"
    assert resp.json()["deletedShot"]["club"] == "PW"
    assert resp.json()["remainingShots"] == 0


def test_stats_routes(client: TestClient) -> None:
    alice = _player(client)
    round_id = _round(client, [alice])["id"]
    assert client.get(f"/api/rounds/{round_id}/stats").json() == {
        "totalShots": 0,
        "successPercent": 0,
        "failPercent": 0,
    }

    shots = [
        ("1", dict(club="DR", distance=220, result="success", location="tee")),
        ("1", dict(club="8I", distance=131, result="fail", error="fat")),
        ("2", dict(club="DR", distance=241, result="success", location="tee")),
    ]
    for hole, body in shots:
        assert _shot(client, round_id, hole, playerId=alice, **body).status_code == 201

    assert client.get(f"/api/rounds/{round_id}/stats").json() == {
        "totalShots": 3,
        "successPercent": 67,
        "failPercent": 33,
    }
    assert client.get(f"/api/rounds/{round_id}/stats/clubs").json() == [
        {"club": "DR", "shots": 2, "avgDistance": 231, "successPercent": 100},
        {"club": "8I", "shots": 1, "avgDistance": 131, "successPercent": 0},
    ]
    assert client.get(f"/api/rounds/{round_id}/stats/locations").json() == [
        {"location": "tee", "shots": 2, "avgDistance": 231, "successPercent": 100},
        {"location": "other", "shots": 1, "avgDistance": 131, "successPercent": 0},
    ]
    assert client.get("/api/rounds/nope/stats/clubs").status_code == 404


def test_data_is_written_to_snapshot_file(client: TestClient) -> None:
    player_id = _player(client)
    raw = json.loads(get_settings().data_file.read_text(encoding="utf-8"))
    assert raw == {
        "players": [[player_id, {"id": player_id, "name": "Alice", "color": "#ff0000"}]],
        "rounds": [],
    }


def test_shot_distance_and_penalty_types(client: TestClient) -> None:
    alice = _player(client)
    round_id = _round(client, [alice])["id"]

    whole = _shot(
        client, round_id, "1", playerId=alice, club="DR", distance=150, result="success"
    )
    assert whole.json()["shot"]["distance"] == 150
    assert isinstance(whole.json()["shot"]["distance"], int)
    half = _shot(
        client, round_id, "1", playerId=alice, club="PW", distance=80.5, result="success"
    )
    assert half.json()["shot"]["distance"] == 80.5

    numeric_flag = _shot(
        client,
        round_id,
        "1",
        playerId=alice,
        club="PT",
        distance=1,
        result="success",
        isPenalty=1,
    )
    assert numeric_flag.status_code == 400
    assert "isPenalty" in numeric_flag.json()["detail"]

    raw = json.loads(get_settings().data_file.read_text(encoding="utf-8"))
    [[_, stored]] = raw["rounds"]
    assert [shot["distance"] for shot in stored["holes"]["1"]] == [150, 80.5]
    assert isinstance(stored["holes"]["1"][0]["distance"], int)
