from __future__ import annotations

import fakeredis
import pytest
from fastapi import WebSocketDisconnect
from fastapi.testclient import TestClient

from paddock.main import app
from paddock.runtime import registry
from paddock.websocket_hub import hub


def _create(client: TestClient, **body) -> dict:
    resp = client.post("/sessions", json=body)
    assert resp.status_code == 201
    return resp.json()


def test_create_session_lands_on_main_menu(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, _ = client_and_redis

    state = _create(client)
    assert state["current_state"] == "main_menu"
    assert state["history"] == []
    assert state["available_inputs"] == ["1", "2", "3", "h", "q"]
    assert state["help_text"].startswith("Main game menu")

    resp = client.get(f"/sessions/{state['session_id']}")
    assert resp.status_code == 200
    assert resp.json()["session_id"] == state["session_id"]


def test_input_drives_navigation(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, _ = client_and_redis
    sid = _create(client)["session_id"]

    resp = client.post(f"/sessions/{sid}/input", json={"input": "1"})
    assert resp.status_code == 200
    assert resp.json()["current_state"] == "character_creation"

    for ch in "Ace":
        client.post(f"/sessions/{sid}/input", json={"input": ch})
    assert client.get(f"/sessions/{sid}").json()["text_buffer"] == "Ace"

    body = client.post(f"/sessions/{sid}/input", json={"input": ""}).json()
    assert body["success"] is True
    assert body["action"] == "create_character"
    assert body["current_state"] == "training"

    state = client.get(f"/sessions/{sid}").json()
    assert state["history"] == ["main_menu", "character_creation"]
    assert state["text_buffer"] == ""


def test_failed_input_is_a_200_with_details(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, _ = client_and_redis
    sid = _create(client)["session_id"]

    body = client.post(f"/sessions/{sid}/input", json={"input": "x"}).json()
    assert body["success"] is False
    assert body["error_kind"] == "NoHandlerForInput"
    assert body["suggestion"].startswith("Try:")
    assert body["available_inputs"] == ["1", "2", "3", "h", "q"]


def test_save_goes_to_redis(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, r = client_and_redis
    sid = _create(client, profile="api")["session_id"]

    for raw in ["1", "Z", "e", "d", "", "s"]:
        assert client.post(f"/sessions/{sid}/input", json={"input": raw}).json()["success"]

    assert r.llen("paddock:saves:api") == 1


def test_path_query(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, _ = client_and_redis
    sid = _create(client)["session_id"]

    resp = client.get(f"/sessions/{sid}/path", params={"target": "help"})
    assert resp.status_code == 200
    assert resp.json() == {"source": "main_menu", "target": "help", "path": ["main_menu", "help"]}

    resp = client.get(f"/sessions/{sid}/path", params={"target": "podium"})
    assert resp.json()["path"] is None

    resp = client.get(f"/sessions/{sid}/path", params={"target": "nowhere"})
    assert resp.status_code == 422


def test_recent_inputs(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, _ = client_and_redis
    sid = _create(client)["session_id"]
    for raw in ["9", "h"]:
        client.post(f"/sessions/{sid}/input", json={"input": raw})

    data = client.get(f"/sessions/{sid}/inputs", params={"limit": 5}).json()
    assert [i["input"] for i in data["inputs"]] == ["9", "h"]
    assert data["inputs"][1]["state"] == "main_menu"


def test_unknown_and_deleted_sessions_404(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, _ = client_and_redis

    assert client.get("/sessions/missing").status_code == 404
    assert client.post("/sessions/missing/input", json={"input": "1"}).status_code == 404

    before = len(registry)
    sid = _create(client)["session_id"]
    assert client.delete(f"/sessions/{sid}").status_code == 204
    assert client.get(f"/sessions/{sid}").status_code == 404
    assert len(registry) == before
    assert client.delete(f"/sessions/{sid}").status_code == 404


def test_ws_render_broadcast(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, _ = client_and_redis
    sid = _create(client)["session_id"]

    with client.websocket_connect(f"/ws/session/{sid}") as ws:
        res = client.post(f"/sessions/{sid}/input", json={"input": "h"})
        assert res.status_code == 200

        msg = ws.receive_json()
        assert msg == {
            "type": "render",
            "session_id": sid,
            "current_state": "help",
            "history_depth": 1,
            "text_buffer": "",
        }


def test_deleting_a_session_closes_its_sockets(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, _ = client_and_redis
    sid = _create(client)["session_id"]
    other = _create(client)["session_id"]

    with client.websocket_connect(f"/ws/session/{sid}") as ws:
        client.post(f"/sessions/{sid}/input", json={"input": "1"})
        assert ws.receive_json()["current_state"] == "character_creation"
        assert hub.connection_count(sid) == 1

        assert client.delete(f"/sessions/{sid}").status_code == 204
        assert hub.connection_count(sid) == 0
        with pytest.raises(WebSocketDisconnect):
            ws.receive_json()

    assert client.get(f"/sessions/{other}").status_code == 200


def test_healthcheck_and_info() -> None:
    with TestClient(app) as client:
        assert client.get("/healthcheck").json() == {"status": "ok"}
        assert client.get("/info").json()["name"] == "paddock"
