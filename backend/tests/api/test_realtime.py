"""Real-time Routes — WebSocket and SSE subscription endpoints.

Invariants:
    - A WebSocket subscriber sees newTask, taskUpdated, taskDeleted in mutation order
    - Failed mutations publish nothing
    - ping gets a pong
    - Without a running broadcaster: /ws closes 1013, /events answers 503
"""

import pytest
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient
from starlette.websockets import WebSocketDisconnect


def test_websocket_receives_task_lifecycle(app):
    with TestClient(app) as client:
        with client.websocket_connect("/ws") as ws:
            assert ws.receive_json()["event"] == "connected"

            created = client.post("/tasks", json={"titulo": "Comprar pan"}).json()
            event = ws.receive_json()
            assert event["event"] == "newTask"
            assert event["data"] == created

            client.put(f"/tasks/{created['id']}", json={"status": "completada"})
            event = ws.receive_json()
            assert event["event"] == "taskUpdated"
            assert event["data"] == {"id": created["id"], "status": "completada"}

            client.delete(f"/tasks/{created['id']}")
            event = ws.receive_json()
            assert event["event"] == "taskDeleted"
            assert event["data"] == {"id": created["id"]}


def test_failed_mutation_publishes_nothing(app):
    with TestClient(app) as client:
        with client.websocket_connect("/ws") as ws:
            ws.receive_json()
            assert client.put("/tasks/999", json={"status": "completada"}).status_code == 404
            assert client.post("/tasks", json={"titulo": ""}).status_code == 400
            ws.send_json({"action": "ping"})
            assert ws.receive_json()["event"] == "pong"


def test_websocket_unknown_action(app):
    with TestClient(app) as client:
        with client.websocket_connect("/ws") as ws:
            ws.receive_json()
            ws.send_text("not json")
            assert ws.receive_json() == {"error": "Invalid JSON"}


def test_websocket_refused_without_broadcaster(app):
    client = TestClient(app)
    with pytest.raises(WebSocketDisconnect) as exc_info:
        with client.websocket_connect("/ws") as ws:
            ws.receive_json()
    assert exc_info.value.code == 1013


async def test_sse_unavailable_without_broadcaster(app):
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        response = await c.get("/events")
        status = await c.get("/events/status")
    assert response.status_code == 503
    assert response.json() == {"status": "unavailable", "reason": "realtime_not_started"}
    assert status.json() == {"running": False, "active_connections": 0}


async def test_events_status_running(client):
    response = await client.get("/events/status")
    assert response.status_code == 200
    body = response.json()
    assert body["running"] is True
    assert body["active_connections"] == 0
    assert body["total_events_published"] == 0


async def test_events_status_counts_published(client):
    await client.post("/tasks", json={"titulo": "a"})
    body = (await client.get("/events/status")).json()
    assert body["total_events_published"] == 1


def test_websocket_disconnect_releases_subscriber(app):
    with TestClient(app) as client:
        with client.websocket_connect("/ws") as ws:
            ws.receive_json()
            assert client.get("/events/status").json()["active_connections"] == 1
        assert client.get("/events/status").json()["active_connections"] == 0
