"""세션 REST / WebSocket 라우터 테스트."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from modules.session import EventBusNoticePresenter
from modules.session.models import (
    Message,
    RecordingState,
    RoleChangeRequest,
    Room,
    SessionError,
    TrackKind,
)
from routes import health_router, init_session_routes, session_router


@pytest.fixture
def client(adapter, bus, monkeypatch):
    monkeypatch.delenv("ACCESS_PASSWORD", raising=False)
    app = FastAPI()
    app.include_router(health_router)
    app.include_router(session_router)
    init_session_routes(adapter, bus)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def configured(client):
    response = client.post("/api/session/setup", json={"user_name": "상담사", "room_id": "room-1"})
    assert response.status_code == 200
    return client


def test_setup_returns_token(client, factory):
    response = client.post("/api/session/setup", json={"user_name": "상담사", "room_id": "room-1"})

    assert response.status_code == 200
    assert response.json() == {"token": "token-abc"}
    assert len(factory.clients) == 1


def test_setup_token_failure_returns_502(client, token_service, factory):
    token_service.token = None

    response = client.post("/api/session/setup", json={"user_name": "상담사", "room_id": "room-1"})

    assert response.status_code == 502
    assert factory.clients == []


def test_setup_rejects_empty_user(client):
    response = client.post("/api/session/setup", json={"user_name": "", "room_id": "room-1"})

    assert response.status_code == 422


def test_join_before_setup_returns_409(client):
    assert client.post("/api/session/join").status_code == 409


def test_join_and_leave(configured, factory):
    assert configured.post("/api/session/join").status_code == 200
    assert configured.post("/api/session/leave").status_code == 200
    assert configured.post("/api/session/leave").status_code == 200

    assert factory.last.call_names() == ["preview", "join", "leave"]


def test_status_reflects_room_and_permissions(configured, factory, peer_factory, host_role):
    factory.last.room = Room(room_id="room-1", rtmp_streaming_state=RecordingState(running=True))
    factory.last.local_peer = peer_factory("상담사", role=host_role, local=True)

    data = configured.get("/api/session/status").json()

    assert data["configured"] is True
    assert data["user_name"] == "상담사"
    assert data["room_id"] == "room-1"
    assert data["is_recording"] is False
    assert data["is_streaming"] is True
    assert data["permissions"] == {
        "can_change_role": True,
        "can_remote_mute": True,
        "can_remove_peer": True,
        "can_end_room": True,
    }


def test_status_before_setup(client):
    data = client.get("/api/session/status").json()

    assert data["configured"] is False
    assert data["permissions"]["can_end_room"] is False


def test_messages_endpoint(configured, adapter, peer_factory):
    adapter.on_message(Message(sender=peer_factory("고객"), message="안녕하세요"))

    messages = configured.get("/api/session/messages").json()["messages"]

    assert len(messages) == 1
    assert messages[0]["message"] == "안녕하세요"
    assert messages[0]["sender"]["name"] == "고객"


def test_change_role_resolves_peer_and_role(configured, factory, peer_factory, guest_role):
    peer = peer_factory("고객")
    factory.last.room = Room(room_id="room-1", peers=[peer])
    factory.last.roles = [guest_role]

    response = configured.post("/api/session/role", json={"peer_id": peer.peer_id, "role": "guest", "force": True})

    assert response.status_code == 200
    assert ("change_role", peer, guest_role, True) in factory.last.calls


def test_change_role_unknown_peer_or_role(configured, factory, peer_factory, guest_role):
    peer = peer_factory("고객")
    factory.last.room = Room(room_id="room-1", peers=[peer])
    factory.last.roles = [guest_role]

    unknown_peer = configured.post("/api/session/role", json={"peer_id": "nobody", "role": "guest"})
    unknown_role = configured.post("/api/session/role", json={"peer_id": peer.peer_id, "role": "admin"})

    assert unknown_peer.status_code == 404
    assert unknown_role.status_code == 404


def test_accept_pending_role_change(configured, adapter, factory, guest_role):
    assert configured.post("/api/session/role-change/accept").status_code == 404

    request = RoleChangeRequest(suggested_role=guest_role)
    adapter.on_role_change_request(request)

    response = configured.post("/api/session/role-change/accept")

    assert response.status_code == 200
    assert response.json()["role"] == "guest"
    assert ("accept_role_change", request) in factory.last.calls
    assert configured.post("/api/session/role-change/accept").status_code == 404


def test_mute_all_and_by_role(configured, factory, guest_role):
    factory.last.roles = [guest_role]

    assert configured.post("/api/session/mute", json={}).status_code == 200
    assert configured.post("/api/session/mute", json={"role": "guest"}).status_code == 200

    mutes = [call for call in factory.last.calls if call[0] == "change_track_state"]
    assert mutes == [
        ("change_track_state", True, TrackKind.AUDIO, None),
        ("change_track_state", True, TrackKind.AUDIO, [guest_role]),
    ]


def test_roles_endpoint(configured, factory, host_role, guest_role):
    factory.last.roles = [host_role, guest_role]

    assert configured.get("/api/session/roles").json() == {"roles": ["host", "guest"]}


def test_commands_without_adapter_return_503(bus, monkeypatch):
    monkeypatch.delenv("ACCESS_PASSWORD", raising=False)
    app = FastAPI()
    app.include_router(health_router)
    app.include_router(session_router)
    init_session_routes(None, bus)

    with TestClient(app) as client:
        assert client.post("/api/session/join").status_code == 503
        assert client.get("/api/session/status").status_code == 503
        assert client.get("/api/health").json()["status"] == "degraded"


def test_health_reports_session_state(client):
    data = client.get("/api/health").json()

    assert data["status"] == "ok"
    assert data["services"] == {"session_client": "ok", "session": "idle"}


def test_auth_required_when_password_set(client, monkeypatch):
    monkeypatch.setenv("ACCESS_PASSWORD", "secret")

    assert client.get("/api/session/status").status_code == 401
    assert client.get("/api/session/status", headers={"Authorization": "Basic secret"}).status_code == 401
    assert client.get("/api/session/status", headers={"Authorization": "Bearer wrong"}).status_code == 401
    assert client.get("/api/session/status", headers={"Authorization": "Bearer secret"}).status_code == 200


# ============================================================
# WebSocket
# ============================================================

def test_websocket_streams_bus_events(client, adapter):
    with client.websocket_connect("/ws/session") as ws:
        adapter.on_error(SessionError(message="Network lost"))
        frame = ws.receive_json()

    assert frame == {"type": "error_occurred", "data": {"error": "Network lost"}}


def test_websocket_streams_message(configured, adapter, notices, peer_factory):
    with configured.websocket_connect("/ws/session") as ws:
        adapter.on_message(Message(sender=peer_factory("고객"), message="안녕하세요"))
        frame = ws.receive_json()

    assert frame["type"] == "message_received"
    assert frame["data"]["message"]["message"] == "안녕하세요"
    assert frame["data"]["message"]["sender"]["name"] == "고객"
    assert notices.shown == ["💬 고객 sent you a message"]


def test_websocket_streams_bus_notices(client, adapter, bus):
    adapter.notices = EventBusNoticePresenter(bus)

    with client.websocket_connect("/ws/session") as ws:
        adapter.on_reconnecting()
        frame = ws.receive_json()

    assert frame == {"type": "notice", "data": {"message": "Trying to Reconnect"}}


def test_websocket_streams_handler_slot_events(configured, adapter, guest_role):
    with configured.websocket_connect("/ws/session") as ws:
        adapter.on_role_change_request(RoleChangeRequest(suggested_role=guest_role))
        frame = ws.receive_json()

    assert frame["type"] == "role_change_requested"
    assert frame["data"]["suggested_role"]["name"] == "guest"
    assert frame["data"]["requested_by"] is None


def test_websocket_rejects_bad_token(client, monkeypatch):
    from starlette.websockets import WebSocketDisconnect

    monkeypatch.setenv("ACCESS_PASSWORD", "secret")

    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect("/ws/session?token=wrong") as ws:
            ws.receive_json()
