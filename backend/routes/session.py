"""화상 세션 API / WebSocket 라우터.

SessionEventAdapter 명령(setup, join, leave, 역할 변경, 음소거)을 REST로 노출하고,
이벤트 버스 이벤트와 어댑터 핸들러 슬롯 이벤트를 WebSocket으로 UI에 전달합니다.

WebSocket 프레임:
    {"type": "<event>", "data": {...}}

    - joined_room / peers_updated / role_updated / error_occurred / message_received
    - notice / modals_dismissed
    - preview / role_change_requested / change_track_state_requested
    - removed_from_room / recording_updated / mute_status
"""

import asyncio
import logging
from dataclasses import asdict
from typing import Any, Callable, Dict, Optional, Set, Tuple

from fastapi import APIRouter, Depends, HTTPException, Query, WebSocket, WebSocketDisconnect

from modules.session import EventBus, SessionEvent, SessionEventAdapter
from modules.session.models import (
    AudioTrack,
    ChangeTrackStateRequest,
    Message,
    Peer,
    RemovedFromRoomNotification,
    Role,
    RoleChangeRequest,
    Room,
    Track,
)
from modules.shared import (
    ChangeRoleRequest,
    MessageInfo,
    MuteRequest,
    PeerInfo,
    PermissionInfo,
    SessionStatus,
    SetupRequest,
    SetupResponse,
    UIEvent,
)
from .deps import verify_auth_header, verify_ws_token

logger = logging.getLogger(__name__)

router = APIRouter()

# 글로벌 참조 (app.py에서 설정됨)
_adapter: Optional[SessionEventAdapter] = None
_bus: Optional[EventBus] = None
_pending_role_change: Optional[RoleChangeRequest] = None
_bus_unsubscribe: Optional[Callable[[], None]] = None

# 연결된 UI 리스너: (이벤트 루프, 큐)
_listeners: Set[Tuple[asyncio.AbstractEventLoop, asyncio.Queue]] = set()


def init_session_routes(adapter: Optional[SessionEventAdapter], bus: EventBus) -> None:
    """어댑터와 이벤트 버스를 라우터에 연결합니다.

    어댑터의 핸들러 슬롯을 UI 이벤트 전달 함수로 할당합니다.
    adapter가 None이면(클라이언트 팩토리 미설정) 명령 API는 503을 반환합니다.

    Args:
        adapter: SessionEventAdapter 인스턴스
        bus: 세션 이벤트 버스
    """
    global _adapter, _bus, _pending_role_change, _bus_unsubscribe
    if _bus_unsubscribe is not None:
        _bus_unsubscribe()
    _adapter = adapter
    _bus = bus
    _pending_role_change = None
    _bus_unsubscribe = bus.subscribe_all(_on_bus_event)

    if adapter is not None:
        adapter.preview_handler = _on_preview
        adapter.role_change_handler = _on_role_change
        adapter.change_track_state_handler = _on_change_track_state
        adapter.removed_from_room_handler = _on_removed_from_room
        adapter.recording_update_handler = _on_recording_update
        adapter.mute_status_handler = _on_mute_status

    logger.info(f"세션 라우터 초기화 완료 (adapter={'ready' if adapter else 'unavailable'})")


def get_adapter_status() -> Tuple[str, str]:
    """(클라이언트 구성 상태, 세션 상태)를 반환합니다."""
    if _adapter is None:
        return "not_configured", "none"
    if _adapter.config is None:
        return "ok", "idle"
    return "ok", "configured"


def _require_adapter() -> SessionEventAdapter:
    if _adapter is None:
        raise HTTPException(status_code=503, detail="Session client not configured")
    return _adapter


# ============================================================
# UI 이벤트 전달
# ============================================================

def _serialize(value: Any) -> Any:
    if isinstance(value, Peer):
        return PeerInfo.from_peer(value).model_dump()
    if isinstance(value, Message):
        return MessageInfo.from_message(value).model_dump(mode="json")
    if isinstance(value, Role):
        return {"name": value.name, "permissions": asdict(value.permissions)}
    if isinstance(value, Track):
        return {
            "track_id": value.track_id,
            "kind": value.kind.value,
            "source": value.source,
            "is_mute": value.is_mute,
        }
    if isinstance(value, (list, tuple)):
        return [_serialize(v) for v in value]
    if isinstance(value, dict):
        return {k: _serialize(v) for k, v in value.items()}
    return value


def _push(event_type: str, data: Optional[Dict[str, Any]] = None) -> None:
    """연결된 모든 UI 리스너에게 이벤트를 전달합니다.

    클라이언트 콜백은 SDK 스레드에서 호출될 수 있으므로
    각 리스너의 이벤트 루프로 call_soon_threadsafe를 사용합니다.
    """
    frame = UIEvent(type=event_type, data=_serialize(data or {})).model_dump()
    for loop, queue in list(_listeners):
        try:
            loop.call_soon_threadsafe(queue.put_nowait, frame)
        except RuntimeError:
            # 루프가 이미 종료됨
            _listeners.discard((loop, queue))


def _on_bus_event(event: SessionEvent, payload: Dict[str, Any]) -> None:
    _push(event.value, payload)


def _on_preview(room: Room, tracks: list) -> None:
    _push("preview", {"room_id": room.room_id, "tracks": tracks})


def _on_role_change(request: RoleChangeRequest) -> None:
    global _pending_role_change
    _pending_role_change = request
    _push("role_change_requested", {
        "suggested_role": request.suggested_role,
        "requested_by": request.requested_by,
    })


def _on_change_track_state(request: ChangeTrackStateRequest) -> None:
    _push("change_track_state_requested", {
        "track": request.track,
        "mute": request.mute,
        "requested_by": request.requested_by,
    })


def _on_removed_from_room(notification: RemovedFromRoomNotification) -> None:
    _push("removed_from_room", {
        "reason": notification.reason,
        "room_was_ended": notification.room_was_ended,
        "requested_by": notification.requested_by,
    })


def _on_recording_update() -> None:
    adapter = _adapter
    _push("recording_updated", {
        "is_recording": adapter.is_recording if adapter else False,
        "is_streaming": adapter.is_streaming if adapter else False,
    })


def _on_mute_status(track: AudioTrack) -> None:
    _push("mute_status", {"track": track})


# ============================================================
# REST API
# ============================================================

@router.post("/api/session/setup", response_model=SetupResponse, dependencies=[Depends(verify_auth_header)])
async def setup_session(request: SetupRequest):
    """토큰을 발급받고 클라이언트를 구성한 뒤 미리보기를 시작합니다."""
    adapter = _require_adapter()
    token = await adapter.initialize(request.user_name, request.room_id)
    if not token:
        raise HTTPException(status_code=502, detail="Failed to fetch token")
    return SetupResponse(token=token)


@router.post("/api/session/join", dependencies=[Depends(verify_auth_header)])
async def join_session():
    adapter = _require_adapter()
    if adapter.config is None:
        raise HTTPException(status_code=409, detail="Session not configured")
    adapter.join()
    return {"status": "joining"}


@router.post("/api/session/leave", dependencies=[Depends(verify_auth_header)])
async def leave_session():
    global _pending_role_change
    adapter = _require_adapter()
    adapter.leave()
    _pending_role_change = None
    return {"status": "left"}


@router.get("/api/session/status", response_model=SessionStatus, dependencies=[Depends(verify_auth_header)])
async def session_status():
    """세션 설정 여부, 녹화/스트리밍 상태, 로컬 참가자 권한을 반환합니다."""
    adapter = _require_adapter()
    config = adapter.config
    room = adapter.room
    return SessionStatus(
        configured=config is not None,
        user_name=config.user_name if config else None,
        room_id=room.room_id if room else None,
        is_recording=adapter.is_recording,
        is_streaming=adapter.is_streaming,
        permissions=PermissionInfo(
            can_change_role=adapter.can_change_role,
            can_remote_mute=adapter.can_remote_mute,
            can_remove_peer=adapter.can_remove_peer,
            can_end_room=adapter.can_end_room,
        ),
    )


@router.get("/api/session/messages", dependencies=[Depends(verify_auth_header)])
async def session_messages():
    adapter = _require_adapter()
    return {
        "messages": [MessageInfo.from_message(m).model_dump(mode="json") for m in adapter.messages]
    }


@router.get("/api/session/roles", dependencies=[Depends(verify_auth_header)])
async def session_roles():
    adapter = _require_adapter()
    return {"roles": [role.name for role in adapter.roles]}


def _find_role(adapter: SessionEventAdapter, name: str) -> Role:
    for role in adapter.roles:
        if role.name == name:
            return role
    raise HTTPException(status_code=404, detail=f"Unknown role: {name}")


@router.post("/api/session/role", dependencies=[Depends(verify_auth_header)])
async def change_role(request: ChangeRoleRequest):
    """참가자의 역할을 변경합니다."""
    adapter = _require_adapter()
    room = adapter.room
    peer = None
    if room is not None:
        peer = next((p for p in room.peers if p.peer_id == request.peer_id), None)
    if peer is None:
        raise HTTPException(status_code=404, detail=f"Unknown peer: {request.peer_id}")

    role = _find_role(adapter, request.role)
    adapter.change_role(peer, role, force=request.force)
    return {"status": "requested"}


@router.post("/api/session/role-change/accept", dependencies=[Depends(verify_auth_header)])
async def accept_role_change():
    """대기 중인 역할 변경 요청을 수락합니다."""
    global _pending_role_change
    adapter = _require_adapter()
    if _pending_role_change is None:
        raise HTTPException(status_code=404, detail="No pending role change request")

    request = _pending_role_change
    _pending_role_change = None
    adapter.accept_role_change(request)
    return {"status": "accepted", "role": request.suggested_role.name}


@router.post("/api/session/mute", dependencies=[Depends(verify_auth_header)])
async def mute_audio(request: MuteRequest):
    """오디오를 원격 음소거합니다. role이 없으면 모든 역할이 대상입니다."""
    adapter = _require_adapter()
    role = _find_role(adapter, request.role) if request.role else None
    adapter.mute_audio(role)
    return {"status": "muted", "role": request.role}


# ============================================================
# WebSocket
# ============================================================

@router.websocket("/ws/session")
async def session_events(websocket: WebSocket, token: Optional[str] = Query(None)):
    """세션 이벤트를 UI로 스트리밍하는 WebSocket 엔드포인트.

    클라이언트가 보내는 메시지는 무시하며, 연결 종료 시 구독을 해제합니다.
    """
    if _bus is None:
        logger.error("이벤트 버스가 초기화되지 않음")
        await websocket.close(code=1011, reason="Server not ready")
        return

    # 연결 수락 전 토큰 검증
    if not verify_ws_token(token):
        await websocket.close(code=4001, reason="Unauthorized")
        return

    loop = asyncio.get_running_loop()
    queue: asyncio.Queue = asyncio.Queue()
    listener = (loop, queue)
    _listeners.add(listener)

    await websocket.accept()
    logger.info(f"세션 이벤트 리스너 연결 (총 {len(_listeners)}개)")

    async def _sender():
        while True:
            frame = await queue.get()
            await websocket.send_json(frame)

    async def _receiver():
        while True:
            await websocket.receive_text()

    sender = asyncio.create_task(_sender())
    receiver = asyncio.create_task(_receiver())
    try:
        done, pending = await asyncio.wait({sender, receiver}, return_when=asyncio.FIRST_COMPLETED)
        for task in pending:
            task.cancel()
        for task in done:
            exc = task.exception()
            if exc is not None and not isinstance(exc, WebSocketDisconnect):
                logger.error(f"세션 이벤트 WebSocket 오류: {exc}")
    finally:
        _listeners.discard(listener)
        logger.info(f"세션 이벤트 리스너 연결 해제 (남은 {len(_listeners)}개)")
