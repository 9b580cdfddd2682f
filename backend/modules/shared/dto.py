"""Lightweight shared DTOs for the session HTTP/WebSocket surface."""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from modules.session.models import Message, Peer


class PeerInfo(BaseModel):
    """UI에 전달되는 참가자 정보."""

    peer_id: str
    name: str
    role: Optional[str] = Field(default=None, description="역할 이름")
    is_local: bool = False

    @classmethod
    def from_peer(cls, peer: Peer) -> "PeerInfo":
        return cls(
            peer_id=peer.peer_id,
            name=peer.name,
            role=peer.role.name if peer.role else None,
            is_local=peer.is_local,
        )


class MessageInfo(BaseModel):
    sender: Optional[PeerInfo] = None
    message: str
    time: datetime
    type: str = "chat"

    @classmethod
    def from_message(cls, message: Message) -> "MessageInfo":
        return cls(
            sender=PeerInfo.from_peer(message.sender) if message.sender else None,
            message=message.message,
            time=message.time,
            type=message.type,
        )


class PermissionInfo(BaseModel):
    can_change_role: bool = False
    can_remote_mute: bool = False
    can_remove_peer: bool = False
    can_end_room: bool = False


class SessionStatus(BaseModel):
    configured: bool = Field(default=False, description="세션 설정(토큰 발급) 완료 여부")
    user_name: Optional[str] = None
    room_id: Optional[str] = None
    is_recording: bool = False
    is_streaming: bool = False
    permissions: PermissionInfo = Field(default_factory=PermissionInfo)


class SetupRequest(BaseModel):
    user_name: str = Field(min_length=1, description="표시 이름")
    room_id: str = Field(min_length=1, description="참가할 룸 ID")


class SetupResponse(BaseModel):
    token: str


class ChangeRoleRequest(BaseModel):
    peer_id: str
    role: str
    force: bool = False


class MuteRequest(BaseModel):
    role: Optional[str] = Field(default=None, description="대상 역할 (없으면 전체)")


class UIEvent(BaseModel):
    """WebSocket으로 UI에 전달되는 이벤트 프레임."""

    type: str
    data: Dict[str, Any] = Field(default_factory=dict)
