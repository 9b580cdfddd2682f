"""외부 화상회의 클라이언트 인터페이스.

실제 미디어 전송, 시그널링, 재연결은 외부 SDK가 담당합니다. 이 모듈은
어댑터가 의존하는 최소한의 구조적 타입과 콜백 리스너 인터페이스만 정의합니다.

Interfaces:
    ConferenceClient: 어댑터가 호출하는 클라이언트 명령 (preview/join/leave/...)
    SessionUpdateListener: 클라이언트가 호출하는 세션 콜백
    PreviewListener: 미리보기 준비 콜백
    SessionLogger: SDK 로그 라인 수신

SDK 바인딩은 ``ClientFactory`` 시그니처를 따르는 callable로 제공되며,
``load_client_factory("package.module:callable")``로 로드합니다.
"""

import importlib
import logging
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Protocol

from .models import (
    ChangeTrackStateRequest,
    LogLevel,
    Message,
    Peer,
    PeerUpdate,
    RemovedFromRoomNotification,
    Role,
    RoleChangeRequest,
    Room,
    RoomUpdate,
    SessionConfig,
    SessionError,
    Speaker,
    Track,
    TrackKind,
    TrackSettings,
    TrackUpdate,
)

logger = logging.getLogger(__name__)


class SessionUpdateListener(ABC):
    """참가 후 클라이언트가 전달하는 세션 콜백."""

    @abstractmethod
    def on_join(self, room: Room) -> None: ...

    @abstractmethod
    def on_peer_update(self, peer: Peer, update: PeerUpdate) -> None: ...

    @abstractmethod
    def on_track_update(self, track: Track, update: TrackUpdate, peer: Peer) -> None: ...

    @abstractmethod
    def on_error(self, error: SessionError) -> None: ...

    @abstractmethod
    def on_message(self, message: Message) -> None: ...

    @abstractmethod
    def on_speakers_updated(self, speakers: List[Speaker]) -> None: ...

    @abstractmethod
    def on_room_update(self, room: Room, update: RoomUpdate) -> None: ...

    @abstractmethod
    def on_role_change_request(self, request: RoleChangeRequest) -> None: ...

    @abstractmethod
    def on_change_track_state_request(self, request: ChangeTrackStateRequest) -> None: ...

    @abstractmethod
    def on_removed_from_room(self, notification: RemovedFromRoomNotification) -> None: ...

    @abstractmethod
    def on_reconnecting(self) -> None: ...

    @abstractmethod
    def on_reconnected(self) -> None: ...


class PreviewListener(ABC):
    """미리보기(참가 전 로컬 미디어 렌더링) 준비 콜백."""

    @abstractmethod
    def on_preview(self, room: Room, local_tracks: List[Track]) -> None: ...


class SessionLogger(ABC):
    """SDK 내부 로그 라인을 받는 인터페이스."""

    @abstractmethod
    def log(self, message: str, level: LogLevel) -> None: ...


class ConferenceClient(Protocol):
    """외부 화상회의 클라이언트가 제공해야 하는 구조적 타입.

    모든 명령은 fire-and-forget이며, 결과는 등록된 리스너 콜백으로 전달됩니다.
    """

    @property
    def room(self) -> Optional[Room]:
        """현재 룸 상태 (참가 전이면 None)."""
        ...

    @property
    def local_peer(self) -> Optional[Peer]:
        """로컬 참가자 (참가 전이면 None)."""
        ...

    @property
    def roles(self) -> List[Role]:
        """룸에 정의된 역할 목록."""
        ...

    def preview(self, config: SessionConfig, listener: PreviewListener) -> None: ...

    def join(self, config: SessionConfig, listener: SessionUpdateListener) -> None: ...

    def leave(self) -> None:
        """룸에서 퇴장합니다. 여러 번 호출해도 안전해야 합니다."""
        ...

    def change_role(self, peer: Peer, role: Role, force: bool = False) -> None: ...

    def accept_role_change(self, request: RoleChangeRequest) -> None: ...

    def change_track_state(
        self,
        mute: bool,
        kind: TrackKind,
        roles: Optional[List[Role]] = None,
    ) -> None: ...


# (track_settings, logger, analytics_level) -> ConferenceClient
ClientFactory = Callable[[TrackSettings, SessionLogger, LogLevel], ConferenceClient]


def load_client_factory(path: str) -> ClientFactory:
    """``package.module:callable`` 형식의 경로에서 클라이언트 팩토리를 로드합니다.

    Args:
        path: 팩토리 경로 (예: "my_sdk.binding:build_client")

    Returns:
        ClientFactory: 로드된 팩토리

    Raises:
        ValueError: 경로 형식이 잘못되었거나 대상이 callable이 아닐 때
        ImportError: 모듈을 찾을 수 없을 때
    """
    module_name, sep, attr = path.partition(":")
    if not sep or not module_name or not attr:
        raise ValueError(f"클라이언트 팩토리 경로 형식 오류: '{path}' (module:callable 필요)")

    module = importlib.import_module(module_name)
    try:
        factory = getattr(module, attr)
    except AttributeError:
        raise ValueError(f"'{module_name}'에 '{attr}'가 없습니다") from None

    if not callable(factory):
        raise ValueError(f"클라이언트 팩토리가 callable이 아닙니다: '{path}'")

    logger.info(f"[Session] 클라이언트 팩토리 로드: {path}")
    return factory
