"""화상 세션 이벤트 어댑터.

외부 화상회의 클라이언트(SDK)와 UI 계층 사이의 어댑터입니다. 클라이언트를
구성하고, 클라이언트 콜백을 이벤트 버스 발행과 핸들러 슬롯 호출로 변환하며,
녹화/스트리밍 상태와 권한 같은 파생 상태를 제공합니다.

주요 기능:
    - 토큰 발급 → 고정 미디어 설정으로 클라이언트 생성 → 미리보기 시작
    - join / leave / 역할 변경 / 원격 음소거 명령 전달
    - 세션 콜백 → EventBus 이벤트, 알림, 핸들러 슬롯 변환
    - 파생 상태: is_recording, is_streaming, can_* 권한

Event Mapping:
    on_join              → JOINED_ROOM (첫 번째 참가자)
    on_peer_update       → PEERS_UPDATED (+ 알림, 역할 변경 시 ROLE_UPDATED)
    on_track_update      → mute_status_handler (오디오 트랙만)
    on_error             → ERROR_OCCURRED
    on_message           → 메시지 로그 추가, MESSAGE_RECEIVED, 알림
    on_room_update       → recording_update_handler (녹화/스트리밍 변경만)
    on_role_change_request / on_change_track_state_request / on_removed_from_room
                         → 각 핸들러 슬롯

Thread Safety:
    - 클라이언트 콜백 전달 컨텍스트에서만 상태를 변경 (락 없음)

Examples:
    >>> adapter = SessionEventAdapter(token_service, client_factory, bus, notices)
    >>> adapter.preview_handler = lambda room, tracks: render(tracks)
    >>> token = await adapter.initialize("상담사", "room-123")
    >>> adapter.join()
    >>> adapter.leave()
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional

from .client import (
    ClientFactory,
    ConferenceClient,
    PreviewListener,
    SessionLogger,
    SessionUpdateListener,
)
from .config import MediaConfig, media_config
from .events import EventBus, SessionEvent
from .models import (
    AudioTrack,
    ChangeTrackStateRequest,
    LogLevel,
    Message,
    Peer,
    PeerUpdate,
    Permissions,
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
    TrackUpdate,
)
from .notices import NoticePresenter
from .token_service import TokenService

logger = logging.getLogger(__name__)
sdk_logger = logging.getLogger(f"{__name__}.sdk")

# 녹화/스트리밍 상태 변경으로 취급하는 룸 업데이트
RECORDING_UPDATES = frozenset({
    RoomUpdate.BROWSER_RECORDING_STATE_UPDATED,
    RoomUpdate.SERVER_RECORDING_STATE_UPDATED,
    RoomUpdate.RTMP_STREAMING_STATE_UPDATED,
})

_SDK_LOG_LEVELS = {
    LogLevel.ERROR: logging.ERROR,
    LogLevel.WARNING: logging.WARNING,
    LogLevel.VERBOSE: logging.DEBUG,
}


def track_kind_label(kind: TrackKind) -> str:
    """로그 출력용 트랙 종류 문자열."""
    if kind == TrackKind.AUDIO:
        return "Audio"
    if kind == TrackKind.VIDEO:
        return "Video"
    return "Unknown Kind"


@dataclass
class Session:
    """setup 한 번으로 생성되는 세션 상태.

    Attributes:
        client (ConferenceClient): 외부 클라이언트 핸들
        config (SessionConfig): 참가 설정
        messages (List[Message]): 수신 순서대로 쌓이는 채팅 로그 (삭제 없음)
        room (Optional[Room]): 마지막으로 수신한 룸 상태
    """

    client: ConferenceClient
    config: SessionConfig
    messages: List[Message] = field(default_factory=list)
    room: Optional[Room] = None


class SessionEventAdapter(SessionUpdateListener, PreviewListener, SessionLogger):
    """외부 클라이언트 콜백을 UI 이벤트로 변환하는 어댑터.

    핸들러 슬롯은 이벤트마다 하나의 핸들러만 가집니다. 여러 구독자가 필요한
    이벤트는 EventBus로 발행됩니다.

    Attributes:
        token_service (TokenService): 참가 토큰 발급 클라이언트
        client_factory (ClientFactory): 외부 클라이언트 생성 함수
        bus (EventBus): 브로드캐스트 이벤트 버스
        notices (NoticePresenter): 토스트 알림 표시기
        log_level (LogLevel): 출력할 SDK 로그 최대 레벨
        session (Optional[Session]): 현재 세션 (setup 전/퇴장 후 None)
    """

    def __init__(
        self,
        token_service: TokenService,
        client_factory: ClientFactory,
        bus: EventBus,
        notices: NoticePresenter,
        log_level: LogLevel = LogLevel.VERBOSE,
        media: MediaConfig = media_config,
    ):
        self.token_service = token_service
        self.client_factory = client_factory
        self.bus = bus
        self.notices = notices
        self.log_level = log_level
        self.media = media

        self.session: Optional[Session] = None

        # 핸들러 슬롯 (UI 계층에서 할당)
        self.preview_handler: Optional[Callable[[Room, List[Track]], None]] = None
        self.role_change_handler: Optional[Callable[[RoleChangeRequest], None]] = None
        self.change_track_state_handler: Optional[Callable[[ChangeTrackStateRequest], None]] = None
        self.removed_from_room_handler: Optional[Callable[[RemovedFromRoomNotification], None]] = None
        self.recording_update_handler: Optional[Callable[[], None]] = None
        self.mute_status_handler: Optional[Callable[[AudioTrack], None]] = None

    # ============================================================
    # Setup
    # ============================================================

    async def initialize(self, user: str, room: str) -> Optional[str]:
        """토큰을 발급받고 클라이언트를 구성한 뒤 미리보기를 시작합니다.

        Args:
            user: 사용자 이름
            room: 참가할 룸 ID

        Returns:
            Optional[str]: 발급된 토큰. 발급 실패 시 None이며 클라이언트는 생성되지 않음

        Note:
            - 실패 시 "Something went wrong" 알림을 한 번 표시하고 모달을 닫음
            - 재시도하지 않음
        """
        token = await self.token_service.fetch_token(user, room)
        if not token:
            logger.error(f"[Session] 토큰 발급 실패: user={user}, room={room}")
            self.notices.show("Something went wrong")
            self.notices.dismiss_modals()
            return None

        self._setup(user, token)
        return token

    def _setup(self, user: str, token: str) -> None:
        if self.session is not None:
            logger.info("[Session] 기존 세션 교체: 이전 클라이언트 퇴장")
            self.session.client.leave()
            self.session = None

        client = self.client_factory(
            self.media.track_settings(),
            self,
            self.media.ANALYTICS_LEVEL,
        )
        config = SessionConfig(user_name=user, auth_token=token)
        self.session = Session(client=client, config=config)

        logger.info(f"[Session] 클라이언트 생성 완료, 미리보기 시작: user={user}")
        client.preview(config, self)

    # ============================================================
    # Commands
    # ============================================================

    def join(self) -> None:
        if self.session is None:
            logger.debug("[Session] 설정 없음, join 무시")
            return
        logger.info(f"[Session] 룸 참가 요청: user={self.session.config.user_name}")
        self.session.client.join(self.session.config, self)

    def leave(self) -> None:
        """룸에서 퇴장하고 세션을 정리합니다. 여러 번 호출해도 안전합니다."""
        if self.session is None:
            return
        logger.info(f"[Session] 룸 퇴장: user={self.session.config.user_name}")
        self.session.client.leave()
        self.session = None

    def change_role(self, peer: Peer, role: Role, force: bool = False) -> None:
        if self.session is None:
            return
        logger.info(f"[Session] 역할 변경 요청: peer={peer.name}, role={role.name}, force={force}")
        self.session.client.change_role(peer, role, force)

    def accept_role_change(self, request: RoleChangeRequest) -> None:
        if self.session is None:
            return
        logger.info(f"[Session] 역할 변경 수락: role={request.suggested_role.name}")
        self.session.client.accept_role_change(request)

    def mute_audio(self, role: Optional[Role] = None) -> None:
        """오디오를 원격 음소거합니다. role이 없으면 모든 역할이 대상입니다."""
        if self.session is None:
            return
        roles = [role] if role is not None else None
        self.session.client.change_track_state(mute=True, kind=TrackKind.AUDIO, roles=roles)

    # ============================================================
    # Derived state
    # ============================================================

    @property
    def config(self) -> Optional[SessionConfig]:
        return self.session.config if self.session else None

    @property
    def messages(self) -> List[Message]:
        if self.session is None:
            return []
        return list(self.session.messages)

    @property
    def room(self) -> Optional[Room]:
        if self.session is None:
            return None
        return self.session.client.room or self.session.room

    @property
    def local_peer(self) -> Optional[Peer]:
        if self.session is None:
            return None
        return self.session.client.local_peer

    @property
    def roles(self) -> List[Role]:
        if self.session is None:
            return []
        return list(self.session.client.roles or [])

    @property
    def is_recording(self) -> bool:
        room = self.room
        if room is None:
            return False
        return room.browser_recording_state.running or room.server_recording_state.running

    @property
    def is_streaming(self) -> bool:
        room = self.room
        if room is None:
            return False
        return room.rtmp_streaming_state.running

    def _permissions(self) -> Optional[Permissions]:
        peer = self.local_peer
        if peer is None or peer.role is None:
            return None
        return peer.role.permissions

    @property
    def can_change_role(self) -> bool:
        permissions = self._permissions()
        return permissions.change_role if permissions else False

    @property
    def can_remote_mute(self) -> bool:
        permissions = self._permissions()
        return permissions.mute if permissions else False

    @property
    def can_remove_peer(self) -> bool:
        permissions = self._permissions()
        return permissions.remove_others if permissions else False

    @property
    def can_end_room(self) -> bool:
        permissions = self._permissions()
        return permissions.end_room if permissions else False

    # ============================================================
    # Session callbacks
    # ============================================================

    def on_join(self, room: Room) -> None:
        self._cache_room(room)
        if room.peers:
            logger.info(f"[Session] 룸 참가 완료: room={room.room_id}, peers={len(room.peers)}")
            self.bus.publish(SessionEvent.JOINED_ROOM, {"peer": room.peers[0]})

    def on_peer_update(self, peer: Peer, update: PeerUpdate) -> None:
        logger.info(f"[Session] 참가자 업데이트: {peer.name}, {update.value}")

        self.bus.publish(SessionEvent.PEERS_UPDATED, {"peer": peer})

        if update == PeerUpdate.PEER_JOINED:
            self.notices.show(f"🙌 {peer.name} joined!")
        elif update == PeerUpdate.PEER_LEFT:
            self.notices.show(f"👋 {peer.name} left!")
        elif update == PeerUpdate.ROLE_UPDATED:
            if peer.role is not None:
                self.notices.show(f"🎉 {peer.name}'s role updated to {peer.role.name}")
                self.bus.publish(SessionEvent.ROLE_UPDATED, {"peer": peer})
        else:
            logger.debug(f"[Session] 처리하지 않는 참가자 업데이트: {update.value}")

    def on_track_update(self, track: Track, update: TrackUpdate, peer: Peer) -> None:
        logger.debug(
            f"[Session] 트랙 업데이트: peer={peer.name}, {update.value}, "
            f"track={track.track_id}, {track_kind_label(track.kind)}, {track.source}"
        )
        if isinstance(track, AudioTrack) and self.mute_status_handler is not None:
            self.mute_status_handler(track)

    def on_error(self, error: SessionError) -> None:
        logger.error(f"[Session] 클라이언트 오류: code={error.code}, {error.message}")
        self.bus.publish(SessionEvent.ERROR_OCCURRED, {"error": error.message})

    def on_message(self, message: Message) -> None:
        if self.session is None:
            logger.warning("[Session] 세션 없이 메시지 수신, 로그에 추가하지 않음")
        else:
            self.session.messages.append(message)

        sender = message.sender.name if message.sender else "Someone"
        self.bus.publish(SessionEvent.MESSAGE_RECEIVED, {"message": message})
        self.notices.show(f"💬 {sender} sent you a message")

    def on_speakers_updated(self, speakers: List[Speaker]) -> None:
        now = datetime.now()
        timestamp = f"{now.hour}:{now.minute}:{now.second}"
        logger.debug(
            f"[Session] Speaker update {timestamp} "
            f"{[s.peer.name for s in speakers]} "
            f"{[track_kind_label(s.track.kind) for s in speakers]} "
            f"{[s.track.source for s in speakers]}"
        )

    def on_room_update(self, room: Room, update: RoomUpdate) -> None:
        logger.info(f"[Session] 룸 업데이트: {room.name or ''}, {update.value}")
        self._cache_room(room)

        if update in RECORDING_UPDATES and self.recording_update_handler is not None:
            self.recording_update_handler()

    def on_role_change_request(self, request: RoleChangeRequest) -> None:
        requested_by = request.requested_by.name if request.requested_by else "server"
        logger.info(f"[Session] 역할 변경 요청 수신: by={requested_by}, role={request.suggested_role.name}")
        if self.role_change_handler is not None:
            self.role_change_handler(request)

    def on_change_track_state_request(self, request: ChangeTrackStateRequest) -> None:
        if self.change_track_state_handler is not None:
            self.change_track_state_handler(request)

    def on_removed_from_room(self, notification: RemovedFromRoomNotification) -> None:
        logger.info(
            f"[Session] 룸에서 제거됨: reason={notification.reason}, "
            f"room_ended={notification.room_was_ended}"
        )
        if self.removed_from_room_handler is not None:
            self.removed_from_room_handler(notification)

    def on_reconnecting(self) -> None:
        self.notices.show("Trying to Reconnect")

    def on_reconnected(self) -> None:
        self.notices.show("Reconnection Successful")

    # ============================================================
    # Preview / SDK logger
    # ============================================================

    def on_preview(self, room: Room, local_tracks: List[Track]) -> None:
        logger.info(
            f"[Session] 미리보기 준비: "
            f"{[t.kind.value for t in local_tracks]} {[t.source for t in local_tracks]}"
        )
        self._cache_room(room)
        if self.preview_handler is not None:
            self.preview_handler(room, local_tracks)

    def log(self, message: str, level: LogLevel) -> None:
        if self.log_level == LogLevel.OFF or level == LogLevel.OFF:
            return
        if level > self.log_level:
            return
        sdk_logger.log(_SDK_LOG_LEVELS.get(level, logging.INFO), message)

    def _cache_room(self, room: Room) -> None:
        if self.session is not None:
            self.session.room = room
