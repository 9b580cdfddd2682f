"""화상 세션 모듈.

외부 화상회의 클라이언트 콜백을 UI 이벤트로 변환하는 어댑터와 협력 객체를 제공합니다.

Classes:
    SessionEventAdapter: 클라이언트 콜백 → 이벤트 버스/핸들러 변환
    EventBus: 세션 브로드캐스트 이벤트 버스
    TokenService: 참가 토큰 발급 클라이언트
    NoticePresenter: 토스트 알림 표시기

Config:
    media_config: 고정 미디어 트랙 설정
    get_session_settings: 환경변수 기반 설정
"""

from .adapter import SessionEventAdapter, Session, track_kind_label
from .client import (
    ConferenceClient,
    ClientFactory,
    SessionUpdateListener,
    PreviewListener,
    SessionLogger,
    load_client_factory,
)
from .config import SessionSettings, get_session_settings, MediaConfig, media_config
from .events import EventBus, SessionEvent
from .notices import NoticePresenter, LoggingNoticePresenter, EventBusNoticePresenter
from .token_service import TokenService

__all__ = [
    # Adapter
    "SessionEventAdapter",
    "Session",
    "track_kind_label",
    # Client interfaces
    "ConferenceClient",
    "ClientFactory",
    "SessionUpdateListener",
    "PreviewListener",
    "SessionLogger",
    "load_client_factory",
    # Config
    "SessionSettings",
    "get_session_settings",
    "MediaConfig",
    "media_config",
    # Collaborators
    "EventBus",
    "SessionEvent",
    "NoticePresenter",
    "LoggingNoticePresenter",
    "EventBusNoticePresenter",
    "TokenService",
]
