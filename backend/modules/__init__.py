"""Backend modules package.

이 패키지는 화상 세션 어댑터 서비스의 핵심 모듈을 포함합니다.

Modules:
    session: 외부 화상회의 클라이언트 어댑터, 이벤트 버스, 토큰 서비스
    shared: 라우터 간 공유 DTO
"""

from .session import (
    SessionEventAdapter,
    EventBus,
    SessionEvent,
    TokenService,
    NoticePresenter,
    LoggingNoticePresenter,
    EventBusNoticePresenter,
    get_session_settings,
    load_client_factory,
)
from .shared import SessionStatus, UIEvent


__all__ = [
    # Session
    "SessionEventAdapter",
    "EventBus",
    "SessionEvent",
    "TokenService",
    "NoticePresenter",
    "LoggingNoticePresenter",
    "EventBusNoticePresenter",
    "get_session_settings",
    "load_client_factory",
    # Shared DTOs
    "SessionStatus",
    "UIEvent",
]
