"""세션 이벤트 버스.

어댑터가 발행하는 이름 있는 브로드캐스트 이벤트를 UI 계층 구독자에게
전달하는 인-프로세스 pub/sub입니다. 전역 알림 센터 대신 컴포지션 루트(app.py)가
버스 인스턴스를 소유합니다.

Examples:
    >>> bus = EventBus()
    >>> unsubscribe = bus.subscribe(SessionEvent.MESSAGE_RECEIVED, lambda e, p: print(p))
    >>> bus.publish(SessionEvent.MESSAGE_RECEIVED, {"message": msg})
    >>> unsubscribe()
"""

import logging
from collections import defaultdict
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


class SessionEvent(str, Enum):
    JOINED_ROOM = "joined_room"
    PEERS_UPDATED = "peers_updated"
    ROLE_UPDATED = "role_updated"
    ERROR_OCCURRED = "error_occurred"
    MESSAGE_RECEIVED = "message_received"
    # EventBusNoticePresenter 전용
    NOTICE = "notice"
    MODALS_DISMISSED = "modals_dismissed"


EventHandler = Callable[[SessionEvent, Dict[str, Any]], None]


class EventBus:
    """동기식 이벤트 버스.

    publish()는 호출한 컨텍스트에서 구독자를 등록 순서대로 호출합니다.
    한 구독자에서 예외가 발생해도 나머지 구독자에게는 계속 전달됩니다.

    Attributes:
        _subscribers (Dict[SessionEvent, List[EventHandler]]): 이벤트별 구독자
        _wildcard (List[EventHandler]): 모든 이벤트 구독자
    """

    def __init__(self):
        self._subscribers: Dict[SessionEvent, List[EventHandler]] = defaultdict(list)
        self._wildcard: List[EventHandler] = []

    def subscribe(self, event: SessionEvent, handler: EventHandler) -> Callable[[], None]:
        """특정 이벤트를 구독합니다.

        Returns:
            Callable[[], None]: 구독 해제 함수
        """
        self._subscribers[event].append(handler)
        return lambda: self.unsubscribe(event, handler)

    def subscribe_all(self, handler: EventHandler) -> Callable[[], None]:
        """모든 이벤트를 구독합니다."""
        self._wildcard.append(handler)
        return lambda: self.unsubscribe(None, handler)

    def unsubscribe(self, event: Optional[SessionEvent], handler: EventHandler) -> None:
        """구독을 해제합니다. event가 None이면 전체 구독에서 제거합니다."""
        handlers = self._wildcard if event is None else self._subscribers.get(event, [])
        if handler in handlers:
            handlers.remove(handler)

    def publish(self, event: SessionEvent, payload: Optional[Dict[str, Any]] = None) -> int:
        """이벤트를 발행합니다.

        Args:
            event: 발행할 이벤트
            payload: 이벤트 데이터 (없으면 빈 딕셔너리)

        Returns:
            int: 정상적으로 전달된 구독자 수
        """
        payload = payload or {}
        handlers = list(self._subscribers.get(event, [])) + list(self._wildcard)
        delivered = 0

        for handler in handlers:
            try:
                handler(event, payload)
                delivered += 1
            except Exception:
                logger.exception(f"[EventBus] '{event.value}' 구독자 처리 중 오류")

        logger.debug(f"[EventBus] {event.value} 발행: {delivered}/{len(handlers)} 구독자")
        return delivered

    def subscriber_count(self, event: Optional[SessionEvent] = None) -> int:
        if event is None:
            return len(self._wildcard)
        return len(self._subscribers.get(event, []))
