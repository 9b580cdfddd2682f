"""사용자 알림(토스트) 표시 모듈."""

import logging
from abc import ABC, abstractmethod

from .events import EventBus, SessionEvent

logger = logging.getLogger(__name__)


class NoticePresenter(ABC):
    """일시적인 사용자 알림 표시기. 표시 결과를 기다리지 않습니다."""

    @abstractmethod
    def show(self, message: str) -> None:
        """알림 텍스트를 표시합니다."""

    @abstractmethod
    def dismiss_modals(self) -> None:
        """현재 표시 중인 모달 UI를 모두 닫습니다."""


class LoggingNoticePresenter(NoticePresenter):
    """UI가 없는 환경에서 알림을 로그로 남깁니다."""

    def show(self, message: str) -> None:
        logger.info(f"[Notice] {message}")

    def dismiss_modals(self) -> None:
        logger.info("[Notice] 모달 닫기 요청")


class EventBusNoticePresenter(LoggingNoticePresenter):
    """알림을 로그로 남긴 뒤 이벤트 버스로 발행하여 연결된 UI가 표시하도록 합니다."""

    def __init__(self, bus: EventBus):
        self.bus = bus

    def show(self, message: str) -> None:
        super().show(message)
        self.bus.publish(SessionEvent.NOTICE, {"message": message})

    def dismiss_modals(self) -> None:
        super().dismiss_modals()
        self.bus.publish(SessionEvent.MODALS_DISMISSED)
