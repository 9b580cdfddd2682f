"""세션 어댑터 테스트 공용 픽스처.

외부 클라이언트, 토큰 서비스, 알림 표시기는 호출을 기록하는 가짜 객체로 대체합니다.
"""

import sys
from pathlib import Path
from typing import List, Optional

import pytest

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from modules.session import EventBus, SessionEventAdapter  # noqa: E402
from modules.session.models import (  # noqa: E402
    LogLevel,
    Peer,
    Permissions,
    Role,
    Room,
    TrackKind,
)
from modules.session.notices import NoticePresenter  # noqa: E402


class FakeConferenceClient:
    """호출을 기록하는 화상회의 클라이언트."""

    def __init__(self, track_settings, logger, analytics_level):
        self.track_settings = track_settings
        self.logger = logger
        self.analytics_level = analytics_level
        self.calls: List[tuple] = []
        self.room: Optional[Room] = None
        self.local_peer: Optional[Peer] = None
        self.roles: List[Role] = []

    def preview(self, config, listener):
        self.calls.append(("preview", config, listener))

    def join(self, config, listener):
        self.calls.append(("join", config, listener))

    def leave(self):
        self.calls.append(("leave",))

    def change_role(self, peer, role, force=False):
        self.calls.append(("change_role", peer, role, force))

    def accept_role_change(self, request):
        self.calls.append(("accept_role_change", request))

    def change_track_state(self, mute, kind: TrackKind, roles=None):
        self.calls.append(("change_track_state", mute, kind, roles))

    def call_names(self) -> List[str]:
        return [call[0] for call in self.calls]


class RecordingFactory:
    """생성한 클라이언트를 모두 기록하는 클라이언트 팩토리."""

    def __init__(self):
        self.clients: List[FakeConferenceClient] = []

    def __call__(self, track_settings, logger, analytics_level):
        client = FakeConferenceClient(track_settings, logger, analytics_level)
        self.clients.append(client)
        return client

    @property
    def last(self) -> FakeConferenceClient:
        return self.clients[-1]


class FakeTokenService:
    def __init__(self, token: Optional[str] = "token-abc"):
        self.token = token
        self.requests: List[tuple] = []

    async def fetch_token(self, user: str, room: str) -> Optional[str]:
        self.requests.append((user, room))
        return self.token


class RecordingNoticePresenter(NoticePresenter):
    def __init__(self):
        self.shown: List[str] = []
        self.dismiss_count = 0

    def show(self, message: str) -> None:
        self.shown.append(message)

    def dismiss_modals(self) -> None:
        self.dismiss_count += 1


class EventRecorder:
    """이벤트 버스의 모든 이벤트를 기록합니다."""

    def __init__(self, bus: EventBus):
        self.events: list = []
        bus.subscribe_all(lambda event, payload: self.events.append((event, payload)))

    def of(self, event) -> list:
        return [payload for e, payload in self.events if e == event]


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def recorder(bus):
    return EventRecorder(bus)


@pytest.fixture
def notices():
    return RecordingNoticePresenter()


@pytest.fixture
def factory():
    return RecordingFactory()


@pytest.fixture
def token_service():
    return FakeTokenService()


@pytest.fixture
def adapter(token_service, factory, bus, notices):
    return SessionEventAdapter(
        token_service=token_service,
        client_factory=factory,
        bus=bus,
        notices=notices,
        log_level=LogLevel.VERBOSE,
    )


@pytest.fixture
async def ready_adapter(adapter):
    """setup이 완료된 어댑터."""
    await adapter.initialize("상담사", "room-1")
    return adapter


@pytest.fixture
def host_role():
    return Role(
        name="host",
        permissions=Permissions(change_role=True, mute=True, remove_others=True, end_room=True),
    )


@pytest.fixture
def guest_role():
    return Role(name="guest")


def make_peer(name: str, role: Optional[Role] = None, local: bool = False) -> Peer:
    return Peer(peer_id=f"peer-{name}", name=name, role=role, is_local=local)


@pytest.fixture
def peer_factory():
    return make_peer
