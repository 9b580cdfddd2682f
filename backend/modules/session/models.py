"""화상 세션 데이터 모델.

외부 화상회의 클라이언트(SDK)가 콜백으로 전달하는 값 객체들을 정의합니다.
어댑터는 이 타입들을 해석하지 않고 그대로 UI 계층에 전달합니다.

Classes:
    Peer: 룸 참가자
    Role: 권한 묶음
    Track / AudioTrack / VideoTrack: 미디어 트랙
    Room: 룸 상태 (녹화/스트리밍 상태 포함)
    Message: 채팅 메시지
    SessionConfig: 참가 설정 (사용자 이름, 인증 토큰)
    TrackSettings: 비디오/오디오 트랙 설정
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum, IntEnum
from typing import List, Optional


class TrackKind(str, Enum):
    AUDIO = "audio"
    VIDEO = "video"
    UNKNOWN = "unknown"


class VideoCodec(str, Enum):
    VP8 = "vp8"
    H264 = "h264"


class CameraFacing(str, Enum):
    FRONT = "front"
    BACK = "back"


class LogLevel(IntEnum):
    """SDK 로그 레벨. 값이 클수록 상세합니다."""

    OFF = 0
    ERROR = 1
    WARNING = 2
    VERBOSE = 3


class PeerUpdate(str, Enum):
    PEER_JOINED = "peer_joined"
    PEER_LEFT = "peer_left"
    ROLE_UPDATED = "role_updated"
    NAME_UPDATED = "name_updated"
    METADATA_UPDATED = "metadata_updated"
    DEFAULT_UPDATE = "default_update"


class TrackUpdate(str, Enum):
    TRACK_ADDED = "track_added"
    TRACK_REMOVED = "track_removed"
    TRACK_MUTED = "track_muted"
    TRACK_UNMUTED = "track_unmuted"
    TRACK_DESCRIPTION_CHANGED = "track_description_changed"
    TRACK_DEGRADED = "track_degraded"
    TRACK_RESTORED = "track_restored"


class RoomUpdate(str, Enum):
    BROWSER_RECORDING_STATE_UPDATED = "browser_recording_state_updated"
    SERVER_RECORDING_STATE_UPDATED = "server_recording_state_updated"
    RTMP_STREAMING_STATE_UPDATED = "rtmp_streaming_state_updated"
    HLS_STREAMING_STATE_UPDATED = "hls_streaming_state_updated"
    ROOM_PEER_COUNT_UPDATED = "room_peer_count_updated"


# ============================================================
# 권한 / 역할
# ============================================================

@dataclass(frozen=True)
class Permissions:
    """역할에 부여된 권한 플래그. 명시되지 않은 권한은 모두 False."""

    change_role: bool = False
    mute: bool = False
    unmute: bool = False
    remove_others: bool = False
    end_room: bool = False


@dataclass(frozen=True)
class Role:
    """이름이 붙은 권한 묶음.

    Attributes:
        name (str): 역할 이름 (예: "host", "guest")
        permissions (Permissions): 역할이 수행할 수 있는 작업
        priority (int): 역할 우선순위
    """

    name: str
    permissions: Permissions = field(default_factory=Permissions)
    priority: int = 0


# ============================================================
# 트랙 / 참가자 / 룸
# ============================================================

@dataclass
class Track:
    track_id: str
    kind: TrackKind = TrackKind.UNKNOWN
    source: str = "regular"
    description: str = ""
    is_mute: bool = False


@dataclass
class AudioTrack(Track):
    kind: TrackKind = TrackKind.AUDIO


@dataclass
class VideoTrack(Track):
    kind: TrackKind = TrackKind.VIDEO


@dataclass
class Peer:
    """룸 참가자.

    Attributes:
        peer_id (str): 참가자 고유 ID
        name (str): 표시 이름
        role (Optional[Role]): 현재 역할 (역할 정보가 아직 없으면 None)
        is_local (bool): 로컬 참가자(현재 클라이언트 사용자) 여부
    """

    peer_id: str
    name: str
    role: Optional[Role] = None
    is_local: bool = False
    audio_track: Optional[AudioTrack] = None
    video_track: Optional[VideoTrack] = None


@dataclass(frozen=True)
class RecordingState:
    running: bool = False
    started_at: Optional[datetime] = None
    error: Optional[str] = None


@dataclass
class Room:
    """외부 클라이언트가 보고하는 룸 상태.

    Attributes:
        room_id (str): 룸 ID
        name (Optional[str]): 룸 이름
        peers (List[Peer]): 참가자 목록 (첫 번째가 입장 알림 대상)
        browser_recording_state (RecordingState): 브라우저 녹화 상태
        server_recording_state (RecordingState): 서버 녹화 상태
        rtmp_streaming_state (RecordingState): RTMP 스트리밍 상태
    """

    room_id: str
    name: Optional[str] = None
    peers: List[Peer] = field(default_factory=list)
    browser_recording_state: RecordingState = field(default_factory=RecordingState)
    server_recording_state: RecordingState = field(default_factory=RecordingState)
    rtmp_streaming_state: RecordingState = field(default_factory=RecordingState)


# ============================================================
# 메시지 / 요청 / 알림
# ============================================================

def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Message:
    """수신한 채팅 메시지. 세션 메시지 로그에 추가된 뒤 변경되지 않습니다."""

    sender: Optional[Peer]
    message: str
    time: datetime = field(default_factory=_utc_now)
    type: str = "chat"


@dataclass(frozen=True)
class Speaker:
    peer: Peer
    track: Track
    level: int = 0


@dataclass(frozen=True)
class RoleChangeRequest:
    suggested_role: Role
    requested_by: Optional[Peer] = None


@dataclass(frozen=True)
class ChangeTrackStateRequest:
    track: Track
    mute: bool
    requested_by: Optional[Peer] = None


@dataclass(frozen=True)
class RemovedFromRoomNotification:
    reason: str
    requested_by: Optional[Peer] = None
    room_was_ended: bool = False


@dataclass(frozen=True)
class SessionError:
    """외부 클라이언트가 보고한 오류. 어댑터는 message만 그대로 전달합니다."""

    message: str
    code: int = 0
    is_terminal: bool = False


# ============================================================
# 설정 값
# ============================================================

@dataclass(frozen=True)
class SessionConfig:
    """참가 설정. 참가 시도마다 새로 생성되며 변경되지 않습니다."""

    user_name: str
    auth_token: str


@dataclass(frozen=True)
class VideoTrackSettings:
    codec: VideoCodec
    width: int
    height: int
    max_bitrate: int
    max_frame_rate: int
    camera_facing: CameraFacing
    track_description: str = ""


@dataclass(frozen=True)
class AudioTrackSettings:
    max_bitrate: int
    track_description: str = ""


@dataclass(frozen=True)
class TrackSettings:
    video: VideoTrackSettings
    audio: AudioTrackSettings
