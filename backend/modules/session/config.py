"""화상 세션 모듈 설정.

토큰 서비스, SDK 로그 레벨, 클라이언트 팩토리 등 환경변수 기반 설정과
고정 미디어 트랙 설정을 정의합니다.
"""

import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from .models import (
    AudioTrackSettings,
    CameraFacing,
    LogLevel,
    TrackSettings,
    VideoCodec,
    VideoTrackSettings,
)

logger = logging.getLogger(__name__)

# .env 파일 로드
_env_path = Path(__file__).parent.parent.parent / "config" / ".env"
load_dotenv(_env_path)


class SessionSettings(BaseSettings):
    """화상 세션 설정 클래스.

    환경 변수를 Python 객체로 매핑하고 유효성을 검증합니다.
    """

    # 토큰 서비스 설정
    TOKEN_ENDPOINT: str = Field(
        default="http://localhost:8080/api/token",
        description="참가 토큰 발급 엔드포인트"
    )

    TOKEN_ROLE: str = Field(
        default="host",
        description="토큰 발급 시 요청할 역할"
    )

    TOKEN_REQUEST_TIMEOUT: float = Field(
        default=10.0,
        description="토큰 요청 타임아웃 (초)"
    )

    # SDK 설정
    SDK_LOG_LEVEL: str = Field(
        default="VERBOSE",
        description="SDK 로그 출력 레벨 (OFF/ERROR/WARNING/VERBOSE)"
    )

    SESSION_CLIENT_FACTORY: Optional[str] = Field(
        default=None,
        description="화상회의 클라이언트 팩토리 경로 (예: my_sdk.binding:build_client)"
    )

    # 로깅 설정
    LOG_LEVEL: str = Field(
        default="INFO",
        description="로그 레벨"
    )

    @field_validator('SDK_LOG_LEVEL')
    @classmethod
    def validate_sdk_log_level(cls, v: str) -> str:
        """SDK 로그 레벨 유효성 검증"""
        allowed = [level.name for level in LogLevel]
        if v.upper() not in allowed:
            raise ValueError(f"SDK_LOG_LEVEL은 {allowed} 중 하나여야 합니다.")
        return v.upper()

    @field_validator('LOG_LEVEL')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """로그 레벨 유효성 검증"""
        allowed = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in allowed:
            raise ValueError(f"LOG_LEVEL은 {allowed} 중 하나여야 합니다.")
        return v.upper()

    @property
    def sdk_log_level(self) -> LogLevel:
        return LogLevel[self.SDK_LOG_LEVEL]

    class Config:
        """Pydantic 설정"""
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


@lru_cache()
def get_session_settings() -> SessionSettings:
    """SessionSettings 싱글톤 인스턴스를 반환합니다."""
    settings = SessionSettings()
    logger.info(f"[Session Config] 토큰 엔드포인트: {settings.TOKEN_ENDPOINT}")
    logger.info(f"[Session Config] SDK 로그 레벨: {settings.SDK_LOG_LEVEL}")
    return settings


# ============================================================
# 고정 미디어 트랙 설정
# ============================================================

@dataclass(frozen=True)
class MediaConfig:
    """클라이언트 생성 시 적용되는 고정 미디어 설정."""

    VIDEO_CODEC: VideoCodec = VideoCodec.VP8
    VIDEO_WIDTH: int = 320
    VIDEO_HEIGHT: int = 180
    VIDEO_MAX_BITRATE: int = 512  # kbps
    VIDEO_MAX_FRAME_RATE: int = 25
    CAMERA_FACING: CameraFacing = CameraFacing.FRONT
    VIDEO_TRACK_DESCRIPTION: str = "Just a normal video track"

    AUDIO_MAX_BITRATE: int = 32  # kbps
    AUDIO_TRACK_DESCRIPTION: str = "Just a normal audio track"

    # SDK 분석 이벤트 레벨
    ANALYTICS_LEVEL: LogLevel = LogLevel.VERBOSE

    def track_settings(self) -> TrackSettings:
        """비디오/오디오 트랙 설정 묶음을 생성합니다."""
        video = VideoTrackSettings(
            codec=self.VIDEO_CODEC,
            width=self.VIDEO_WIDTH,
            height=self.VIDEO_HEIGHT,
            max_bitrate=self.VIDEO_MAX_BITRATE,
            max_frame_rate=self.VIDEO_MAX_FRAME_RATE,
            camera_facing=self.CAMERA_FACING,
            track_description=self.VIDEO_TRACK_DESCRIPTION,
        )
        audio = AudioTrackSettings(
            max_bitrate=self.AUDIO_MAX_BITRATE,
            track_description=self.AUDIO_TRACK_DESCRIPTION,
        )
        return TrackSettings(video=video, audio=audio)


media_config = MediaConfig()
