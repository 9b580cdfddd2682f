"""세션 설정, 고정 미디어 설정, 클라이언트 팩토리 로더 테스트."""

import collections
from dataclasses import FrozenInstanceError

import pytest
from pydantic import ValidationError

from modules.session import MediaConfig, SessionSettings, load_client_factory
from modules.session.models import LogLevel, VideoCodec


def test_sdk_log_level_is_normalized():
    settings = SessionSettings(SDK_LOG_LEVEL="warning", LOG_LEVEL="debug")

    assert settings.SDK_LOG_LEVEL == "WARNING"
    assert settings.sdk_log_level == LogLevel.WARNING
    assert settings.LOG_LEVEL == "DEBUG"


@pytest.mark.parametrize("field", ["SDK_LOG_LEVEL", "LOG_LEVEL"])
def test_invalid_log_levels_are_rejected(field):
    with pytest.raises(ValidationError):
        SessionSettings(**{field: "LOUD"})


def test_log_level_ordering():
    assert LogLevel.OFF < LogLevel.ERROR < LogLevel.WARNING < LogLevel.VERBOSE


def test_media_config_builds_fixed_track_settings():
    settings = MediaConfig().track_settings()

    assert settings.video.codec == VideoCodec.VP8
    assert settings.video.max_frame_rate == 25
    assert settings.audio.max_bitrate == 32


def test_media_config_is_frozen():
    with pytest.raises(FrozenInstanceError):
        MediaConfig().VIDEO_WIDTH = 640


def test_load_client_factory_resolves_callable():
    assert load_client_factory("collections:OrderedDict") is collections.OrderedDict


@pytest.mark.parametrize("path", ["collections", ":OrderedDict", "collections:", "math:pi", "math:missing"])
def test_load_client_factory_rejects_bad_paths(path):
    with pytest.raises(ValueError):
        load_client_factory(path)


def test_load_client_factory_missing_module():
    with pytest.raises(ImportError):
        load_client_factory("no_such_sdk_binding:build")
