from __future__ import annotations

import pytest

from common import settings
from common.env import env_bool, env_float, env_int, env_str


def test_defaults() -> None:
    s = settings.get()
    assert s.STAGE_SIZE == 2048
    assert s.DEFAULT_TIMEZONE == "UTC"
    assert (s.SCALE_MIN, s.SCALE_MAX) == (0.01, 10.0)
    assert (s.CULL_PADDING_STATIC, s.CULL_PADDING_ANIMATED) == (4, 64)
    assert s.DROP_STATIC_OFFSTAGE is True
    assert s.MAPPING_CACHE_MAXSIZE == 256
    assert s.FRAME_CACHE_ENABLED is True


def test_reload_reads_prefixed_variables(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LST_STAGE_SIZE", "1024")
    monkeypatch.setenv("LST_DEFAULT_TIMEZONE", "UTC+9")
    monkeypatch.setenv("LST_CULL_PADDING_ANIMATED", "128")
    monkeypatch.setenv("LST_DROP_STATIC_OFFSTAGE", "off")
    monkeypatch.setenv("LST_FRAME_CACHE_ENABLED", "0")
    settings.reload_from_env()
    s = settings.get()
    assert s.STAGE_SIZE == 1024
    assert s.DEFAULT_TIMEZONE == "UTC+9"
    assert s.CULL_PADDING_ANIMATED == 128
    assert s.DROP_STATIC_OFFSTAGE is False
    assert s.FRAME_CACHE_ENABLED is False


def test_invalid_values_fall_back(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LST_STAGE_SIZE", "huge")
    monkeypatch.setenv("LST_SCALE_MIN", "-1")
    monkeypatch.setenv("LST_MAPPING_CACHE_MAXSIZE", "-5")
    settings.reload_from_env()
    s = settings.get()
    assert s.STAGE_SIZE == 2048
    assert s.SCALE_MIN > 0.0
    assert s.MAPPING_CACHE_MAXSIZE == 0


def test_env_helpers(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LST_X_INT", " 12 ")
    monkeypatch.setenv("LST_X_FLOAT", "0.5")
    monkeypatch.setenv("LST_X_BOOL", "yes")
    monkeypatch.setenv("LST_X_STR", "  ")
    assert env_int("LST_X_INT", 0) == 12
    assert env_int("LST_X_INT", 0, min_value=20) == 20
    assert env_float("LST_X_FLOAT", 1.0) == 0.5
    assert env_bool("LST_X_BOOL", False) is True
    assert env_str("LST_X_STR", "fallback") == "fallback"
    assert env_int("LST_X_MISSING", 7) == 7
