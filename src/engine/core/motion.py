"""
どこで: `engine.core.motion`
何を: 宣言的な速度指定（静止/回転数/実時刻エイリアス）を `ResolvedMotionSpeed` へ解決し、
      任意時刻の角度を求める。レイヤー毎の開始時刻は `MotionClock` が保持する。
なぜ: 「エイリアスか数値か」の判定を読み込み時の 1 回に閉じ込め、内部コードが生の設定型を
      再検査しないようにするため。

角度規約: 0°=上（時計の 12 時）、時計回りが正。結果は常に [0, 360)。
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import Literal, Union

from .angles import normalize360

logger = logging.getLogger(__name__)

SpeedAlias = Literal["second", "minute", "hour"]
TimeFormat = Literal["12", "24"]
TickMode = Literal["smooth", "tick"]

SPEED_ALIASES: tuple[str, ...] = ("second", "minute", "hour")
CLOCK_DEFAULTS = {"time_format": "24", "direction": "cw", "tick_mode": "smooth"}

_TIMEZONE_RE = re.compile(r"^UTC(?:([+-])(\d{1,2})(?::?(\d{2}))?)?$", re.IGNORECASE)

_MS_PER_SECOND = 1000
_MS_PER_MINUTE = 60 * _MS_PER_SECOND
_MS_PER_HOUR = 60 * _MS_PER_MINUTE
_MS_PER_DAY = 24 * _MS_PER_HOUR


@dataclass(frozen=True)
class MotionSpec:
    """設定ファイル由来の未解決モーション指定。

    `speed` は None / 数値（回転/時）/ エイリアス文字列のいずれか。
    """

    speed: float | str | None = None
    direction: str | None = None
    time_format: str | None = None
    timezone: str | None = None


@dataclass(frozen=True)
class StaticSpeed:
    kind: Literal["static"] = "static"


@dataclass(frozen=True)
class AliasSpeed:
    alias: SpeedAlias
    timezone_offset_minutes: int = 0
    time_format: TimeFormat = "24"
    kind: Literal["alias"] = "alias"


@dataclass(frozen=True)
class NumericSpeed:
    rotations_per_hour: float
    direction_sign: int = 1
    kind: Literal["numeric"] = "numeric"


ResolvedMotionSpeed = Union[StaticSpeed, AliasSpeed, NumericSpeed]

STATIC = StaticSpeed()


@dataclass(frozen=True)
class WallClock:
    """タイムゾーン適用済みの時刻読み。"""

    hours: int
    minutes: int
    seconds: int
    milliseconds: float


def parse_timezone_offset(text: str | None) -> int:
    """"UTC" / "UTC+8" / "UTC-05" / "UTC+05:30" を分単位のオフセットへ変換する。

    空/None は 0。解釈できない文字列は警告を出して 0（UTC）とする。
    """
    if text is None:
        return 0
    s = str(text).strip()
    if not s:
        return 0
    m = _TIMEZONE_RE.match(s)
    if m is None:
        logger.warning("timezone %r を解釈できません。UTC として扱います", text)
        return 0
    sign, hours, minutes = m.groups()
    if sign is None:
        return 0
    h = int(hours)
    mm = int(minutes) if minutes else 0
    if h > 14 or mm >= 60:
        logger.warning("timezone %r は範囲外です。UTC として扱います", text)
        return 0
    total = h * 60 + mm
    return -total if sign == "-" else total


def _normalize_format(value: str | int | None) -> TimeFormat:
    s = str(value).strip() if value is not None else ""
    if s == "12":
        return "12"
    if s and s != "24":
        logger.warning("time format %r は未対応です。24 時間表記を使います", value)
    return "24"


def resolve_motion_speed(
    spec: MotionSpec | None, default_timezone_minutes: int = 0
) -> ResolvedMotionSpeed:
    """モーション指定を 1 回だけ解決する。

    1. speed 無し/0 → static
    2. "second"/"minute"/"hour" → alias（タイムゾーン/表記付き）
    3. それ以外は有限数へ変換して numeric（負値は警告の上で向きを反転）
    """
    if spec is None or spec.speed is None:
        return STATIC
    raw = spec.speed
    if isinstance(raw, str):
        key = raw.strip().lower()
        if not key:
            return STATIC
        if key in SPEED_ALIASES:
            tz = (
                parse_timezone_offset(spec.timezone)
                if spec.timezone is not None
                else int(default_timezone_minutes)
            )
            return AliasSpeed(
                alias=key,  # type: ignore[arg-type]
                timezone_offset_minutes=tz,
                time_format=_normalize_format(spec.time_format),
            )
        try:
            value = float(key)
        except ValueError:
            logger.warning("speed %r を解釈できません。静止として扱います", raw)
            return STATIC
    elif isinstance(raw, bool):
        logger.warning("speed %r を解釈できません。静止として扱います", raw)
        return STATIC
    else:
        try:
            value = float(raw)
        except (TypeError, ValueError):
            logger.warning("speed %r を解釈できません。静止として扱います", raw)
            return STATIC

    if not math.isfinite(value):
        logger.warning("speed %r は有限ではありません。静止として扱います", raw)
        return STATIC
    if value == 0.0:
        return STATIC

    sign = -1 if (spec.direction or CLOCK_DEFAULTS["direction"]).strip().lower() == "ccw" else 1
    if value < 0.0:
        logger.warning("負の speed %r は向きの反転として扱います", raw)
        sign = -sign
    return NumericSpeed(rotations_per_hour=abs(value), direction_sign=sign)


def wall_clock_at(timestamp_ms: float, timezone_offset_minutes: int = 0) -> WallClock:
    """エポックミリ秒の UTC 時刻へオフセットを足した時刻読み。"""
    ts = float(timestamp_ms) if math.isfinite(timestamp_ms) else 0.0
    local = (ts + timezone_offset_minutes * _MS_PER_MINUTE) % _MS_PER_DAY
    hours, rem = divmod(local, _MS_PER_HOUR)
    minutes, rem = divmod(rem, _MS_PER_MINUTE)
    seconds, millis = divmod(rem, _MS_PER_SECOND)
    return WallClock(int(hours), int(minutes), int(seconds), float(millis))


def alias_angle(
    alias: str, time_format: str, clock: WallClock, tick_mode: str = "smooth"
) -> float:
    """時刻読みから時計針の角度を求める。

    24 時間表記の hour は 12:00 が真上に来るよう 12 時間ずらす
    （正午では 12 時間表記と同じ 0°）。
    """
    s = float(clock.seconds)
    if tick_mode != "tick":
        s += clock.milliseconds / 1000.0
    m = clock.minutes + s / 60.0
    if alias == "second":
        angle = (s / 60.0) * 360.0
    elif alias == "minute":
        angle = (m / 60.0) * 360.0
    elif str(time_format) == "12":
        angle = (((clock.hours % 12) + m / 60.0) / 12.0) * 360.0
    else:
        angle = ((((clock.hours - 12 + 24) % 24) + m / 60.0) / 24.0) * 360.0
    return normalize360(angle)


def rotation_degrees(
    speed: ResolvedMotionSpeed,
    timestamp_ms: float,
    start_ms: float | None = None,
    tick_mode: str = "smooth",
) -> float:
    """解決済み速度と時刻から角度を返す。

    - static: 常に 0
    - numeric: `start_ms` からの経過時間 [h] × 回転数 × 360 × 向き
    - alias: `timestamp_ms`（エポック）の実時刻から直接
    """
    if isinstance(speed, NumericSpeed):
        start = timestamp_ms if start_ms is None else start_ms
        elapsed_hours = (timestamp_ms - start) / _MS_PER_HOUR
        return normalize360(
            elapsed_hours * speed.rotations_per_hour * 360.0 * speed.direction_sign
        )
    if isinstance(speed, AliasSpeed):
        clock = wall_clock_at(timestamp_ms, speed.timezone_offset_minutes)
        return alias_angle(speed.alias, speed.time_format, clock, tick_mode)
    return 0.0


def is_active(speed: ResolvedMotionSpeed) -> bool:
    return not isinstance(speed, StaticSpeed)


class MotionClock:
    """レイヤー毎の「最初に観測した時刻」を保持するコンテキスト。

    プロセス全体のグローバルにせず、ステージ（またはテスト）ごとに生成する。
    """

    def __init__(self) -> None:
        self._starts: dict[str, float] = {}

    def start_for(self, layer_id: str, timestamp_ms: float) -> float:
        start = self._starts.get(layer_id)
        if start is None:
            start = float(timestamp_ms)
            self._starts[layer_id] = start
        return start

    def elapsed_ms(self, layer_id: str, timestamp_ms: float) -> float:
        return float(timestamp_ms) - self.start_for(layer_id, timestamp_ms)

    def reset(self, layer_id: str | None = None) -> None:
        if layer_id is None:
            self._starts.clear()
        else:
            self._starts.pop(layer_id, None)

    def __contains__(self, layer_id: object) -> bool:
        return layer_id in self._starts


__all__ = [
    "SPEED_ALIASES",
    "CLOCK_DEFAULTS",
    "MotionSpec",
    "StaticSpeed",
    "AliasSpeed",
    "NumericSpeed",
    "ResolvedMotionSpeed",
    "STATIC",
    "WallClock",
    "parse_timezone_offset",
    "resolve_motion_speed",
    "wall_clock_at",
    "alias_angle",
    "rotation_degrees",
    "is_active",
    "MotionClock",
]
