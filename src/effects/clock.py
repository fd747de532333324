"""
clock プロセッサ（時計針追従）

- 画像の先端・根元と外部の「時計中心」を常に一直線に保つ（先端/根元が対蹠なら画像中心も乗る）。
- 根元アンカーは時計中心、または同じ直線上で `base_radius` だけ外側に置く。
- 針角 θ（0°=上, 時計回り）の出所は次のいずれか 1 つ:
  - mode "none": 静的 `angle`
  - mode "true": spin の現在角を継承（spin が無ければ動かさない）
  - mode "second"/"minute"/"hour": 実時刻（tick/smooth、タイムゾーン、12/24 表記）
- このプロセッサが付くレイヤーでは orbit は付与されない（配置を完全に所有する）。

書く範囲: transform.position / transform.rotation / motion.clock_angle
"""

from __future__ import annotations

import logging

from common.logging import OnceLogger
from common.types import Point2D
from engine.core.angles import clock_hand_vector, normalize360
from engine.core.coordinates import calculate_position_for_pivot, image_to_percent
from engine.core.layer_config import ClockConfig, LayerConfigEntry
from engine.core.motion import (
    AliasSpeed,
    CLOCK_DEFAULTS,
    parse_timezone_offset,
    rotation_degrees,
)
from engine.core.state import LayerRuntimeState, Processor

from .registry import ProcessorContext, processor

logger = logging.getLogger(__name__)

_MODE_ALIASES = {
    "none": "none",
    "static": "none",
    "true": "true",
    "spin": "true",
    "sec": "second",
    "second": "second",
    "min": "minute",
    "minute": "minute",
    "hour": "hour",
}


def _normalize_mode(cfg: ClockConfig) -> str:
    mode = _MODE_ALIASES.get(str(cfg.mode).strip().lower())
    if mode is None:
        logger.warning("clock mode %r は未対応です。静的角度として扱います", cfg.mode)
        return "none"
    return mode


def _alias_speed(mode: str, cfg: ClockConfig, ctx: ProcessorContext) -> AliasSpeed:
    tz = (
        parse_timezone_offset(cfg.timezone)
        if cfg.timezone is not None
        else ctx.default_timezone_minutes
    )
    fmt = "12" if str(cfg.time_format).strip() == "12" else CLOCK_DEFAULTS["time_format"]
    return AliasSpeed(alias=mode, timezone_offset_minutes=tz, time_format=fmt)  # type: ignore[arg-type]


def hand_to_rotation(hand_deg: float, display_rotation: float) -> float:
    """根元→先端軸を針角 `hand_deg` へ向けるためのレイヤー回転（時計回り）。"""
    return normalize360(hand_deg - display_rotation)


@processor("clock", order=30, attach=lambda entry: entry.clock is not None)
def create_clock(entry: LayerConfigEntry, ctx: ProcessorContext) -> Processor:
    cfg = entry.clock
    assert cfg is not None
    mode = _normalize_mode(cfg)
    speed = _alias_speed(mode, cfg, ctx) if mode in ("second", "minute", "hour") else None
    tick_mode = "tick" if str(cfg.tick_mode).strip().lower() == "tick" else "smooth"
    static_hand = normalize360(cfg.angle)
    base_radius = max(0.0, float(cfg.base_radius))
    layer_id = entry.layer_id
    diag = OnceLogger(logger)

    def clock(state: LayerRuntimeState, timestamp_ms: float) -> LayerRuntimeState:
        mapping = state.mapping
        if mode == "true":
            spin_angle = state.motion.spin_angle
            if spin_angle is None:
                diag.debug("no-spin", "layer %s: clock mode 'true' だが spin が無いため動かしません", layer_id)
                return state
            hand = normalize360(mapping.display_rotation + spin_angle)
        elif speed is not None:
            hand = rotation_degrees(speed, timestamp_ms, tick_mode=tick_mode)
        else:
            hand = static_hand

        rotation = hand_to_rotation(hand, mapping.display_rotation)
        center = cfg.center if cfg.center is not None else state.rest.position
        u = clock_hand_vector(hand)
        base_anchor = Point2D(center.x + u.x * base_radius, center.y + u.y * base_radius)
        dims = mapping.image_dimensions
        position = calculate_position_for_pivot(
            base_anchor,
            image_to_percent(mapping.image_base, dims),
            dims,
            state.transform.scale,
            rotation,
        )
        return state.with_transform(position=position, rotation=rotation).with_motion(
            clock_angle=hand
        )

    # "true" は spin 側が動きを宣言する
    clock.__animates__ = speed is not None
    return clock


__all__ = ["create_clock", "hand_to_rotation"]
