"""
orbit プロセッサ（公転）

- 中心: 設定値、無ければレイヤーの静止位置（「本来いる場所の周りを回る」）。
- 半径: 中心と軌道線の点（設定値、無ければ静止位置）との距離。
- 角度: `initial + Δ`。`initial` は中心から見た軌道線の点の方位角で 1 回だけ求める
  （角度 0 へ跳ばず、置いた場所から動き出す）。Δ は時計回りを正とする経過角。
- 位置: `orbit_image_point`（画像百分率、既定 50/50）が軌道点に乗るようピボット配置する。
- 向き: spin が有効なら回転に触れない。spin 無しで `orient` 指定時は静止回転へ同じ Δ を足す
  （公転と同期して向きが回る）。

書く範囲: transform.position / transform.rotation（orient 時のみ）/ motion.orbit_*
"""

from __future__ import annotations

import logging

from common.logging import OnceLogger
from engine.core.angles import bearing_degrees, normalize360, orbit_position
from engine.core.coordinates import calculate_position_for_pivot, distance_between
from engine.core.layer_config import LayerConfigEntry
from engine.core.motion import is_active, resolve_motion_speed, rotation_degrees
from engine.core.state import LayerRuntimeState, Processor

from ._util import has_speed, passthrough
from .registry import ProcessorContext, processor

logger = logging.getLogger(__name__)

_MIN_RADIUS = 1e-9


def _attach(entry: LayerConfigEntry) -> bool:
    cfg = entry.orbit
    if cfg is None:
        return False
    return has_speed(cfg.motion) or cfg.orient or cfg.show_line


@processor("orbit", order=20, attach=_attach, suppressed_by=("clock",))
def create_orbit(entry: LayerConfigEntry, ctx: ProcessorContext) -> Processor:
    cfg = entry.orbit
    assert cfg is not None
    speed = resolve_motion_speed(cfg.motion, ctx.default_timezone_minutes)
    has_motion = is_active(speed)
    if not (has_motion or cfg.orient or cfg.show_line):
        return passthrough

    layer_id = entry.layer_id
    clock = ctx.motion_clock
    diag = OnceLogger(logger)

    def orbit(state: LayerRuntimeState, timestamp_ms: float) -> LayerRuntimeState:
        rest_position = state.rest.position
        center = cfg.center if cfg.center is not None else rest_position
        line_point = cfg.line_point if cfg.line_point is not None else rest_position
        radius = distance_between(center, line_point)
        if radius <= _MIN_RADIUS:
            if has_motion:
                diag.warning(
                    "zero-radius",
                    "layer %s: orbit speed が指定されていますが半径が 0 です。%s に留まります",
                    layer_id,
                    center.as_tuple(),
                )
            return state

        initial = bearing_degrees(center, line_point)
        if not has_motion:
            return state.with_motion(
                orbit_angle=initial,
                orbit_center=center,
                orbit_radius=radius,
                orbit_point=line_point,
                orbit_line_visible=cfg.show_line,
            )

        start = clock.start_for(layer_id, timestamp_ms)
        delta = rotation_degrees(speed, timestamp_ms, start)
        # 方位角は反時計回りが正なので、時計回りの Δ は引く
        angle = normalize360(initial - delta)
        point = orbit_position(center, radius, angle)

        rotation = state.transform.rotation
        if cfg.orient and not state.motion.spinning:
            rotation = normalize360(state.rest.rotation + delta)

        position = calculate_position_for_pivot(
            point,
            cfg.image_point,
            state.mapping.image_dimensions,
            state.transform.scale,
            rotation,
        )
        out = state.with_motion(
            orbit_angle=angle,
            orbit_center=center,
            orbit_radius=radius,
            orbit_point=point,
            orbit_line_visible=cfg.show_line,
        )
        if rotation != state.transform.rotation:
            return out.with_transform(position=position, rotation=rotation)
        return out.with_transform(position=position)

    orbit.__animates__ = has_motion
    return orbit


__all__ = ["create_orbit"]
