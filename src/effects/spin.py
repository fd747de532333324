"""
spin プロセッサ（自転）

- 解決済み速度から現在角を求め、レイヤーの唯一の回転源として `rotation` に書く
  （静的 `angle` は無視される）。
- ピボット（画像百分率、既定 50/50、0..100 外も可）の静止ステージ点が動かないよう、
  ピボット配置で `position` を再計算する。

書く範囲: transform.position / transform.rotation / motion.spin_angle
"""

from __future__ import annotations

import logging

from engine.core.coordinates import (
    calculate_position_for_pivot,
    image_to_stage,
    percent_to_image,
)
from engine.core.layer_config import LayerConfigEntry
from engine.core.motion import is_active, resolve_motion_speed, rotation_degrees
from engine.core.state import LayerRuntimeState, Processor

from ._util import has_speed, passthrough
from .registry import ProcessorContext, processor

logger = logging.getLogger(__name__)


def _attach(entry: LayerConfigEntry) -> bool:
    return entry.spin is not None and has_speed(entry.spin.motion)


@processor("spin", order=10, attach=_attach)
def create_spin(entry: LayerConfigEntry, ctx: ProcessorContext) -> Processor:
    assert entry.spin is not None
    speed = resolve_motion_speed(entry.spin.motion, ctx.default_timezone_minutes)
    if not is_active(speed):
        return passthrough
    pivot = entry.spin.pivot
    layer_id = entry.layer_id
    clock = ctx.motion_clock

    def spin(state: LayerRuntimeState, timestamp_ms: float) -> LayerRuntimeState:
        start = clock.start_for(layer_id, timestamp_ms)
        angle = rotation_degrees(speed, timestamp_ms, start)
        dims = state.mapping.image_dimensions
        rest = state.rest
        anchor = image_to_stage(percent_to_image(pivot, dims), dims, rest.scale, rest.position)
        position = calculate_position_for_pivot(
            anchor, pivot, dims, state.transform.scale, angle
        )
        return state.with_transform(position=position, rotation=angle).with_motion(
            spin_angle=angle
        )

    spin.__animates__ = True
    return spin


__all__ = ["create_spin"]
