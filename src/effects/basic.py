"""
basic 配置（静的レイヤーの置き方）

- ステージ点 `position` に画像内の点 `position_image_point` が重なるよう配置する。
- スケールは百分率（10..500）を倍率へ、角度は静的 `angle` [deg]（時計回り）。
- パイプラインの最初の段。ここで作った Transform2D が `rest`（静止位置）になる。
"""

from __future__ import annotations

from common.types import Point2D
from engine.core.anchor_geometry import ImageMapping
from engine.core.angles import normalize360
from engine.core.coordinates import (
    calculate_position_for_pivot,
    percent_to_scale,
    validate_point,
)
from engine.core.layer_config import LayerConfigEntry
from engine.core.state import LayerRuntimeState, Transform2D


def basic_placement(
    entry: LayerConfigEntry, mapping: ImageMapping, stage_size: float
) -> Transform2D:
    """設定の静的変換からレイヤーの静止 Transform2D を求める。"""
    center = Point2D(stage_size / 2.0, stage_size / 2.0)
    anchor = validate_point(entry.position, fallback=center) if entry.position else center
    sx, sy = entry.scale
    scale = Point2D(percent_to_scale(sx), percent_to_scale(sy))
    rotation = normalize360(entry.angle)
    position = calculate_position_for_pivot(
        anchor, entry.position_image_point, mapping.image_dimensions, scale, rotation
    )
    return Transform2D(position=position, scale=scale, rotation=rotation)


def build_base_state(
    entry: LayerConfigEntry,
    mapping: ImageMapping,
    stage_size: float,
    *,
    src: str = "",
    animated: bool = False,
) -> LayerRuntimeState:
    """不変の基底状態を作る。各フレームはここから processors を畳み込む。"""
    rest = basic_placement(entry, mapping, stage_size)
    return LayerRuntimeState(
        layer_id=entry.layer_id,
        image_id=entry.image_id,
        mapping=mapping,
        rest=rest,
        transform=rest,
        src=src,
        renderer=entry.renderer,
        z_index=entry.z_index,
        animated=animated,
    )


__all__ = ["basic_placement", "build_base_state"]
