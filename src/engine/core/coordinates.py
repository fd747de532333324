"""
どこで: `engine.core.coordinates`
何を: 画像ピクセル/百分率/ステージピクセルの 3 空間の相互変換、ピボット基準の配置計算、
      正方ステージをホストのビューポートへ敷き詰める cover 変換。
なぜ: spin/orbit/clock が同じ閉形式アフィン変換を共有し、NaN を下流へ流さないため。

約束:
- 例外は投げない。非有限値は呼び出し側のフォールバックへ置き換える。
- スケールは `settings.SCALE_MIN..SCALE_MAX`（既定 0.01..10）へ丸めてから使う。
"""

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass
from typing import Any, Sequence

from common.settings import get as _get_settings
from common.types import (
    CoordinateBundle,
    Dimensions,
    DualSpaceCoordinate,
    PercentPoint,
    Point2D,
)

from .angles import rotate_vector

_ORIGIN = Point2D(0.0, 0.0)
_UNIT_SCALE = Point2D(1.0, 1.0)
_DEFAULT_DIMENSIONS = Dimensions(100.0, 100.0)


def _finite(value: Any) -> bool:
    # numpy のスカラー（np.float32 等）も numbers.Real として受け付ける
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return False
    return math.isfinite(value)


def _exact(*values: Any) -> bool:
    return all(type(v) is float for v in values)


# ---- 入力の妥当化 ---------------------------------------------------------


def validate_point(point: Point2D, fallback: Point2D = _ORIGIN) -> Point2D:
    """非有限成分をフォールバックで置き換えた点を返す。"""
    x = point.x if _finite(point.x) else fallback.x
    y = point.y if _finite(point.y) else fallback.y
    if x is point.x and y is point.y and _exact(x, y):
        return point
    return Point2D(float(x), float(y))


def validate_scale(scale: Point2D, fallback: Point2D = _UNIT_SCALE) -> Point2D:
    """非有限/非正の成分をフォールバックで置き換え、安全範囲へ丸める。"""
    s = _get_settings()
    x = scale.x if _finite(scale.x) and scale.x > 0 else fallback.x
    y = scale.y if _finite(scale.y) and scale.y > 0 else fallback.y
    x = max(s.SCALE_MIN, min(s.SCALE_MAX, float(x)))
    y = max(s.SCALE_MIN, min(s.SCALE_MAX, float(y)))
    return Point2D(x, y)


def validate_dimensions(
    dims: Dimensions, fallback: Dimensions = _DEFAULT_DIMENSIONS
) -> Dimensions:
    w = dims.width if _finite(dims.width) and dims.width > 0 else fallback.width
    h = dims.height if _finite(dims.height) and dims.height > 0 else fallback.height
    if w is dims.width and h is dims.height and _exact(w, h):
        return dims
    return Dimensions(float(w), float(h))


def validate_stage_size(stage_size: Any, fallback: float | None = None) -> float:
    """有限かつ正のステージ一辺を返す。そうでなければ `fallback`（省略時は設定値）。"""
    if _finite(stage_size) and stage_size > 0:
        return float(stage_size)
    return float(fallback) if fallback is not None else float(_get_settings().STAGE_SIZE)


def clamp_stage(value: float, stage_size: float) -> float:
    """ステージ座標を 0..stage_size に丸める（非有限は 0）。"""
    if not _finite(value):
        return 0.0
    return max(0.0, min(float(stage_size), float(value)))


def percent_to_scale(percent: float) -> float:
    """スケール百分率（10..500 に丸め）を倍率へ変換する。非有限は 100%。"""
    p = float(percent) if _finite(percent) else 100.0
    return max(10.0, min(500.0, p)) / 100.0


def normalize_pair(value: Sequence[float] | None, fallback: tuple[float, float]) -> tuple[float, float]:
    """`[x, y]` 形式の入力を有限値の組へ正規化する。"""
    if value is None or isinstance(value, (str, bytes)):
        return fallback
    try:
        items = list(value)
    except TypeError:
        return fallback
    if not items:
        return fallback
    x = items[0] if _finite(items[0]) else fallback[0]
    y = items[1] if len(items) > 1 and _finite(items[1]) else fallback[1]
    return (float(x), float(y))


# ---- 画像 <-> ステージ ----------------------------------------------------


def image_to_stage(
    image_point: Point2D, dims: Dimensions, scale: Point2D, position: Point2D
) -> Point2D:
    """`stage = position + (image_point - image_center) * scale`。"""
    p = validate_point(image_point)
    d = validate_dimensions(dims)
    s = validate_scale(scale)
    pos = validate_point(position)
    result = Point2D(
        pos.x + (p.x - d.width / 2.0) * s.x,
        pos.y + (p.y - d.height / 2.0) * s.y,
    )
    return validate_point(result)


def stage_to_image(
    stage_point: Point2D, dims: Dimensions, scale: Point2D, position: Point2D
) -> Point2D:
    """`image_to_stage` の逆変換。"""
    p = validate_point(stage_point)
    d = validate_dimensions(dims)
    s = validate_scale(scale)
    pos = validate_point(position)
    result = Point2D(
        (p.x - pos.x) / s.x + d.width / 2.0,
        (p.y - pos.y) / s.y + d.height / 2.0,
    )
    return validate_point(result)


# ---- 百分率 ---------------------------------------------------------------


def image_to_percent(image_point: Point2D, dims: Dimensions) -> PercentPoint:
    p = validate_point(image_point)
    d = validate_dimensions(dims)
    return PercentPoint(p.x * 100.0 / d.width, p.y * 100.0 / d.height)


def percent_to_image(percent: PercentPoint, dims: Dimensions) -> Point2D:
    d = validate_dimensions(dims)
    x = percent.x if _finite(percent.x) else 0.0
    y = percent.y if _finite(percent.y) else 0.0
    return Point2D(x * d.width / 100.0, y * d.height / 100.0)


def stage_to_percent(stage_point: Point2D, stage_size: float) -> PercentPoint:
    p = validate_point(stage_point)
    size = validate_stage_size(stage_size)
    return PercentPoint(p.x * 100.0 / size, p.y * 100.0 / size)


def percent_to_stage(percent: PercentPoint, stage_size: float) -> Point2D:
    size = validate_stage_size(stage_size)
    x = percent.x if _finite(percent.x) else 0.0
    y = percent.y if _finite(percent.y) else 0.0
    return Point2D(x * size / 100.0, y * size / 100.0)


# ---- ピボット配置 ---------------------------------------------------------


def calculate_position_for_pivot(
    stage_anchor: Point2D,
    pivot_percent: PercentPoint,
    dims: Dimensions,
    scale: Point2D,
    rotation_deg: float = 0.0,
) -> Point2D:
    """ステージ点 `stage_anchor` に画像内の `pivot_percent` が重なるレイヤー位置を返す。

    ピボット（0..100 外も可）を画像ピクセルへ変換し、中心からのオフセットを
    スケールしてから `rotation_deg` だけ回転させ、`position = anchor - rotated` とする。
    回転は最終点ではなくオフセットに掛ける（回転中もピボットが静止する）。
    """
    d = validate_dimensions(dims)
    s = validate_scale(scale)
    anchor = validate_point(stage_anchor)
    pivot = percent_to_image(pivot_percent, d)
    offset = Point2D((pivot.x - d.width / 2.0) * s.x, (pivot.y - d.height / 2.0) * s.y)
    rot = rotation_deg if _finite(rotation_deg) else 0.0
    rotated = rotate_vector(offset, rot)
    return validate_point(anchor - rotated, fallback=anchor)


# ---- ビューポート (cover) -------------------------------------------------


@dataclass(frozen=True)
class CoverTransform:
    """ステージ → ビューポートの一様スケールと平行移動（CSS の `background-size: cover` 相当）。

    `width`/`height` は拡大後のステージの大きさ。はみ出す側の offset は負になる。
    """

    scale: float
    offset_x: float
    offset_y: float
    width: float
    height: float


def cover_transform(
    viewport_width: float, viewport_height: float, stage_size: float | None = None
) -> CoverTransform:
    """正方ステージでビューポート全体を覆う変換を返す。

    縦横の倍率のうち大きい方を使い、余った側を中央揃えで切り落とす。
    非有限/非正のビューポート寸法はステージ一辺として扱う（その軸は等倍）。
    """
    size = validate_stage_size(stage_size)
    vw = float(viewport_width) if _finite(viewport_width) and viewport_width > 0 else size
    vh = float(viewport_height) if _finite(viewport_height) and viewport_height > 0 else size
    scale = max(vw / size, vh / size)
    extent = size * scale
    return CoverTransform(
        scale=scale,
        offset_x=(vw - extent) / 2.0,
        offset_y=(vh - extent) / 2.0,
        width=extent,
        height=extent,
    )


def viewport_to_stage(point: Point2D, transform: CoverTransform) -> Point2D:
    """ビューポート上の点（ポインタ位置など）をステージ座標へ。"""
    p = validate_point(point)
    return Point2D(
        (p.x - transform.offset_x) / transform.scale,
        (p.y - transform.offset_y) / transform.scale,
    )


def stage_to_viewport(point: Point2D, transform: CoverTransform) -> Point2D:
    """`viewport_to_stage` の逆変換。"""
    p = validate_point(point)
    return Point2D(
        p.x * transform.scale + transform.offset_x,
        p.y * transform.scale + transform.offset_y,
    )


# ---- 組構造 ---------------------------------------------------------------


def create_coordinate_bundle(point: Point2D, percent: PercentPoint) -> CoordinateBundle:
    return CoordinateBundle(point=point, percent=percent)


def create_dual_space_coordinate(
    image_point: Point2D, dims: Dimensions, stage_point: Point2D, stage_size: float
) -> DualSpaceCoordinate:
    """画像点とステージ点から両空間の CoordinateBundle を組み立てる。"""
    return DualSpaceCoordinate(
        image=create_coordinate_bundle(image_point, image_to_percent(image_point, dims)),
        stage=create_coordinate_bundle(stage_point, stage_to_percent(stage_point, stage_size)),
    )


def distance_between(a: Point2D, b: Point2D) -> float:
    return math.hypot(a.x - b.x, a.y - b.y)


__all__ = [
    "validate_point",
    "validate_scale",
    "validate_dimensions",
    "validate_stage_size",
    "clamp_stage",
    "percent_to_scale",
    "normalize_pair",
    "image_to_stage",
    "stage_to_image",
    "image_to_percent",
    "percent_to_image",
    "stage_to_percent",
    "percent_to_stage",
    "calculate_position_for_pivot",
    "CoverTransform",
    "cover_transform",
    "viewport_to_stage",
    "stage_to_viewport",
    "create_coordinate_bundle",
    "create_dual_space_coordinate",
    "distance_between",
]
