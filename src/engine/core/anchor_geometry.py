"""
どこで: `engine.core.anchor_geometry`
何を: 画像サイズと先端/根元の角度ペアから、中心・先端・根元アンカーと軸角を求める。
なぜ: 時計針のような「根元→先端」軸を持つ画像を、回転/整列の計算で一貫して扱うため。

角度は 0°=右, 90°=上（画面上で反時計回りが正）。画面 Y は下向きなので、
三角関数に入れる前に角度の符号を反転する。
"""

from __future__ import annotations

import logging
import math
from collections import OrderedDict
from dataclasses import dataclass

from common.types import Dimensions, Point2D

from .coordinates import validate_dimensions

logger = logging.getLogger(__name__)

DEFAULT_TIP_ANGLE = 90.0
DEFAULT_BASE_ANGLE = 270.0


@dataclass(frozen=True)
class ImageMapping:
    """1 画像ぶんの派生幾何（すべて画像空間ピクセル）。

    - `display_axis_angle`: 根元→先端の軸角（0°=右, 90°=上）。
    - `display_rotation`: 軸を真上へ向けるのに必要な角度（= 90 - 軸角）。
      時計回り基準で読むと、そのまま軸の時計針角（0°=上）に等しい。
    - `axis_center_offset`: 画像中心 - 先端/根元の中点。
    """

    image_dimensions: Dimensions
    image_center: Point2D
    image_tip: Point2D
    image_base: Point2D
    display_axis_angle: float
    display_rotation: float
    axis_center_offset: Point2D
    tip_angle: float = DEFAULT_TIP_ANGLE
    base_angle: float = DEFAULT_BASE_ANGLE


def ray_to_border(dims: Dimensions, angle_deg: float) -> Point2D:
    """画像中心から角度 `angle_deg` の半直線が外接矩形と交わる点を返す。

    方向は (cos, sin) of -angle。境界までの倍率は
    `min(hw/|dx|, hh/|dy|)`（0 除算は無限大扱い）。
    """
    d = validate_dimensions(dims)
    hw = d.width / 2.0
    hh = d.height / 2.0
    a = math.radians(-angle_deg if math.isfinite(angle_deg) else 0.0)
    dx = math.cos(a)
    dy = math.sin(a)
    # cos(90°) のような 1e-17 を 0 とみなす
    if abs(dx) < 1e-12:
        dx = 0.0
    if abs(dy) < 1e-12:
        dy = 0.0
    sx = hw / abs(dx) if dx != 0.0 else math.inf
    sy = hh / abs(dy) if dy != 0.0 else math.inf
    t = min(sx, sy)
    if not math.isfinite(t):
        return Point2D(hw, hh)
    return Point2D(hw + t * dx, hh + t * dy)


def compute_image_mapping(
    dims: Dimensions,
    tip_angle: float = DEFAULT_TIP_ANGLE,
    base_angle: float = DEFAULT_BASE_ANGLE,
) -> ImageMapping:
    """先端/根元アンカーと軸情報を計算する（純粋・決定的）。

    先端と根元は独立に求める（対蹠である必要はない）。
    """
    d = validate_dimensions(dims)
    tip_angle = float(tip_angle) if math.isfinite(tip_angle) else DEFAULT_TIP_ANGLE
    base_angle = float(base_angle) if math.isfinite(base_angle) else DEFAULT_BASE_ANGLE

    center = d.center
    tip = ray_to_border(d, tip_angle)
    base = ray_to_border(d, base_angle)

    axis_dx = tip.x - base.x
    axis_dy = tip.y - base.y
    if axis_dx == 0.0 and axis_dy == 0.0:
        axis_angle = 0.0
        display_rotation = 0.0
    else:
        axis_angle = math.degrees(math.atan2(-axis_dy, axis_dx))
        display_rotation = 90.0 - axis_angle

    mid = Point2D((tip.x + base.x) / 2.0, (tip.y + base.y) / 2.0)
    return ImageMapping(
        image_dimensions=d,
        image_center=center,
        image_tip=tip,
        image_base=base,
        display_axis_angle=axis_angle,
        display_rotation=display_rotation,
        axis_center_offset=center - mid,
        tip_angle=tip_angle,
        base_angle=base_angle,
    )


class ImageMappingCache:
    """`(w, h, tip, base)` キーの LRU。ステージ毎に 1 インスタンスを持つ。

    同一画像/既定の 90°/270° を共有する多数レイヤーで再計算を避ける。
    """

    def __init__(self, maxsize: int | None = 256) -> None:
        self._cache: "OrderedDict[tuple[float, float, float, float], ImageMapping]" = OrderedDict()
        self._maxsize = maxsize
        self._hits = 0
        self._misses = 0

    @staticmethod
    def make_key(
        dims: Dimensions, tip_angle: float, base_angle: float
    ) -> tuple[float, float, float, float]:
        return (float(dims.width), float(dims.height), float(tip_angle), float(base_angle))

    def get(
        self,
        dims: Dimensions,
        tip_angle: float = DEFAULT_TIP_ANGLE,
        base_angle: float = DEFAULT_BASE_ANGLE,
    ) -> ImageMapping:
        key = self.make_key(dims, tip_angle, base_angle)
        hit = self._cache.get(key)
        if hit is not None:
            self._cache.move_to_end(key)
            self._hits += 1
            return hit
        self._misses += 1
        mapping = compute_image_mapping(dims, tip_angle, base_angle)
        if self._maxsize == 0:
            return mapping
        self._cache[key] = mapping
        if self._maxsize is not None and self._maxsize > 0:
            while len(self._cache) > self._maxsize:
                evicted, _ = self._cache.popitem(last=False)
                logger.debug("image mapping evicted: %s", evicted)
        return mapping

    def clear(self) -> None:
        self._cache.clear()
        self._hits = 0
        self._misses = 0

    def __len__(self) -> int:
        return len(self._cache)

    def counters(self) -> dict[str, int]:
        return {"size": len(self._cache), "hits": self._hits, "misses": self._misses}


__all__ = [
    "DEFAULT_TIP_ANGLE",
    "DEFAULT_BASE_ANGLE",
    "ImageMapping",
    "ray_to_border",
    "compute_image_mapping",
    "ImageMappingCache",
]
