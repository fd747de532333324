"""
どこで: `engine.core.angles`
何を: 角度の正規化・回転方向・方位角・円周上の点など、度数法の小関数群。
なぜ: spin/orbit/clock で同一の角度規約を共有するため。

規約:
- 方位（bearing）は 0°=右, 90°=上, 反時計回りが正（画面 Y は下向きなので dy を反転）。
- 時計針角は 0°=上, 時計回りが正（`clock_hand_vector` を参照）。
"""

from __future__ import annotations

import math
from typing import Literal

from common.types import Point2D

RotationDirection = Literal["cw", "ccw"]


def normalize360(angle: float) -> float:
    """角度を [0, 360) に正規化する（非有限は 0）。"""
    if not math.isfinite(angle):
        return 0.0
    a = math.fmod(angle, 360.0)
    if a < 0.0:
        a += 360.0
    # -1e-15 + 360 のような丸めで 360 になるケース
    if a >= 360.0:
        a = 0.0
    return a


def direction_sign(direction: str | None) -> int:
    """"ccw" なら -1、それ以外（"cw"/None）は +1。"""
    return -1 if (direction or "").strip().lower() == "ccw" else 1


def apply_direction(angle: float, direction: str | None) -> float:
    return angle * direction_sign(direction)


def bearing_degrees(center: Point2D, point: Point2D) -> float:
    """`center` から `point` への方位角（0°=右, 90°=上）を [0,360) で返す。"""
    dx = point.x - center.x
    dy = point.y - center.y
    if dx == 0.0 and dy == 0.0:
        return 0.0
    return normalize360(math.degrees(math.atan2(-dy, dx)))


def orbit_position(center: Point2D, radius: float, angle_deg: float) -> Point2D:
    """方位角 `angle_deg` の円周上の点（画面座標）。"""
    a = math.radians(angle_deg)
    return Point2D(center.x + radius * math.cos(a), center.y - radius * math.sin(a))


def clock_hand_vector(hand_deg: float) -> Point2D:
    """時計針角（0°=上, 時計回り）の単位ベクトル（画面座標）。"""
    a = math.radians(hand_deg)
    return Point2D(math.sin(a), -math.cos(a))


def rotate_vector(v: Point2D, rotation_deg: float) -> Point2D:
    """画面座標で時計回りに `rotation_deg` 回転（行列 [cos -sin; sin cos]）。"""
    if rotation_deg == 0.0:
        return v
    r = math.radians(rotation_deg)
    c = math.cos(r)
    s = math.sin(r)
    return Point2D(v.x * c - v.y * s, v.x * s + v.y * c)


__all__ = [
    "RotationDirection",
    "normalize360",
    "direction_sign",
    "apply_direction",
    "bearing_degrees",
    "orbit_position",
    "clock_hand_vector",
    "rotate_vector",
]
