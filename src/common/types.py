"""
どこで: `common` の型定義。
何を: Point2D/PercentPoint などステージ座標の値型と Vec2 エイリアス。
なぜ: 依存の少ない場所に配置して循環と分散定義を避けるため。

空間（画像ピクセル/ステージピクセル）は型ではなく文脈で決まる。
異なる空間の値を混ぜるときは必ず `engine.core.coordinates` で変換する。
"""

from __future__ import annotations

from dataclasses import dataclass

Vec2 = tuple[float, float]


@dataclass(frozen=True)
class Point2D:
    """画像空間またはステージ空間のピクセル座標。"""

    x: float
    y: float

    def as_tuple(self) -> Vec2:
        return (self.x, self.y)

    def __add__(self, other: "Point2D") -> "Point2D":
        return Point2D(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Point2D") -> "Point2D":
        return Point2D(self.x - other.x, self.y - other.y)


@dataclass(frozen=True)
class PercentPoint:
    """矩形の幅/高さに対する百分率座標（ピボットは 0..100 外も許容）。"""

    x: float
    y: float

    def as_tuple(self) -> Vec2:
        return (self.x, self.y)


@dataclass(frozen=True)
class Dimensions:
    """画像の自然サイズ [px]。"""

    width: float
    height: float

    @property
    def center(self) -> Point2D:
        return Point2D(self.width / 2.0, self.height / 2.0)


@dataclass(frozen=True)
class CoordinateBundle:
    """ピクセル値と百分率値を組で保持する（再変換の回避用）。"""

    point: Point2D
    percent: PercentPoint


@dataclass(frozen=True)
class DualSpaceCoordinate:
    """同一点の画像ローカル表現とステージ表現。"""

    image: CoordinateBundle
    stage: CoordinateBundle


__all__ = [
    "Vec2",
    "Point2D",
    "PercentPoint",
    "Dimensions",
    "CoordinateBundle",
    "DualSpaceCoordinate",
]
