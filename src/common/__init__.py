"""
どこで: `common` パッケージ。
何を: effects/engine/api から共有する軽量ユーティリティ（BaseRegistry、型、設定）。
なぜ: 依存の向きを内側へ揃え、API 層から再利用する共通基盤を分離するため。
"""

from .base_registry import BaseRegistry
from .types import CoordinateBundle, Dimensions, DualSpaceCoordinate, PercentPoint, Point2D

__all__ = [
    "BaseRegistry",
    "CoordinateBundle",
    "Dimensions",
    "DualSpaceCoordinate",
    "PercentPoint",
    "Point2D",
]
