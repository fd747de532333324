"""
どこで: `engine.core.state`
何を: パイプラインを流れるレイヤー実行時状態（LayerRuntimeState）と、その構成要素
      Transform2D / VisualState / MotionState。
なぜ: 任意フィールドだらけの単一レコードを避け、各プロセッサが書く範囲を明示するため。

すべて frozen。プロセッサは `with_*` で新しい値を作り、触らない構成要素は
入力と同一オブジェクトのまま返す（消費側は `is` 比較で差分判定できる）。
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Callable

from common.types import Point2D

from .anchor_geometry import ImageMapping


@dataclass(frozen=True)
class Transform2D:
    """ステージ上の配置。`position` は画像中心のステージ座標、`rotation` は時計回り [deg]。"""

    position: Point2D
    scale: Point2D = Point2D(1.0, 1.0)
    rotation: float = 0.0


@dataclass(frozen=True)
class VisualState:
    opacity: float = 1.0
    visible: bool = True


@dataclass(frozen=True)
class MotionState:
    """モーション系プロセッサの作業値（未設定は None）。"""

    spin_angle: float | None = None
    orbit_angle: float | None = None
    orbit_center: Point2D | None = None
    orbit_radius: float | None = None
    orbit_point: Point2D | None = None
    orbit_line_visible: bool = False
    clock_angle: float | None = None

    @property
    def spinning(self) -> bool:
        return self.spin_angle is not None


@dataclass(frozen=True)
class LayerRuntimeState:
    """1 レイヤー × 1 フレームの状態。フレーム間で共有しない。"""

    layer_id: str
    image_id: str
    mapping: ImageMapping
    rest: Transform2D
    transform: Transform2D
    visual: VisualState = field(default_factory=VisualState)
    motion: MotionState = field(default_factory=MotionState)
    src: str = ""
    renderer: str = "canvas"
    z_index: int = 0
    animated: bool = False

    def with_transform(self, **changes: Any) -> "LayerRuntimeState":
        return replace(self, transform=replace(self.transform, **changes))

    def with_visual(self, **changes: Any) -> "LayerRuntimeState":
        return replace(self, visual=replace(self.visual, **changes))

    def with_motion(self, **changes: Any) -> "LayerRuntimeState":
        return replace(self, motion=replace(self.motion, **changes))


Processor = Callable[[LayerRuntimeState, float], LayerRuntimeState]
"""`(state, timestamp_ms) -> state'` の純粋関数型。"""


__all__ = [
    "Transform2D",
    "VisualState",
    "MotionState",
    "LayerRuntimeState",
    "Processor",
]
