"""
どこで: `engine.core.layer_config`
何を: 外部から与えられるレイヤー設定（LayerConfigEntry）と各モーションブロックの不変データ型。
なぜ: コアは設定を読み取り専用として扱い、プロセッサ毎の入力を明示するため。
"""

from __future__ import annotations

from dataclasses import dataclass, field

from common.types import PercentPoint, Point2D

from .anchor_geometry import DEFAULT_BASE_ANGLE, DEFAULT_TIP_ANGLE
from .motion import MotionSpec

_IMAGE_CENTER = PercentPoint(50.0, 50.0)


@dataclass(frozen=True)
class SpinConfig:
    motion: MotionSpec = field(default_factory=MotionSpec)
    pivot: PercentPoint = _IMAGE_CENTER


@dataclass(frozen=True)
class OrbitConfig:
    """公転設定。`center`/`line_point` はステージピクセル（None は静止位置）。"""

    motion: MotionSpec = field(default_factory=MotionSpec)
    center: Point2D | None = None
    line_point: Point2D | None = None
    image_point: PercentPoint = _IMAGE_CENTER
    orient: bool = False
    show_line: bool = False


@dataclass(frozen=True)
class ClockConfig:
    """時計針追従。`mode` は "none" / "true" / "second" / "minute" / "hour"。"""

    mode: str = "none"
    angle: float = 0.0
    tick_mode: str = "smooth"
    time_format: str = "24"
    timezone: str | None = None
    center: Point2D | None = None
    base_radius: float = 0.0


@dataclass(frozen=True)
class PulseConfig:
    amplitude: float = 0.1
    frequency: float = 1.0
    phase: float = 0.0
    wave: str = "sine"


@dataclass(frozen=True)
class FadeConfig:
    """不透明度の周期変調。`zero_frequency` は "midpoint" か "none"。"""

    min: float = 0.0
    max: float = 1.0
    frequency: float = 1.0
    phase: float = 0.0
    wave: str = "sine"
    zero_frequency: str = "midpoint"


@dataclass(frozen=True)
class LayerConfigEntry:
    """1 レイヤーぶんの静的設定。コアは決して変更しない。

    `position` はステージピクセル（None はステージ中央）、
    `position_image_point` はそこへ重ねる画像内の点（百分率）、
    `scale` は百分率（10..500 に丸めて倍率化）。
    """

    layer_id: str
    image_id: str
    renderer: str = "canvas"
    z_index: int = 0
    position: Point2D | None = None
    position_image_point: PercentPoint = _IMAGE_CENTER
    scale: tuple[float, float] = (100.0, 100.0)
    angle: float = 0.0
    tip_angle: float = DEFAULT_TIP_ANGLE
    base_angle: float = DEFAULT_BASE_ANGLE
    spin: SpinConfig | None = None
    orbit: OrbitConfig | None = None
    clock: ClockConfig | None = None
    pulse: PulseConfig | None = None
    fade: FadeConfig | None = None


__all__ = [
    "SpinConfig",
    "OrbitConfig",
    "ClockConfig",
    "PulseConfig",
    "FadeConfig",
    "LayerConfigEntry",
]
