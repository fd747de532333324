"""
どこで: `effects` 内部ヘルパ。
何を: 速度指定の有無判定と、何もしないプロセッサ。
"""

from __future__ import annotations

from engine.core.motion import MotionSpec
from engine.core.state import LayerRuntimeState


def has_speed(spec: MotionSpec | None) -> bool:
    """速度が指定されているか（0/空文字は未指定扱い）。解決は行わない。"""
    if spec is None or spec.speed is None:
        return False
    if isinstance(spec.speed, str):
        return bool(spec.speed.strip())
    return spec.speed != 0


def passthrough(state: LayerRuntimeState, timestamp_ms: float) -> LayerRuntimeState:
    return state
