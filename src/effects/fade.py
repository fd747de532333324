"""
fade プロセッサ（不透明度の周期変調）

- `opacity = clamp(min, max, min + (max - min) * osc01(t))`。
- min > max は入れ替える。範囲は 0..1 に丸める。
- frequency <= 0 は `zero_frequency` に従う: "midpoint" なら (min+max)/2 で固定、"none" なら何もしない。

書く範囲: visual.opacity
"""

from __future__ import annotations

import logging
import math

from common.oscillator import Oscillator
from engine.core.layer_config import LayerConfigEntry
from engine.core.state import LayerRuntimeState, Processor

from ._util import passthrough
from .registry import ProcessorContext, processor

logger = logging.getLogger(__name__)


def _unit(value: float, fallback: float) -> float:
    v = float(value)
    if not math.isfinite(v):
        return fallback
    return max(0.0, min(1.0, v))


def fade_range(lo: float, hi: float) -> tuple[float, float]:
    """不透明度範囲を 0..1 に丸め、逆順なら入れ替えて返す。"""
    a = _unit(lo, 0.0)
    b = _unit(hi, 1.0)
    return (b, a) if a > b else (a, b)


@processor("fade", order=50, attach=lambda entry: entry.fade is not None)
def create_fade(entry: LayerConfigEntry, ctx: ProcessorContext) -> Processor:
    cfg = entry.fade
    assert cfg is not None
    lo, hi = fade_range(cfg.min, cfg.max)
    freq = float(cfg.frequency)

    if lo == hi or not math.isfinite(freq) or freq <= 0.0:
        if lo != hi and str(cfg.zero_frequency).strip().lower() == "none":
            return passthrough
        constant = (lo + hi) / 2.0

        def fade_constant(state: LayerRuntimeState, timestamp_ms: float) -> LayerRuntimeState:
            if state.visual.opacity == constant:
                return state
            return state.with_visual(opacity=constant)

        return fade_constant

    osc = Oscillator(wave=cfg.wave, freq=freq, phase=float(cfg.phase), lo=lo, hi=hi)
    layer_id = entry.layer_id
    clock = ctx.motion_clock

    def fade(state: LayerRuntimeState, timestamp_ms: float) -> LayerRuntimeState:
        t = clock.elapsed_ms(layer_id, timestamp_ms) / 1000.0
        opacity = min(hi, max(lo, osc(t)))
        return state.with_visual(opacity=opacity)

    return fade


__all__ = ["create_fade", "fade_range"]
