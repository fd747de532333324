"""
pulse プロセッサ（スケールの脈動）

- `scale *= 1 + amplitude * osc(t)`。osc は有界周期関数（既定 sine, -1..1）。
- t はレイヤーのモーション開始からの経過秒、`phase` は周期単位。
- amplitude <= 0 / frequency <= 0 は何もしない。結果のスケールは常に正。

書く範囲: transform.scale
"""

from __future__ import annotations

import logging
import math

from common.oscillator import Oscillator
from common.settings import get as _get_settings
from common.types import Point2D
from engine.core.layer_config import LayerConfigEntry
from engine.core.state import LayerRuntimeState, Processor

from ._util import passthrough
from .registry import ProcessorContext, processor

logger = logging.getLogger(__name__)


def _attach(entry: LayerConfigEntry) -> bool:
    cfg = entry.pulse
    if cfg is None:
        return False
    amp = float(cfg.amplitude)
    freq = float(cfg.frequency)
    return math.isfinite(amp) and math.isfinite(freq) and amp > 0.0 and freq > 0.0


@processor("pulse", order=40, attach=_attach)
def create_pulse(entry: LayerConfigEntry, ctx: ProcessorContext) -> Processor:
    cfg = entry.pulse
    assert cfg is not None
    if not _attach(entry):
        return passthrough
    amplitude = float(cfg.amplitude)
    osc = Oscillator(wave=cfg.wave, freq=float(cfg.frequency), phase=float(cfg.phase))
    layer_id = entry.layer_id
    clock = ctx.motion_clock

    def pulse(state: LayerRuntimeState, timestamp_ms: float) -> LayerRuntimeState:
        t = clock.elapsed_ms(layer_id, timestamp_ms) / 1000.0
        factor = 1.0 + amplitude * osc.bipolar(t)
        floor = _get_settings().SCALE_MIN
        s = state.transform.scale
        scale = Point2D(max(floor, s.x * factor), max(floor, s.y * factor))
        return state.with_transform(scale=scale)

    pulse.__animates__ = True
    return pulse


__all__ = ["create_pulse"]
