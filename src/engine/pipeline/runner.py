"""
どこで: `engine.pipeline.runner`
何を: 基底状態にプロセッサ列を左から順に畳み込む `run_pipeline` と、その一括版 `process_batch`。
なぜ: プロセッサの合成規則（順序・失敗時の素通し）を一箇所に固定するため。

プロセッサが例外を投げた/不正な値を返した場合は、その段を飛ばして入力状態を次へ渡す。
1 レイヤーの失敗でフレーム全体を失わない。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from common.logging import OnceLogger
from engine.core.state import LayerRuntimeState, Processor

from .frame_cache import FrameCache

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PreparedLayer:
    """不変の基底状態と、そのレイヤーに付与されたプロセッサ列。"""

    base: LayerRuntimeState
    processors: tuple[Processor, ...] = ()

    @property
    def layer_id(self) -> str:
        return self.base.layer_id


def _processor_name(fn: Processor) -> str:
    return getattr(fn, "__name__", type(fn).__name__)


def run_pipeline(
    base: LayerRuntimeState,
    processors: Sequence[Processor],
    timestamp_ms: float,
    *,
    diagnostics: OnceLogger | None = None,
) -> LayerRuntimeState:
    """`processors` を左から順に適用した状態を返す。"""
    state = base
    for fn in processors:
        try:
            out = fn(state, timestamp_ms)
        except Exception as e:
            name = _processor_name(fn)
            msg = "layer %s: processor %s failed; skipped (%s)"
            if diagnostics is None:
                logger.warning(msg, base.layer_id, name, e)
            else:
                diagnostics.warning((base.layer_id, name), msg, base.layer_id, name, e)
            continue
        if not isinstance(out, LayerRuntimeState):
            name = _processor_name(fn)
            msg = "layer %s: processor %s returned %r; skipped"
            if diagnostics is None:
                logger.warning(msg, base.layer_id, name, type(out).__name__)
            else:
                diagnostics.warning(
                    (base.layer_id, name, "type"), msg, base.layer_id, name, type(out).__name__
                )
            continue
        state = out
    return state


def process_batch(
    layers: Sequence[PreparedLayer],
    timestamp_ms: float,
    *,
    cache: FrameCache[LayerRuntimeState] | None = None,
    diagnostics: OnceLogger | None = None,
) -> list[LayerRuntimeState]:
    """共有タイムスタンプで全レイヤーを処理する（入力順を保つ）。

    `cache` を渡すと、同一フレーム内で既に計算済みのレイヤーは再計算しない。
    """
    out: list[LayerRuntimeState] = []
    for layer in layers:
        if cache is None:
            out.append(
                run_pipeline(layer.base, layer.processors, timestamp_ms, diagnostics=diagnostics)
            )
            continue
        out.append(
            cache.get_or_compute(
                layer.layer_id,
                lambda layer=layer: run_pipeline(
                    layer.base, layer.processors, timestamp_ms, diagnostics=diagnostics
                ),
            )
        )
    return out


__all__ = ["PreparedLayer", "run_pipeline", "process_batch"]
