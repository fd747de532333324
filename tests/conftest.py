"""共通フィクスチャ。

- 環境変数設定の再読込（テスト間で LST_* を漏らさない）
- 100×100 画像のマッピングとプロセッサコンテキスト
- レイヤー設定 → 基底状態/プロセッサ列のファクトリ
"""

from __future__ import annotations

from typing import Any, Callable, Iterator

import pytest

from common import settings
from common.types import Dimensions, Point2D
from effects import ProcessorContext, build_base_state, is_animated, processors_for_entry
from engine.core.anchor_geometry import ImageMapping, compute_image_mapping
from engine.core.layer_config import LayerConfigEntry
from engine.core.motion import MotionClock
from engine.core.state import LayerRuntimeState, Processor

STAGE = 2048.0


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """各テストを既定設定で始め、終了後も既定へ戻す。"""
    import os

    for key in list(os.environ):
        if key.startswith("LST_"):
            monkeypatch.delenv(key, raising=False)
    settings.reload_from_env()
    yield
    monkeypatch.undo()
    settings.reload_from_env()


@pytest.fixture()
def mapping_100() -> ImageMapping:
    return compute_image_mapping(Dimensions(100.0, 100.0))


@pytest.fixture()
def ctx() -> ProcessorContext:
    return ProcessorContext(motion_clock=MotionClock(), stage_size=STAGE)


@pytest.fixture()
def make_entry() -> Callable[..., LayerConfigEntry]:
    def _make(**kw: Any) -> LayerConfigEntry:
        kw.setdefault("layer_id", "layer")
        kw.setdefault("image_id", "img")
        kw.setdefault("position", Point2D(1024.0, 1024.0))
        return LayerConfigEntry(**kw)

    return _make


@pytest.fixture()
def prepare(
    ctx: ProcessorContext, mapping_100: ImageMapping
) -> Callable[..., tuple[LayerRuntimeState, list[Processor]]]:
    """entry → (基底状態, プロセッサ列)。`mapping` で画像を差し替えられる。"""

    def _prepare(
        entry: LayerConfigEntry, mapping: ImageMapping | None = None
    ) -> tuple[LayerRuntimeState, list[Processor]]:
        procs = processors_for_entry(entry, ctx)
        animated = any(is_animated(p) for p in procs)
        base = build_base_state(entry, mapping or mapping_100, STAGE, animated=animated)
        return base, procs

    return _prepare
