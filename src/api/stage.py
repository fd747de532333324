"""
どこで: `api.stage`
何を: レイヤー設定とアセット解決から基底状態/プロセッサ列を準備し、時刻ごとに描画用フレームを返す `Stage`。
なぜ: 画像マッピング/モーション開始時刻/フレームキャッシュをステージ単位のコンテキストに閉じ込め、
      複数ステージやテストが互いに干渉しないようにするため。

使い方:
    stage = Stage(load_layer_entries(), StaticAssetResolver(assets))
    frame = stage.compute_frame(timestamp_ms)
    for out in frame.layers:
        backend.draw(out)
"""

from __future__ import annotations

import logging
import time
from typing import Iterable, Sequence

from common.logging import OnceLogger
from common.settings import get as _get_settings
from common.types import Dimensions
from effects import ProcessorContext, build_base_state, is_animated, processors_for_entry
from engine.core.anchor_geometry import ImageMappingCache
from engine.core.coordinates import validate_stage_size
from engine.core.culling import cull, cull_batch, drop_static_offstage
from engine.core.layer_config import LayerConfigEntry
from engine.core.motion import MotionClock, parse_timezone_offset
from engine.core.state import LayerRuntimeState
from engine.pipeline import FrameCache, PreparedLayer, process_batch, run_pipeline
from engine.render.types import LayerOutput
from engine.runtime.frame import StageFrame

from .assets import AssetResolver, ResolvedAsset
from .config import first_definitions

logger = logging.getLogger(__name__)


class Stage:
    """1 つの描画ループに属するステージ。

    引数:
        entries: レイヤー設定（z 昇順でなくてもよい。内部で安定ソートする）。
            同じ layer id が複数あれば入力順で最初の定義だけを使う。
        resolver: 画像 ID → ResolvedAsset。None を返したレイヤーは外す。
        stage_size: 正方ステージの一辺 [px]。省略時は設定値（既定 2048）。
            非有限/非正の値は警告して設定値に置き換える。
        default_timezone: エイリアス速度の既定タイムゾーン（"UTC+9" 等）。
        clock_origin_ms: `tick(dt)` 駆動時の開始時刻（エポック ms）。省略時は現在時刻。

    フレームの共有:
        `compute_frame(ts)` は新しいフレームを始める。ただし直前と同じ `ts` なら
        同じフレームとして扱い、計算済みの状態を再利用する。複数のバックエンドが
        同じフレームを読む場合は `compute_frame` を 1 回だけ呼び、残りは
        `layer_state(layer_id, ts)`（現在フレームのキャッシュを読む）を使う。
    """

    def __init__(
        self,
        entries: Iterable[LayerConfigEntry],
        resolver: AssetResolver,
        *,
        stage_size: float | None = None,
        default_timezone: str | None = None,
        clock_origin_ms: float | None = None,
    ) -> None:
        s = _get_settings()
        if stage_size is None:
            self._stage_size = float(s.STAGE_SIZE)
        else:
            self._stage_size = validate_stage_size(stage_size, s.STAGE_SIZE)
            if self._stage_size != stage_size:
                logger.warning(
                    "stage_size %r は有限の正数ではありません。%s を使います",
                    stage_size,
                    self._stage_size,
                )
        tz = default_timezone if default_timezone is not None else s.DEFAULT_TIMEZONE
        self._context = ProcessorContext(
            motion_clock=MotionClock(),
            stage_size=self._stage_size,
            default_timezone_minutes=parse_timezone_offset(tz),
        )
        self._mappings = ImageMappingCache(s.MAPPING_CACHE_MAXSIZE)
        self._cache: FrameCache[LayerRuntimeState] = FrameCache(enabled=s.FRAME_CACHE_ENABLED)
        self._diag = OnceLogger(logger)
        # 重複 id は z ソート前（入力順）に落とす
        self._entries = tuple(sorted(first_definitions(entries), key=lambda e: e.z_index))
        self._resolver = resolver
        self._layers: list[PreparedLayer] = []
        self._index: dict[str, PreparedLayer] = {}
        self._skipped: list[str] = []
        self._prepared = False
        self._time_ms = float(clock_origin_ms) if clock_origin_ms is not None else time.time() * 1000.0
        self._last_frame: StageFrame | None = None
        self._frame_ts: float | None = None

    # ---- 準備 ----------------------------------------------------------------
    def _resolve(self, entry: LayerConfigEntry) -> ResolvedAsset | None:
        try:
            return self._resolver.resolve(entry.image_id)
        except Exception as e:
            logger.warning("layer %s: asset %r の解決に失敗しました: %s", entry.layer_id, entry.image_id, e)
            return None

    def prepare(self) -> list[PreparedLayer]:
        """基底状態とプロセッサ列を構築する（2 回目以降は構築済みを返す）。"""
        if self._prepared:
            return list(self._layers)

        prepared: list[PreparedLayer] = []
        for entry in self._entries:
            asset = self._resolve(entry)
            if asset is None:
                logger.warning(
                    "layer %s: asset %r を解決できないため描画対象から外します",
                    entry.layer_id,
                    entry.image_id,
                )
                self._skipped.append(entry.layer_id)
                continue
            mapping = self._mappings.get(
                Dimensions(asset.width, asset.height), entry.tip_angle, entry.base_angle
            )
            processors = tuple(processors_for_entry(entry, self._context))
            base = build_base_state(
                entry,
                mapping,
                self._stage_size,
                src=asset.src,
                animated=any(is_animated(p) for p in processors),
            )
            prepared.append(PreparedLayer(base=base, processors=processors))

        if _get_settings().DROP_STATIC_OFFSTAGE:
            kept = {st.layer_id for st in drop_static_offstage([p.base for p in prepared], self._stage_size)}
            prepared = [p for p in prepared if p.layer_id in kept]

        self._layers = prepared
        self._index = {p.layer_id: p for p in prepared}
        self._prepared = True
        logger.debug(
            "stage prepared: %d layers (%d skipped), mappings=%s",
            len(prepared),
            len(self._skipped),
            self._mappings.counters(),
        )
        return list(prepared)

    # ---- プロパティ ------------------------------------------------------------
    @property
    def stage_size(self) -> float:
        return self._stage_size

    @property
    def layers(self) -> Sequence[PreparedLayer]:
        return tuple(self.prepare())

    @property
    def skipped(self) -> tuple[str, ...]:
        self.prepare()
        return tuple(self._skipped)

    @property
    def mapping_cache(self) -> ImageMappingCache:
        return self._mappings

    @property
    def frame_cache(self) -> FrameCache[LayerRuntimeState]:
        return self._cache

    @property
    def motion_clock(self) -> MotionClock:
        return self._context.motion_clock

    @property
    def last_frame(self) -> StageFrame | None:
        return self._last_frame

    # ---- フレーム ----------------------------------------------------------------
    def next_frame(self) -> int:
        return self._cache.next_frame()

    def layer_state(self, layer_id: str, timestamp_ms: float) -> LayerRuntimeState | None:
        """現在フレームにおけるレイヤーの状態（同一フレーム内はキャッシュ）。"""
        self.prepare()
        layer = self._index.get(layer_id)
        if layer is None:
            return None
        return self._cache.get_or_compute(
            layer_id,
            lambda: cull(
                run_pipeline(layer.base, layer.processors, timestamp_ms, diagnostics=self._diag),
                self._stage_size,
            ),
        )

    def compute_frame(self, timestamp_ms: float, *, include_hidden: bool = False) -> StageFrame:
        """全レイヤーを処理して出力レコードを返す。

        直前の呼び出しと同じ `timestamp_ms` なら同じフレームとして扱い、キャッシュ済みの
        状態を使う。それ以外は新しいフレームを開始する。
        """
        layers = self.prepare()
        if self._frame_ts is not None and timestamp_ms == self._frame_ts:
            frame_id = self._cache.epoch
        else:
            frame_id = self._cache.next_frame()
            self._frame_ts = float(timestamp_ms)
        states = process_batch(layers, timestamp_ms, cache=self._cache, diagnostics=self._diag)
        culled = cull_batch(states, self._stage_size)
        for st in culled:
            self._cache.put(st.layer_id, st)
        outputs = [
            LayerOutput.from_state(st) for st in culled if include_hidden or st.visual.visible
        ]
        frame = StageFrame.from_outputs(frame_id, timestamp_ms, self._stage_size, outputs)
        self._last_frame = frame
        return frame

    def tick(self, dt: float) -> None:
        """`FrameClock` から呼ばれる。内部時刻を `dt` 秒進めてフレームを計算する。"""
        self._time_ms += float(dt) * 1000.0
        self.compute_frame(self._time_ms)

    def reset_motion(self, layer_id: str | None = None) -> None:
        """モーション開始時刻を忘れる（次に観測した時刻から角度 0 で再開）。"""
        self._context.motion_clock.reset(layer_id)
        self._frame_ts = None


__all__ = ["Stage"]
