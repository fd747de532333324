"""
どこで: `engine.pipeline` サブパッケージ。
何を: プロセッサ列の畳み込み（run_pipeline/process_batch）と、フレーム単位のメモ化キャッシュ。
なぜ: 複数の描画バックエンドが同一フレームで同じレイヤーを参照しても 1 回だけ計算するため。
"""

from .frame_cache import FrameCache
from .runner import PreparedLayer, process_batch, run_pipeline

__all__ = ["FrameCache", "PreparedLayer", "process_batch", "run_pipeline"]
