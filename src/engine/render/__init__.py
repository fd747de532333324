"""
どこで: `engine.render` サブパッケージ。
何を: 描画バックエンドへ渡すフラットな出力レコード（LayerOutput）。
なぜ: 計算（core/effects/pipeline）と描画の責務を分離し、どのバックエンドも追加の幾何計算なしで使えるようにするため。
"""

from .types import LayerOutput

__all__ = ["LayerOutput"]
