"""
どこで: `engine.runtime` サブパッケージ。
何を: 1 フレームぶんの出力ペイロード（StageFrame）。
なぜ: ステージと描画バックエンド間の契約を明示し、duck-typing を排除するため。
"""

from .frame import StageFrame

__all__ = ["StageFrame"]
