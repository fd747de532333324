"""
どこで: `effects` パッケージ（プロセッサ）。
何を: `(state, timestamp_ms) -> state'` の純関数プロセッサを登録し、設定に応じて選べるようにする。
なぜ: 効果ごとに正準実装を 1 つに保ち、順序（spin → orbit → clock → pulse → fade）を一箇所で管理するため。
"""

# プロセッサを登録（import 順ではなく order で実行順が決まる）
from . import clock  # noqa: F401
from . import fade  # noqa: F401
from . import orbit  # noqa: F401
from . import pulse  # noqa: F401
from . import spin  # noqa: F401
from .basic import basic_placement, build_base_state
from .registry import (
    ProcessorContext,
    is_animated,
    list_processors,
    processor,
    processors_for_entry,
)

__all__ = [
    "ProcessorContext",
    "basic_placement",
    "build_base_state",
    "is_animated",
    "list_processors",
    "processor",
    "processors_for_entry",
]
