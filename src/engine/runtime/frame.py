"""
どこで: `engine.runtime` の描画ペイロード型。
何を: 描画バックエンドへ渡す 1 フレーム分のデータ（LayerOutput 列）を表す。
なぜ: ステージ/バックエンド間の契約を明示し、duck-typing を排除するため。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from engine.render.types import LayerOutput


@dataclass(frozen=True)
class StageFrame:
    """描画対象 1 フレーム分のデータコンテナ（z_index 昇順）。"""

    frame_id: int
    timestamp_ms: float
    stage_size: float
    layers: tuple[LayerOutput, ...] = ()

    @property
    def has_layers(self) -> bool:
        return len(self.layers) > 0

    def layer(self, layer_id: str) -> LayerOutput | None:
        for out in self.layers:
            if out.layer_id == layer_id:
                return out
        return None

    @classmethod
    def from_outputs(
        cls,
        frame_id: int,
        timestamp_ms: float,
        stage_size: float,
        outputs: Sequence[LayerOutput],
    ) -> "StageFrame":
        ordered = sorted(outputs, key=lambda o: o.z_index)
        return cls(
            frame_id=frame_id,
            timestamp_ms=timestamp_ms,
            stage_size=stage_size,
            layers=tuple(ordered),
        )


__all__ = ["StageFrame"]
