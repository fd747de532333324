"""
どこで: `engine.render` 型定義。
何を: 1 レイヤーぶんの描画用フラットレコード `LayerOutput`。
なぜ: DOM/Canvas/3D など任意のバックエンドが同じ変換データをそのまま消費できるようにするため。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from common.types import Vec2
from engine.core.state import LayerRuntimeState


@dataclass(frozen=True)
class LayerOutput:
    """識別子/アセット情報つきの変換結果。`position` は画像中心のステージ座標。"""

    layer_id: str
    image_id: str
    src: str
    renderer: str
    z_index: int
    position: Vec2
    rotation: float
    scale: Vec2
    opacity: float
    visible: bool
    width: float
    height: float

    @classmethod
    def from_state(cls, state: LayerRuntimeState) -> "LayerOutput":
        t = state.transform
        dims = state.mapping.image_dimensions
        return cls(
            layer_id=state.layer_id,
            image_id=state.image_id,
            src=state.src,
            renderer=state.renderer,
            z_index=state.z_index,
            position=t.position.as_tuple(),
            rotation=t.rotation,
            scale=t.scale.as_tuple(),
            opacity=state.visual.opacity,
            visible=state.visual.visible,
            width=dims.width,
            height=dims.height,
        )

    def as_dict(self) -> dict[str, Any]:
        return {
            "layer_id": self.layer_id,
            "image_id": self.image_id,
            "src": self.src,
            "renderer": self.renderer,
            "z_index": self.z_index,
            "position": {"x": self.position[0], "y": self.position[1]},
            "rotation": self.rotation,
            "scale": {"x": self.scale[0], "y": self.scale[1]},
            "opacity": self.opacity,
            "visible": self.visible,
            "width": self.width,
            "height": self.height,
        }


__all__ = ["LayerOutput"]
