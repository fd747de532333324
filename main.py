from __future__ import annotations

import logging
import time

from api import (
    FrameClock,
    Stage,
    StaticAssetResolver,
    load_layer_entries,
    setup_default_logging,
    stage_options,
)
from util.utils import load_config

FRAMES = 3
FPS = 60.0

logger = logging.getLogger("main")


def main() -> None:
    """`configs/default.yaml`（+ ルート config.yaml）のステージを数フレーム計算して表示する。"""
    setup_default_logging("INFO")
    cfg = load_config()
    stage = Stage(
        load_layer_entries(),
        StaticAssetResolver(cfg.get("assets") or {}),
        **stage_options(cfg),
        clock_origin_ms=time.time() * 1000.0,
    )
    clock = FrameClock([stage])
    for _ in range(FRAMES):
        clock.tick(1.0 / FPS)
        frame = stage.last_frame
        if frame is None:
            continue
        logger.info("frame %d: %d layers", frame.frame_id, len(frame.layers))
        for out in frame.layers:
            logger.info("  %s", out.as_dict())


if __name__ == "__main__":
    main()
