"""
どこで: `util.utils`
何を: ステージ定義 YAML（stage/assets/layers）の読み込みとプロジェクトルート推定。
なぜ: 既定の `configs/default.yaml` に利用者のルート `config.yaml` を重ね、壊れたファイルでも起動を止めないため。
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Iterator

import yaml

logger = logging.getLogger(__name__)

_ROOT_MARKERS = (".git", "pyproject.toml", "configs")


def load_yaml(path: Path | str) -> Dict[str, Any]:
    """YAML を辞書として読む。存在しない/壊れている/トップレベルが辞書でない場合は空辞書。"""
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as e:
        logger.debug("config %s を読めません: %s", p, e)
        return {}
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        logger.warning("config %s の YAML が不正です: %s", p, e)
        return {}
    if data is None:
        return {}
    if not isinstance(data, dict):
        logger.warning("config %s のトップレベルは辞書である必要があります", p)
        return {}
    return data


def find_project_root(start: Path) -> Path:
    """`start` から上へ辿り、`.git`/`pyproject.toml`/`configs` を持つ最初のディレクトリ。

    見つからなければ `<repo>/src/util` を想定して 2 階層上を返す。
    """
    here = start.resolve()
    for candidate in (here, *here.parents):
        if any((candidate / marker).exists() for marker in _ROOT_MARKERS):
            return candidate
    return here.parent.parent


def config_paths(root: Path) -> Iterator[Path]:
    """読み込む順（後勝ち）の構成ファイル候補。"""
    yield root / "configs" / "default.yaml"
    yield root / "config.yaml"


def load_config(root: Path | str | None = None) -> Dict[str, Any]:
    """構成を読み込んで辞書で返す（トップレベルのキー単位で上書き、深いマージはしない）。"""
    base_dir = Path(root) if root is not None else find_project_root(Path(__file__).parent)
    merged: Dict[str, Any] = {}
    for path in config_paths(base_dir):
        if path.is_file():
            merged.update(load_yaml(path))
    return merged


__all__ = ["load_yaml", "find_project_root", "config_paths", "load_config"]
