"""
アーキテクチャテスト

- 層: common/util/engine.core（L0）→ effects（L1）→ engine.pipeline/render/runtime（L2）→ api（L3）。
  内側の層は外側を import しない（同層は可）。
- 個別の禁止エッジ（engine は effects/api を知らない、等）。
- モジュール間の import 循環が無い（パッケージ __init__ の再輸出は除く）。
"""

from __future__ import annotations

import ast
import pathlib
from typing import Iterator, NamedTuple

import pytest

SRC_DIR = pathlib.Path(__file__).resolve().parents[1] / "src"
ROOTS = ("api", "common", "effects", "engine", "util")

LAYERS: dict[str, int] = {
    "common": 0,
    "util": 0,
    "engine.core": 0,
    "effects": 1,
    "engine.pipeline": 2,
    "engine.render": 2,
    "engine.runtime": 2,
    "api": 3,
}


class Edge(NamedTuple):
    path: pathlib.Path
    src: str
    dst: str

    def __str__(self) -> str:
        return f"{self.src} -> {self.dst}  [{self.path.relative_to(SRC_DIR)}]"


def module_of(path: pathlib.Path) -> str:
    parts = path.relative_to(SRC_DIR).with_suffix("").parts
    if parts[-1] == "__init__":
        parts = parts[:-1]
    return ".".join(parts)


def layer_key(module: str) -> str | None:
    """`LAYERS` のキー（engine は 2 階層目まで見る）。"""
    parts = module.split(".")
    key = ".".join(parts[:2]) if parts[0] == "engine" else parts[0]
    return key if key in LAYERS else None


def source_files() -> list[pathlib.Path]:
    return sorted(p for p in SRC_DIR.rglob("*.py") if "__pycache__" not in p.parts)


def edges_of(path: pathlib.Path) -> Iterator[Edge]:
    mod = module_of(path)
    package = mod if path.name == "__init__.py" else mod.rpartition(".")[0]
    tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            targets = [alias.name for alias in node.names]
        elif isinstance(node, ast.ImportFrom):
            if node.level:
                anchor = package.split(".")
                if node.level > 1:
                    anchor = anchor[: len(anchor) - (node.level - 1)]
                base = ".".join(anchor)
                targets = [f"{base}.{node.module}" if node.module else base]
            else:
                targets = [node.module or ""]
        else:
            continue
        for dst in targets:
            if dst.split(".")[0] in ROOTS:
                yield Edge(path, mod, dst)


def forbidden(edge: Edge) -> bool:
    src, dst = edge.src, edge.dst
    src_head, dst_head = src.split(".")[0], dst.split(".")[0]
    if src_head == "engine" and dst_head in {"api", "effects"}:
        return True
    if src_head == "effects" and layer_key(dst) in {"engine.pipeline", "engine.render", "engine.runtime"}:
        return True
    if src_head in {"common", "util"} and dst_head in {"engine", "effects", "api"}:
        return True
    # プロセッサ登録は api/effects からのみ
    if dst == "effects.registry" and src_head not in {"api", "effects"}:
        return True
    return False


def find_cycles(graph: dict[str, set[str]]) -> list[list[str]]:
    cycles: list[list[str]] = []
    state: dict[str, int] = {}
    path: list[str] = []

    def visit(node: str) -> None:
        state[node] = 1
        path.append(node)
        for nxt in sorted(graph.get(node, ())):
            if state.get(nxt) == 1:
                cycles.append(path[path.index(nxt) :] + [nxt])
            elif nxt not in state:
                visit(nxt)
        path.pop()
        state[node] = 2

    for node in sorted(graph):
        if node not in state:
            visit(node)
    return cycles


def reexport_cycle(cycle: list[str]) -> bool:
    # パッケージ __init__ がサブモジュールを再輸出するだけの循環
    return any(other.startswith(f"{node}.") for node in cycle for other in cycle)


@pytest.mark.smoke
def test_architecture_import_rules() -> None:
    files = source_files()
    modules = {module_of(p) for p in files}
    graph: dict[str, set[str]] = {m: set() for m in modules}
    layering: list[str] = []
    banned: list[str] = []
    for path in files:
        for edge in edges_of(path):
            s, d = layer_key(edge.src), layer_key(edge.dst)
            if s is not None and d is not None and LAYERS[s] < LAYERS[d]:
                layering.append(f"L{LAYERS[s]} -> L{LAYERS[d]}: {edge}")
            if forbidden(edge):
                banned.append(str(edge))
            if edge.dst in modules and edge.dst != edge.src:
                graph[edge.src].add(edge.dst)
    cycles = [c for c in find_cycles(graph) if not reexport_cycle(c)]

    problems: list[str] = []
    if layering:
        problems.append("Layer violations:\n" + "\n".join(layering))
    if banned:
        problems.append("Forbidden edges:\n" + "\n".join(banned))
    if cycles:
        problems.append("Import cycles:\n" + "\n".join(" -> ".join(c) for c in cycles[:10]))
    assert not problems, "\n\n".join(problems)


def test_every_source_module_is_in_a_known_layer() -> None:
    unknown = [
        m for m in map(module_of, source_files()) if m != "engine" and layer_key(m) is None
    ]
    assert unknown == []
