from __future__ import annotations

import ast
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[3]

# Domain 层只依赖标准库与自身
DOMAIN_FORBIDDEN = ("src.infrastructure", "src.interfaces", "src.application", "fastapi", "pydantic", "yaml")
APPLICATION_FORBIDDEN = ("src.interfaces", "src.infrastructure", "fastapi")


def _imported_modules(path: Path) -> list[str]:
    tree = ast.parse(path.read_text(encoding="utf-8"))
    modules: list[str] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            modules.extend(alias.name for alias in node.names)
        if isinstance(node, ast.ImportFrom) and node.module:
            modules.append(node.module)
    return modules


def _layer_files(layer: str) -> list[Path]:
    return sorted((ROOT / "src" / layer).rglob("*.py"))


@pytest.mark.parametrize(
    ("layer", "forbidden"),
    [("domain", DOMAIN_FORBIDDEN), ("application", APPLICATION_FORBIDDEN)],
)
def test_layer_does_not_import_outer_layers(layer: str, forbidden: tuple[str, ...]) -> None:
    files = _layer_files(layer)
    assert files, f"no python files found under src/{layer}"

    for path in files:
        for module in _imported_modules(path):
            assert not module.startswith(forbidden), f"{path}: import of {module} is forbidden in {layer}"
