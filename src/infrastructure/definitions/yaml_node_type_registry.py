"""YAML-backed NodeTypeRegistry.

Loads one node type per YAML file from `definitions/node_types` (repo root).
Every file must carry `type_id` and `category`; ports and fields are optional.
Load failures are explicit startup errors that point at the offending file.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml

from src.domain.exceptions import DomainError
from src.domain.ports.node_type_registry import NodeTypeDefinition
from src.infrastructure.definitions.in_memory_node_type_registry import InMemoryNodeTypeRegistry

logger = logging.getLogger(__name__)

REQUIRED_KEYS = ("type_id", "category")


class NodeTypeDefinitionLoadError(ValueError):
    def __init__(self, source_path: Path, message: str) -> None:
        super().__init__(f"{source_path}: {message}")
        self.source_path = source_path
        self.message = message


class YamlNodeTypeRegistry(InMemoryNodeTypeRegistry):
    def __init__(self, *, definitions_dir: Path) -> None:
        self._definitions_dir = definitions_dir
        super().__init__(self._load())

    @property
    def definitions_dir(self) -> Path:
        return self._definitions_dir

    def _load(self) -> list[NodeTypeDefinition]:
        if not self._definitions_dir.exists():
            raise NodeTypeDefinitionLoadError(self._definitions_dir, "definitions_dir does not exist")

        definitions: list[NodeTypeDefinition] = []
        seen: dict[str, Path] = {}

        for yaml_path in sorted(self._definitions_dir.glob("*.yaml")):
            definition = self._load_one(yaml_path)
            if definition.type_id in seen:
                raise NodeTypeDefinitionLoadError(
                    yaml_path,
                    f"duplicate type_id '{definition.type_id}' (already defined in {seen[definition.type_id].name})",
                )
            seen[definition.type_id] = yaml_path
            definitions.append(definition)

        logger.info("loaded %d node types from %s", len(definitions), self._definitions_dir)
        return definitions

    def _load_one(self, yaml_path: Path) -> NodeTypeDefinition:
        try:
            raw_text = yaml_path.read_text(encoding="utf-8")
        except OSError as exc:
            raise NodeTypeDefinitionLoadError(yaml_path, f"read failed: {exc}") from exc

        try:
            data = yaml.safe_load(raw_text)
        except yaml.YAMLError as exc:
            line_info = ""
            mark = getattr(exc, "problem_mark", None)
            if mark is not None:
                line_info = f":{mark.line + 1}:{mark.column + 1}"
            raise NodeTypeDefinitionLoadError(yaml_path, f"yaml parse error{line_info}: {exc}") from exc

        if not isinstance(data, dict):
            raise NodeTypeDefinitionLoadError(yaml_path, "top-level YAML must be a mapping")

        missing = [k for k in REQUIRED_KEYS if k not in data]
        if missing:
            raise NodeTypeDefinitionLoadError(yaml_path, f"missing required keys: {', '.join(missing)}")

        try:
            return NodeTypeDefinition.from_dict(data)
        except (DomainError, AttributeError, TypeError, ValueError) as exc:
            raise NodeTypeDefinitionLoadError(yaml_path, f"invalid node type: {exc}") from exc
