"""In-memory NodeTypeRegistry (tests / programmatic registration)."""

from __future__ import annotations

from collections.abc import Iterable

from src.domain.exceptions import DomainError, NodeTypeNotFoundError
from src.domain.ports.node_type_registry import NodeTypeDefinition


class InMemoryNodeTypeRegistry:
    def __init__(self, definitions: Iterable[NodeTypeDefinition] = ()) -> None:
        self._definitions: dict[str, NodeTypeDefinition] = {}
        for definition in definitions:
            self.register(definition)

    def register(self, definition: NodeTypeDefinition) -> None:
        if definition.type_id in self._definitions:
            raise DomainError(f"node type already registered: {definition.type_id}")
        self._definitions[definition.type_id] = definition

    def get(self, type_id: str) -> NodeTypeDefinition:
        definition = self.find(type_id)
        if definition is None:
            raise NodeTypeNotFoundError(type_id)
        return definition

    def find(self, type_id: str | None) -> NodeTypeDefinition | None:
        if not type_id:
            return None
        return self._definitions.get(type_id.strip().lower())

    def list_types(self) -> list[NodeTypeDefinition]:
        return [self._definitions[key] for key in sorted(self._definitions)]

    def __len__(self) -> int:
        return len(self._definitions)
