"""NodeConfigurationFlow - 节点配置向导的步骤门控

业务定义：
- 向导按顺序逐个配置节点，每一步对应一个节点
- Next：当前节点没有字段错误才能前进
- Complete：所有节点都没有字段错误才能提交
- 节点类型未注册时，该节点报 "service" 字段错误（无法配置未知服务）

设计原则：
- 每次调用都重新校验当前快照，不缓存结果
- 配置修改通过 update_config() 生成新的节点快照
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from src.application.services.workflow_validation_service import node_type_key
from src.domain.entities.node import Node
from src.domain.exceptions import DomainValidationError, NotFoundError
from src.domain.ports.node_type_registry import NodeTypeRegistry
from src.domain.services.node_config_validator import FieldError, NodeConfigValidator

logger = logging.getLogger(__name__)

UNKNOWN_SERVICE_FIELD = "service"
UNKNOWN_SERVICE_MESSAGE = "Invalid service configuration"


@dataclass(frozen=True, slots=True)
class StepValidation:
    node_id: str
    errors: tuple[FieldError, ...] = ()

    @property
    def can_advance(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict[str, Any]:
        return {
            "node_id": self.node_id,
            "can_advance": self.can_advance,
            "errors": [e.to_dict() for e in self.errors],
        }


@dataclass(frozen=True)
class SubmissionValidation:
    errors_by_node: dict[str, tuple[FieldError, ...]] = field(default_factory=dict)

    @property
    def can_complete(self) -> bool:
        return not any(self.errors_by_node.values())

    @property
    def first_invalid_node_id(self) -> str | None:
        for node_id, errors in self.errors_by_node.items():
            if errors:
                return node_id
        return None


class NodeConfigurationFlow:
    """配置向导

    参数：
        nodes: 需要配置的节点（按向导顺序）
        registry: 节点类型注册表
        validator: 配置校验器
    """

    def __init__(
        self,
        nodes: Iterable[Node],
        *,
        registry: NodeTypeRegistry,
        validator: NodeConfigValidator | None = None,
    ) -> None:
        self._nodes = list(nodes)
        self._registry = registry
        self._validator = validator or NodeConfigValidator()

    @property
    def nodes(self) -> list[Node]:
        return list(self._nodes)

    def __len__(self) -> int:
        return len(self._nodes)

    def update_config(self, node_id: str, config: Mapping[str, Any]) -> Node:
        for index, node in enumerate(self._nodes):
            if node.id == node_id:
                updated = node.with_config(config)
                self._nodes[index] = updated
                return updated
        raise NotFoundError("Node", node_id)

    def validate_step(self, index: int) -> StepValidation:
        """校验第 index 步（从 0 开始）"""
        if not 0 <= index < len(self._nodes):
            raise DomainValidationError(
                f"step index out of range: {index}",
                code="invalid_step",
                errors=[{"code": "invalid_step", "message": "step index out of range", "path": "index"}],
            )
        node = self._nodes[index]
        return StepValidation(node_id=node.id, errors=tuple(self._validate_node(node)))

    def validate_submission(self) -> SubmissionValidation:
        return SubmissionValidation(
            errors_by_node={node.id: tuple(self._validate_node(node)) for node in self._nodes}
        )

    def _validate_node(self, node: Node) -> list[FieldError]:
        definition = self._registry.find(node_type_key(node))
        if definition is None:
            logger.warning("configuration flow: node type '%s' is not registered", node_type_key(node))
            return [FieldError(UNKNOWN_SERVICE_FIELD, UNKNOWN_SERVICE_MESSAGE)]
        return self._validator.validate(definition.field_schema, node.config)
