"""WorkflowValidationService - 编辑器校验门面（Application 层）

职责：
1. 用节点类型注册表补全快照中节点的端口声明与标记
2. 把单条连接 / 整图 / 节点配置 / 建议请求转发给对应的领域服务
3. 注册表缺失某个类型时降级为宽松模式（不声明端口 → 连接放行），并记录 warning

不负责：
- 会话内建议忽略（SuggestionSession）
- 请求去抖与最短展示时长（ValidationRequestCoordinator）
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import replace
from typing import Any

from src.domain.entities.node import Node
from src.domain.entities.workflow_graph import WorkflowGraph
from src.domain.exceptions import DomainError, NodeTypeNotFoundError
from src.domain.ports.node_type_registry import NodeTypeDefinition, NodeTypeRegistry
from src.domain.services.connection_validator import (
    CODE_MISSING_NODE,
    MISSING_NODE_MESSAGE,
    ConnectionValidator,
    ConnectionVerdict,
)
from src.domain.services.graph_structure_validator import (
    GraphStructureValidator,
    GraphValidationReport,
)
from src.domain.services.node_config_validator import FieldError, NodeConfigValidator
from src.domain.services.workflow_suggestion_engine import (
    ConnectionSuggestion,
    Suggestion,
    WorkflowSuggestionEngine,
)

logger = logging.getLogger(__name__)


def node_type_key(node: Node) -> str:
    """节点在注册表中的查找键：node_type 优先，否则使用分类名"""
    return node.node_type or node.category_name


class WorkflowValidationService:
    def __init__(
        self,
        *,
        registry: NodeTypeRegistry,
        connection_validator: ConnectionValidator,
        graph_validator: GraphStructureValidator,
        config_validator: NodeConfigValidator,
        suggestion_engine: WorkflowSuggestionEngine,
    ) -> None:
        self._registry = registry
        self._connection_validator = connection_validator
        self._graph_validator = graph_validator
        self._config_validator = config_validator
        self._suggestion_engine = suggestion_engine

    @property
    def registry(self) -> NodeTypeRegistry:
        return self._registry

    def resolve_node(self, node: Node) -> Node:
        """用注册表补全节点

        - 分类为缺省推断时，采用注册表中该类型的分类
        - 未声明端口时，继承该类型的端口与标记
        """
        if node.has_ports and not node.category_inferred:
            return node

        definition = self._registry.find(node_type_key(node))
        if definition is None:
            if node.node_type:
                logger.warning(
                    "node type '%s' is not registered; node '%s' is validated permissively",
                    node.node_type,
                    node.id,
                )
            return node

        changes: dict[str, Any] = {}
        if node.category_inferred and definition.category_name:
            changes["category"] = definition.category
            changes["category_inferred"] = False
        if not node.has_ports:
            changes["ports"] = definition.ports
            changes["tags"] = node.tags or definition.tags

        try:
            return replace(node, **changes)
        except DomainError as exc:
            logger.warning(
                "node '%s' cannot take the definition of type '%s': %s",
                node.id,
                definition.type_id,
                exc,
            )
            return node

    def resolve_graph(self, graph: WorkflowGraph) -> WorkflowGraph:
        return WorkflowGraph(
            nodes=tuple(self.resolve_node(node) for node in graph.nodes),
            edges=graph.edges,
            id=graph.id,
        )

    def validate_connection(
        self,
        graph: WorkflowGraph,
        source_id: str,
        target_id: str,
        source_handle: str | None = None,
        target_handle: str | None = None,
    ) -> ConnectionVerdict:
        """校验画布上一条（尚未创建的）连接"""
        source = graph.get_node(source_id)
        target = graph.get_node(target_id)
        if source is None or target is None:
            return ConnectionVerdict(
                is_valid=False,
                message=MISSING_NODE_MESSAGE,
                code=CODE_MISSING_NODE,
                source=source_id or None,
                target=target_id or None,
            )
        return self._connection_validator.validate(
            self.resolve_node(source),
            self.resolve_node(target),
            source_handle,
            target_handle,
        )

    def validate_graph(self, graph: WorkflowGraph) -> GraphValidationReport:
        return self._graph_validator.validate(self.resolve_graph(graph))

    def get_node_type(self, type_id: str) -> NodeTypeDefinition:
        return self._registry.get(type_id)

    def list_node_types(self) -> list[NodeTypeDefinition]:
        return self._registry.list_types()

    def validate_node_config(self, type_id: str, config: Mapping[str, Any] | None) -> list[FieldError]:
        """按节点类型的字段 schema 校验配置

        抛出：
            NodeTypeNotFoundError: 类型未注册
        """
        definition = self._registry.get(type_id)
        return self._config_validator.validate(definition.field_schema, config)

    def validate_node(self, node: Node) -> list[FieldError]:
        """校验画布上某个节点的当前配置（类型未注册时抛 NodeTypeNotFoundError）"""
        definition = self._registry.find(node_type_key(node))
        if definition is None:
            raise NodeTypeNotFoundError(node_type_key(node))
        return self._config_validator.validate(definition.field_schema, node.config)

    def suggest(self, graph: WorkflowGraph, *, selected_node_id: str | None = None) -> list[Suggestion]:
        return self._suggestion_engine.analyze(self.resolve_graph(graph), selected_node_id=selected_node_id)

    def suggest_connections(self, graph: WorkflowGraph, node_id: str) -> list[ConnectionSuggestion]:
        return self._suggestion_engine.suggest_connections(self.resolve_graph(graph), node_id)
