"""GraphStructureValidator - 整图结构校验（Domain Service）

目标：
- 对每条边执行 ConnectionValidator，并叠加整图规则：
  - trigger 节点只允许一条出边
  - condition 节点的出边必须携带分支值
  - 重复连接（源、目标、handle 全相同）的第二条及之后 → "Connection already exists"
- 整图级检查（非阻塞，供建议引擎与 UI 提示使用）：
  - 节点超过 5 个却没有 trigger → "workflow needs a starting trigger"
  - 多节点图中的孤立节点 → "isolated node"
  - 环：由 CyclePolicy 决定忽略 / 警告 / 报错
- 结构性错误（悬空引用）永远上报，不会被静默丢弃
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from src.domain.entities.edge import Edge
from src.domain.entities.node import Node
from src.domain.entities.workflow_graph import WorkflowGraph
from src.domain.services.connection_validator import ConnectionValidator
from src.domain.services.graph_topology import cyclic_node_ids

logger = logging.getLogger(__name__)

TRIGGER_SINGLE_OUTGOING_MESSAGE = "trigger nodes should have only one outgoing connection"
CONDITION_VALUE_MESSAGE = "condition nodes require condition values on connections"
MISSING_TRIGGER_MESSAGE = "workflow needs a starting trigger"
ISOLATED_NODE_MESSAGE = "isolated node"
DUPLICATE_CONNECTION_MESSAGE = "Connection already exists"

CODE_TRIGGER_MULTIPLE_OUTGOING = "trigger_multiple_outgoing"
CODE_CONDITION_MISSING_VALUE = "condition_missing_value"
CODE_MISSING_TRIGGER = "missing_trigger"
CODE_ISOLATED_NODE = "isolated_node"
CODE_CYCLE_DETECTED = "cycle_detected"
CODE_DUPLICATE_CONNECTION = "duplicate_connection"

# 超过该节点数且没有 trigger 时给出结构警告
MISSING_TRIGGER_NODE_THRESHOLD = 5


class CyclePolicy(str, Enum):
    """环的处理策略

    - ALLOW: 允许（如循环 / 迭代节点）
    - WARN: 非阻塞警告
    - ERROR: 阻塞错误
    """

    ALLOW = "allow"
    WARN = "warn"
    ERROR = "error"


class FindingStatus(str, Enum):
    VALID = "valid"
    INVALID = "invalid"
    WARNING = "warning"


@dataclass(frozen=True, slots=True)
class GraphFinding:
    """单条结构校验结果（针对边或节点）"""

    status: FindingStatus
    message: str | None = None
    code: str | None = None
    edge_id: str | None = None
    node_id: str | None = None
    source: str | None = None
    target: str | None = None

    @property
    def is_valid(self) -> bool:
        return self.status != FindingStatus.INVALID

    @property
    def is_warning(self) -> bool:
        return self.status == FindingStatus.WARNING

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "is_valid": self.is_valid,
            "status": self.status.value,
            "message": self.message,
        }
        for key in ("code", "edge_id", "node_id", "source", "target"):
            value = getattr(self, key)
            if value is not None:
                payload[key] = value
        return payload


@dataclass
class GraphValidationReport:
    """整图校验报告"""

    results: list[GraphFinding] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        """没有阻塞性错误（警告不影响）"""
        return all(finding.is_valid for finding in self.results)

    @property
    def edge_results(self) -> list[GraphFinding]:
        return [f for f in self.results if f.edge_id is not None]

    @property
    def edge_errors(self) -> list[GraphFinding]:
        return [f for f in self.edge_results if not f.is_valid]

    @property
    def node_results(self) -> list[GraphFinding]:
        return [f for f in self.results if f.edge_id is None]

    @property
    def errors(self) -> list[GraphFinding]:
        return [f for f in self.results if not f.is_valid]

    @property
    def warnings(self) -> list[GraphFinding]:
        return [f for f in self.results if f.is_warning]

    def codes(self) -> set[str]:
        return {f.code for f in self.results if f.code}

    def to_list(self) -> list[dict[str, Any]]:
        return [finding.to_dict() for finding in self.results]


class GraphStructureValidator:
    """整图结构校验器

    参数：
        connection_validator: 单条连接校验器（规则与建议引擎共用）
        cycle_policy: 环的处理策略（默认警告）
    """

    def __init__(
        self,
        *,
        connection_validator: ConnectionValidator | None = None,
        cycle_policy: CyclePolicy = CyclePolicy.WARN,
    ) -> None:
        self._connection_validator = connection_validator or ConnectionValidator()
        self._cycle_policy = CyclePolicy(cycle_policy)

    def validate_graph(self, nodes: Iterable[Node], edges: Iterable[Edge]) -> GraphValidationReport:
        return self.validate(WorkflowGraph.of(nodes, edges))

    def validate(self, graph: WorkflowGraph) -> GraphValidationReport:
        report = GraphValidationReport()

        if not graph.nodes and not graph.edges:
            return report

        self._validate_edges(graph, report)

        if graph.nodes:
            self._validate_structure(graph, report)

        logger.debug(
            "graph %s validated: %d findings, %d errors",
            graph.graph_id,
            len(report.results),
            len(report.errors),
        )
        return report

    def _validate_edges(self, graph: WorkflowGraph, report: GraphValidationReport) -> None:
        trigger_outgoing: Counter[str] = Counter()
        seen_connections: set[tuple[str, str, str | None, str | None]] = set()

        for edge in graph.edges:
            source = graph.get_node(edge.source_node_id)
            target = graph.get_node(edge.target_node_id)

            verdict = self._connection_validator.validate(
                source, target, edge.source_handle, edge.target_handle
            )
            connection = (edge.source_node_id, edge.target_node_id, edge.source_handle, edge.target_handle)

            finding: GraphFinding
            if connection in seen_connections:
                finding = self._edge_finding(
                    edge,
                    FindingStatus.INVALID,
                    DUPLICATE_CONNECTION_MESSAGE,
                    CODE_DUPLICATE_CONNECTION,
                )
            elif not verdict.is_valid:
                finding = self._edge_finding(edge, FindingStatus.INVALID, verdict.message, verdict.code)
            elif source is not None and source.is_trigger and trigger_outgoing[source.id] >= 1:
                finding = self._edge_finding(
                    edge,
                    FindingStatus.INVALID,
                    TRIGGER_SINGLE_OUTGOING_MESSAGE,
                    CODE_TRIGGER_MULTIPLE_OUTGOING,
                )
            elif source is not None and source.is_condition and not edge.has_branch_value:
                finding = self._edge_finding(
                    edge,
                    FindingStatus.INVALID,
                    CONDITION_VALUE_MESSAGE,
                    CODE_CONDITION_MISSING_VALUE,
                )
            else:
                finding = self._edge_finding(edge, FindingStatus.VALID, verdict.message, None)

            if source is not None and source.is_trigger:
                trigger_outgoing[source.id] += 1
            seen_connections.add(connection)

            report.results.append(finding)

    @staticmethod
    def _edge_finding(
        edge: Edge,
        status: FindingStatus,
        message: str | None,
        code: str | None,
    ) -> GraphFinding:
        return GraphFinding(
            status=status,
            message=message,
            code=code,
            edge_id=edge.id,
            source=edge.source_node_id or None,
            target=edge.target_node_id or None,
        )

    def _validate_structure(self, graph: WorkflowGraph, report: GraphValidationReport) -> None:
        if len(graph.nodes) > MISSING_TRIGGER_NODE_THRESHOLD and not graph.has_trigger:
            report.results.append(
                GraphFinding(
                    status=FindingStatus.WARNING,
                    message=MISSING_TRIGGER_MESSAGE,
                    code=CODE_MISSING_TRIGGER,
                )
            )

        if len(graph.nodes) > 1:
            for node_id in graph.isolated_node_ids():
                report.results.append(
                    GraphFinding(
                        status=FindingStatus.WARNING,
                        message=ISOLATED_NODE_MESSAGE,
                        code=CODE_ISOLATED_NODE,
                        node_id=node_id,
                    )
                )

        if self._cycle_policy == CyclePolicy.ALLOW:
            return

        cycle = cyclic_node_ids(
            node_ids=[node.id for node in graph.nodes],
            edges=[edge.pair for edge in graph.edges],
        )
        if cycle:
            status = (
                FindingStatus.INVALID if self._cycle_policy == CyclePolicy.ERROR else FindingStatus.WARNING
            )
            report.results.append(
                GraphFinding(
                    status=status,
                    message=f"workflow contains a cycle: {' -> '.join(cycle)}",
                    code=CODE_CYCLE_DETECTED,
                    node_id=cycle[0],
                )
            )
