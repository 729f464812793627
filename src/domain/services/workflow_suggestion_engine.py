"""WorkflowSuggestionEngine - 启发式工作流建议

业务定义：
- analyze_graph(): 根据当前图给出"下一步"建议（按优先级排序）
- suggest_connections_for(): 为选中节点推荐最多 N 条兼容连接

设计原则：
- 启发式是非阻塞的提示，不影响校验结果
- 打分完全复用兼容性规则表（与连接校验共用同一份规则）
- 纯函数：同一快照多次调用结果一致；忽略记录由应用层 SuggestionSession 维护
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from src.domain.entities.edge import Edge
from src.domain.entities.node import Node
from src.domain.entities.workflow_graph import WorkflowGraph
from src.domain.services.compatibility_rules import (
    DEFAULT_RULE_TABLE,
    SUGGEST_SCORE_THRESHOLD,
    CompatibilityRuleTable,
    effective_category,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONNECTION_SUGGESTIONS = 3
COMPLEX_WORKFLOW_NODE_COUNT = 5
ERROR_HANDLING_NODE_COUNT = 2
TERMINAL_NODE_TYPE = "output"


class SuggestionPriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {
    SuggestionPriority.HIGH: 0,
    SuggestionPriority.MEDIUM: 1,
    SuggestionPriority.LOW: 2,
}


@dataclass(frozen=True, slots=True)
class Suggestion:
    """一条工作流建议

    属性说明：
    - id: 稳定标识（用于会话内忽略）
    - title / text: 展示文案
    - action_label: 按钮文案
    - priority: 优先级
    - node_id: 关联节点（仅 configure-node 等节点级建议）
    """

    id: str
    title: str
    text: str
    action_label: str
    priority: SuggestionPriority
    node_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "text": self.text,
            "action_label": self.action_label,
            "priority": self.priority.value,
        }
        if self.node_id is not None:
            payload["node_id"] = self.node_id
        return payload


@dataclass(frozen=True, slots=True)
class ConnectionSuggestion:
    """推荐连接 source_id → target_id"""

    source_id: str
    target_id: str
    score: int
    rationale: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "source_id": self.source_id,
            "target_id": self.target_id,
            "score": self.score,
            "rationale": self.rationale,
        }


def _is_terminal(node: Node) -> bool:
    """output 类型节点是流程终点，不再向外连接"""
    return node.node_type == TERMINAL_NODE_TYPE or node.category_name == TERMINAL_NODE_TYPE


class WorkflowSuggestionEngine:
    """工作流建议引擎

    参数：
        rule_table: 兼容性规则表
        suggest_score_threshold: 推荐门槛（严格大于才推荐）
        max_connection_suggestions: 每次最多推荐的连接数
    """

    def __init__(
        self,
        *,
        rule_table: CompatibilityRuleTable = DEFAULT_RULE_TABLE,
        suggest_score_threshold: int = SUGGEST_SCORE_THRESHOLD,
        max_connection_suggestions: int = DEFAULT_MAX_CONNECTION_SUGGESTIONS,
    ) -> None:
        self._rule_table = rule_table
        self._suggest_score_threshold = suggest_score_threshold
        self._max_connection_suggestions = max_connection_suggestions

    def analyze_graph(
        self,
        nodes: Iterable[Node],
        edges: Iterable[Edge],
        selected_node_id: str | None = None,
    ) -> list[Suggestion]:
        return self.analyze(WorkflowGraph.of(nodes, edges), selected_node_id=selected_node_id)

    def analyze(self, graph: WorkflowGraph, *, selected_node_id: str | None = None) -> list[Suggestion]:
        """分析图快照并返回按优先级排序的建议（同优先级保持生成顺序）"""
        suggestions: list[Suggestion] = []
        node_count = len(graph.nodes)

        if node_count == 0:
            suggestions.append(
                Suggestion(
                    id="add-trigger",
                    title="Start Your Workflow",
                    text="Every workflow needs a starting point. Add a trigger node to begin your automation.",
                    action_label="Add Trigger",
                    priority=SuggestionPriority.HIGH,
                )
            )
            return suggestions

        if node_count == 1 and graph.nodes[0].is_trigger:
            suggestions.append(
                Suggestion(
                    id="add-action",
                    title="Add an Action",
                    text="Now that you have a trigger, add an action to perform when the trigger activates.",
                    action_label="Add Action",
                    priority=SuggestionPriority.HIGH,
                )
            )

        if node_count > 1 and not graph.edges:
            suggestions.append(
                Suggestion(
                    id="connect-nodes",
                    title="Connect Your Nodes",
                    text="Your workflow has nodes but no connections. Connect them to establish the process flow.",
                    action_label="Connect Nodes",
                    priority=SuggestionPriority.HIGH,
                )
            )

        if not graph.has_trigger:
            suggestions.append(
                Suggestion(
                    id="missing-trigger",
                    title="Add a Trigger",
                    text="Your workflow is missing a trigger node. Every workflow needs a trigger to start the automation.",
                    action_label="Add Trigger",
                    priority=SuggestionPriority.HIGH,
                )
            )

        if not any(node.is_output_like for node in graph.nodes):
            suggestions.append(
                Suggestion(
                    id="add-output",
                    title="Add an Output",
                    text="Nothing in your workflow sends results anywhere. Add an output such as an email or a message.",
                    action_label="Add Output",
                    priority=SuggestionPriority.MEDIUM,
                )
            )

        if node_count > ERROR_HANDLING_NODE_COUNT and not any(edge.is_error_handler for edge in graph.edges):
            suggestions.append(
                Suggestion(
                    id="add-error-handling",
                    title="Handle Errors",
                    text="Add an error handling path so failures in your workflow are caught and reported.",
                    action_label="Add Error Handler",
                    priority=SuggestionPriority.MEDIUM,
                )
            )

        selected = graph.get_node(selected_node_id)
        if selected is not None and not selected.config:
            name = selected.label or selected.id
            suggestions.append(
                Suggestion(
                    id="configure-node",
                    title="Configure Selected Node",
                    text=f'Your "{name}" node needs configuration before it can work properly.',
                    action_label="Configure",
                    priority=SuggestionPriority.MEDIUM,
                    node_id=selected.id,
                )
            )

        if node_count > COMPLEX_WORKFLOW_NODE_COUNT:
            suggestions.append(
                Suggestion(
                    id="use-templates",
                    title="Start From a Template",
                    text="Your workflow is getting complex. Templates can help you organize common patterns.",
                    action_label="Browse Templates",
                    priority=SuggestionPriority.LOW,
                )
            )

        # sorted() 是稳定排序
        return sorted(suggestions, key=lambda s: s.priority.rank)

    def suggest_connections_for(
        self,
        node_id: str,
        nodes: Iterable[Node],
        edges: Iterable[Edge],
    ) -> list[ConnectionSuggestion]:
        return self.suggest_connections(WorkflowGraph.of(nodes, edges), node_id)

    def suggest_connections(self, graph: WorkflowGraph, node_id: str) -> list[ConnectionSuggestion]:
        """为节点推荐连接（双向）

        - 自身与已相连（任一方向）的节点先被排除
        - 不推荐指向 trigger 的连接，也不推荐从 output 节点连出
        - 分数严格大于推荐门槛；按分数降序，最多返回 max_connection_suggestions 条
        """
        selected = graph.get_node(node_id)
        if selected is None:
            return []

        excluded = graph.neighbors(selected.id) | {selected.id}
        candidates: list[ConnectionSuggestion] = []

        for other in graph.nodes:
            if other.id in excluded:
                continue
            if not other.is_trigger and not _is_terminal(selected):
                candidates.append(self._score(selected, other))
            if not selected.is_trigger and not _is_terminal(other):
                candidates.append(self._score(other, selected))

        ranked = sorted(
            (c for c in candidates if c.score > self._suggest_score_threshold),
            key=lambda c: c.score,
            reverse=True,
        )
        result = ranked[: self._max_connection_suggestions]
        logger.debug(
            "connection suggestions for %s: %d candidates, %d returned",
            selected.id,
            len(candidates),
            len(result),
        )
        return result

    def _score(self, source: Node, target: Node) -> ConnectionSuggestion:
        rule = self._rule_table.lookup(
            effective_category(source, self._rule_table),
            effective_category(target, self._rule_table),
        )
        return ConnectionSuggestion(
            source_id=source.id,
            target_id=target.id,
            score=rule.score,
            rationale=rule.rationale,
        )
