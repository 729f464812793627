"""WorkflowGraph - 工作流图快照

业务定义：
- 一次校验请求对应一个不可变的图快照（nodes + edges）
- 校验器只读取快照，不修改输入
- 提供按节点查询出边 / 入边、孤立节点等索引

设计原则：
- frozen dataclass + 惰性索引（cached_property）
- from_dict() 兼容编辑器 JSON；重复节点 ID 属于快照本身损坏，直接抛 DomainError
"""

from __future__ import annotations

import hashlib
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from functools import cached_property
from typing import Any

from src.domain.entities.edge import Edge
from src.domain.entities.node import Node
from src.domain.exceptions import DomainError


@dataclass(frozen=True)
class WorkflowGraph:
    """工作流图快照

    属性说明：
    - nodes: 节点（保持画布顺序）
    - edges: 边（保持画布顺序）
    - id: 图 ID（为空时使用内容指纹，用于会话内的建议忽略记录）
    """

    nodes: tuple[Node, ...] = ()
    edges: tuple[Edge, ...] = ()
    id: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "nodes", tuple(self.nodes))
        object.__setattr__(self, "edges", tuple(self.edges))

        seen: set[str] = set()
        for node in self.nodes:
            if node.id in seen:
                raise DomainError(f"重复的节点 ID: {node.id}")
            seen.add(node.id)

    @classmethod
    def of(cls, nodes: Iterable[Node], edges: Iterable[Edge], graph_id: str | None = None) -> WorkflowGraph:
        return cls(nodes=tuple(nodes), edges=tuple(edges), id=graph_id)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> WorkflowGraph:
        """从编辑器 JSON（{nodes: [...], edges: [...]}）构造快照"""
        if not isinstance(data, Mapping):
            raise DomainError("graph must be an object")

        raw_nodes = data.get("nodes") or []
        raw_edges = data.get("edges") or []
        if not isinstance(raw_nodes, list) or not isinstance(raw_edges, list):
            raise DomainError("nodes and edges must be lists")

        graph_id = data.get("id") or data.get("workflow_id") or data.get("workflowId")
        return cls(
            nodes=tuple(Node.from_dict(n) for n in raw_nodes),
            edges=tuple(Edge.from_dict(e, index=i) for i, e in enumerate(raw_edges)),
            id=str(graph_id) if graph_id else None,
        )

    @cached_property
    def _node_index(self) -> dict[str, Node]:
        return {node.id: node for node in self.nodes}

    @cached_property
    def _outgoing_index(self) -> dict[str, list[Edge]]:
        index: dict[str, list[Edge]] = {}
        for edge in self.edges:
            index.setdefault(edge.source_node_id, []).append(edge)
        return index

    @cached_property
    def _incoming_index(self) -> dict[str, list[Edge]]:
        index: dict[str, list[Edge]] = {}
        for edge in self.edges:
            index.setdefault(edge.target_node_id, []).append(edge)
        return index

    @property
    def graph_id(self) -> str:
        return self.id or self.fingerprint

    @cached_property
    def fingerprint(self) -> str:
        """节点 ID + 边端点的稳定哈希"""
        digest = hashlib.sha256()
        for node_id in sorted(self._node_index):
            digest.update(node_id.encode("utf-8"))
            digest.update(b"\x00")
        digest.update(b"\x01")
        for source, target in sorted(edge.pair for edge in self.edges):
            digest.update(f"{source}->{target}".encode())
            digest.update(b"\x00")
        return f"graph_{digest.hexdigest()[:16]}"

    def get_node(self, node_id: str | None) -> Node | None:
        if node_id is None:
            return None
        return self._node_index.get(node_id)

    def outgoing(self, node_id: str) -> list[Edge]:
        return list(self._outgoing_index.get(node_id, ()))

    def incoming(self, node_id: str) -> list[Edge]:
        return list(self._incoming_index.get(node_id, ()))

    def neighbors(self, node_id: str) -> set[str]:
        """与节点直接相连（任一方向）的节点 ID"""
        result = {edge.target_node_id for edge in self.outgoing(node_id)}
        result.update(edge.source_node_id for edge in self.incoming(node_id))
        return result

    def isolated_node_ids(self) -> list[str]:
        """既无入边也无出边的节点（保持画布顺序）"""
        return [
            node.id
            for node in self.nodes
            if not self._outgoing_index.get(node.id) and not self._incoming_index.get(node.id)
        ]

    @property
    def has_trigger(self) -> bool:
        return any(node.is_trigger for node in self.nodes)
