"""图拓扑工具（id 级别）

- cyclic_node_ids: 找出位于环上的节点
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable


def _kahn_remaining(node_ids: list[str], edges: list[tuple[str, str]]) -> set[str]:
    """Kahn 拓扑排序，返回无法排出的节点（环上或环的下游）"""

    in_degree = {node_id: 0 for node_id in node_ids}
    adjacency: dict[str, list[str]] = {node_id: [] for node_id in in_degree}

    for source_id, target_id in edges:
        if source_id in adjacency and target_id in in_degree:
            adjacency[source_id].append(target_id)
            in_degree[target_id] += 1

    queue: deque[str] = deque([node_id for node_id, degree in in_degree.items() if degree == 0])
    visited: set[str] = set()

    while queue:
        node_id = queue.popleft()
        visited.add(node_id)

        for neighbor in adjacency[node_id]:
            in_degree[neighbor] -= 1
            if in_degree[neighbor] == 0:
                queue.append(neighbor)

    return set(in_degree) - visited


def cyclic_node_ids(*, node_ids: Iterable[str], edges: Iterable[tuple[str, str]]) -> list[str]:
    """返回位于环上的节点 ID（保持输入顺序）

    正向 Kahn 剩下“环 + 环下游”，反向 Kahn 剩下“环 + 环上游”，
    两者交集即为环上的节点（以及夹在两个环之间的节点）。
    """
    ordered = list(dict.fromkeys(node_ids))
    edge_list = list(edges)

    forward = _kahn_remaining(ordered, edge_list)
    if not forward:
        return []
    backward = _kahn_remaining(ordered, [(t, s) for s, t in edge_list])

    on_cycle = forward & backward
    return [node_id for node_id in ordered if node_id in on_cycle]
