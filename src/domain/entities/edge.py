"""Edge 实体 - 节点之间的有向连接

业务定义：
- Edge 从一个节点的输出端口连接到另一个节点的输入端口
- handle 缺省表示节点的默认端口
- 可以携带分支值（condition，条件节点的出边必需）
- 可以标记为错误处理分支（is_error_handler）

设计原则：
- 纯 Python 实现，不依赖任何框架（DDD 要求）
- create() 做严格校验；from_dict() 只做形态解析，
  悬空引用等问题留给 GraphStructureValidator 报告
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any
from uuid import uuid4

from src.domain.exceptions import DomainError

_ERROR_HANDLE_IDS = frozenset({"error", "on_error", "onerror", "failure"})


def _clean(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped or None


@dataclass(frozen=True)
class Edge:
    """Edge 实体

    属性说明：
    - id: 唯一标识符（edge_ 前缀）
    - source_node_id: 源节点 ID
    - target_node_id: 目标节点 ID
    - source_handle / target_handle: 端口 handle（可选）
    - condition: 分支值（条件节点出边使用）
    - is_error_handler: 是否为错误处理分支
    - data: 其它附加数据
    """

    id: str
    source_node_id: str
    target_node_id: str
    source_handle: str | None = None
    target_handle: str | None = None
    condition: str | None = None
    is_error_handler: bool = False
    data: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def create(
        cls,
        source_node_id: str,
        target_node_id: str,
        condition: str | None = None,
        *,
        source_handle: str | None = None,
        target_handle: str | None = None,
        is_error_handler: bool = False,
    ) -> Edge:
        """创建 Edge 的工厂方法

        抛出：
            DomainError: 当节点 ID 为空或源与目标相同时
        """
        if not source_node_id or not source_node_id.strip():
            raise DomainError("source_node_id 不能为空")

        if not target_node_id or not target_node_id.strip():
            raise DomainError("target_node_id 不能为空")

        if source_node_id.strip() == target_node_id.strip():
            raise DomainError("不能连接到自己")

        return cls(
            id=f"edge_{uuid4().hex[:8]}",
            source_node_id=source_node_id.strip(),
            target_node_id=target_node_id.strip(),
            source_handle=_clean(source_handle),
            target_handle=_clean(target_handle),
            condition=_clean(condition),
            is_error_handler=is_error_handler,
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], *, index: int = 0) -> Edge:
        """从前端画布 JSON 构造边

        兼容 React Flow 形态：{id, source, target, sourceHandle, targetHandle, data}。
        """
        if not isinstance(data, Mapping):
            raise DomainError("edge must be an object")

        payload: Mapping[str, Any] = data.get("data") or {}
        if not isinstance(payload, Mapping):
            payload = {}

        source = data.get("source", data.get("source_node_id"))
        target = data.get("target", data.get("target_node_id"))
        source_handle = _clean(data.get("sourceHandle", data.get("source_handle")))
        target_handle = _clean(data.get("targetHandle", data.get("target_handle")))

        condition = None
        for key in ("condition", "conditionValue", "branch"):
            raw = data.get(key, payload.get(key))
            if raw is not None and not isinstance(raw, str):
                raw = str(raw)
            condition = _clean(raw)
            if condition:
                break

        is_error_handler = bool(
            data.get("is_error_handler")
            or payload.get("errorHandler")
            or payload.get("isErrorHandler")
            or payload.get("type") == "error"
            or (source_handle or "").lower() in _ERROR_HANDLE_IDS
        )

        return cls(
            id=_clean(data.get("id")) or f"edge_{index}",
            source_node_id=source if isinstance(source, str) else "",
            target_node_id=target if isinstance(target, str) else "",
            source_handle=source_handle,
            target_handle=target_handle,
            condition=condition,
            is_error_handler=is_error_handler,
            data=dict(payload),
        )

    @property
    def has_branch_value(self) -> bool:
        return bool(self.condition)

    @property
    def pair(self) -> tuple[str, str]:
        return (self.source_node_id, self.target_node_id)
