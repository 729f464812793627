"""Node 实体 - 工作流画布上的类型化节点

业务定义：
- Node 是工作流中的一个工作单元（触发器、动作、条件 ...）
- 每个 Node 有分类、端口声明、配置
- 分类在创建后不可变；配置通过 with_config() 产生新的快照

设计原则：
- 纯 Python 实现，不依赖任何框架（DDD 要求）
- frozen dataclass：校验器只处理不可变快照
- 通过工厂方法 create() / from_dict() 封装创建逻辑
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any
from uuid import uuid4

from src.domain.exceptions import DomainError
from src.domain.value_objects.node_category import NodeCategory, category_name
from src.domain.value_objects.payload import require_list, require_string_list
from src.domain.value_objects.port_schema import PortDirection, PortSchema

# 标记“输出型”节点的描述词（tags 或 node_type 中出现即视为输出）
OUTPUT_MARKERS: frozenset[str] = frozenset({"output", "messaging", "email", "notification"})


@dataclass(frozen=True)
class Node:
    """Node 实体

    属性说明：
    - id: 唯一标识符（图内唯一）
    - category: 节点分类（NodeCategory 或未知分类的小写字符串）
    - ports: 端口声明（来自节点类型注册表）
    - config: 节点配置（字段名 → 值）
    - node_type: 注册表中的节点类型 ID（如 webhook、http、openai）
    - label: 节点名称（用户可见）
    - tags: 描述性标记（如 output）
    - category_inferred: 分类是否为缺省推断（此时以注册表中的类型分类为准）
    """

    id: str
    category: NodeCategory | str
    ports: tuple[PortSchema, ...] = ()
    config: Mapping[str, Any] = field(default_factory=dict)
    node_type: str | None = None
    label: str | None = None
    tags: tuple[str, ...] = ()
    category_inferred: bool = field(default=False, compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not self.id.strip():
            raise DomainError("node id 不能为空")

        category = NodeCategory.normalize(self.category)
        if not category:
            raise DomainError(f"node '{self.id}' category 不能为空")
        object.__setattr__(self, "category", category)
        object.__setattr__(self, "ports", tuple(self.ports))
        object.__setattr__(self, "tags", tuple(str(tag).strip().lower() for tag in self.tags))

        # trigger 是工作流入口，不允许声明输入端口
        if self.category == NodeCategory.TRIGGER and any(p.is_input for p in self.ports):
            raise DomainError(f"trigger node '{self.id}' cannot declare input ports")

        port_ids = [p.id for p in self.ports]
        if len(port_ids) != len(set(port_ids)):
            raise DomainError(f"node '{self.id}' declares duplicate port ids")

    @classmethod
    def create(
        cls,
        category: NodeCategory | str,
        *,
        ports: tuple[PortSchema, ...] = (),
        config: Mapping[str, Any] | None = None,
        node_type: str | None = None,
        label: str | None = None,
        tags: tuple[str, ...] = (),
    ) -> Node:
        """创建 Node 的工厂方法（自动生成 node_ 前缀 ID）"""
        return cls(
            id=f"node_{uuid4().hex[:8]}",
            category=category,
            ports=ports,
            config=dict(config or {}),
            node_type=node_type,
            label=label,
            tags=tags,
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Node:
        """从前端画布 JSON 构造节点

        兼容 React Flow 形态：{id, type, data: {category, nodeType, ports, config, label}}。
        分类缺省时沿用编辑器约定：type == "trigger" 视为触发器，否则视为动作。
        """
        if not isinstance(data, Mapping):
            raise DomainError("node must be an object")

        payload: Mapping[str, Any] = data.get("data") or {}
        if not isinstance(payload, Mapping):
            raise DomainError(f"node '{data.get('id')}' data must be an object")

        def pick(*keys: str) -> Any:
            for key in keys:
                if data.get(key) is not None:
                    return data[key]
                if payload.get(key) is not None:
                    return payload[key]
            return None

        raw_type = data.get("type")
        category = pick("category")
        category_inferred = False
        if category is None:
            if isinstance(raw_type, str) and NodeCategory.is_known(raw_type):
                category = raw_type
            else:
                category = NodeCategory.ACTION
                category_inferred = True

        node_type = pick("node_type", "nodeType", "service")
        if node_type is None and isinstance(payload.get("type"), str):
            node_type = payload["type"]

        raw_ports = require_list(pick("ports"), f"node '{data.get('id')}' ports")
        raw_config = pick("config", "configuration") or {}
        if not isinstance(raw_config, Mapping):
            raise DomainError(f"node '{data.get('id')}' config must be an object")

        return cls(
            id=data.get("id"),  # type: ignore[arg-type]
            category=category,
            ports=tuple(
                p if isinstance(p, PortSchema) else PortSchema.from_dict(p) for p in raw_ports
            ),
            config=dict(raw_config),
            node_type=str(node_type).strip().lower() if node_type else None,
            label=pick("label", "name"),
            tags=require_string_list(pick("tags"), f"node '{data.get('id')}' tags"),
            category_inferred=category_inferred,
        )

    @property
    def category_name(self) -> str:
        return category_name(self.category)

    @property
    def is_trigger(self) -> bool:
        return self.category == NodeCategory.TRIGGER

    @property
    def is_condition(self) -> bool:
        return self.category == NodeCategory.CONDITION

    @property
    def has_ports(self) -> bool:
        return bool(self.ports)

    @property
    def input_ports(self) -> tuple[PortSchema, ...]:
        return tuple(p for p in self.ports if p.is_input)

    @property
    def output_ports(self) -> tuple[PortSchema, ...]:
        return tuple(p for p in self.ports if p.is_output)

    @property
    def is_output_like(self) -> bool:
        """动作节点，或带有输出标记的节点"""
        if self.category == NodeCategory.ACTION:
            return True
        if OUTPUT_MARKERS.intersection(self.tags):
            return True
        node_type = (self.node_type or "").lower()
        return any(marker in node_type for marker in OUTPUT_MARKERS)

    def find_port(self, handle: str | None, direction: PortDirection) -> PortSchema | None:
        """按 handle 查找端口；handle 为空时返回该方向的默认（第一个）端口"""
        candidates = [p for p in self.ports if p.direction == direction]
        if handle is None:
            return candidates[0] if candidates else None
        for port in candidates:
            if port.id == handle:
                return port
        return None

    def with_config(self, config: Mapping[str, Any]) -> Node:
        """返回配置被替换后的新节点快照"""
        return replace(self, config=dict(config))

    def with_ports(self, ports: tuple[PortSchema, ...]) -> Node:
        return replace(self, ports=tuple(ports))
