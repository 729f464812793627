"""NodeTypeRegistry Port（节点类型注册表端口）

Domain 层端口：按节点类型 ID 提供端口声明与配置字段 schema。

约束：
- 只能依赖标准库与 Domain 层类型
- 禁止在 Domain/Ports 中做 IO/解析（YAML 读取由 Infrastructure 负责）
- 注册表内容在一次校验中视为只读
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol

from src.domain.exceptions import DomainError
from src.domain.value_objects.field_descriptor import FieldDescriptor
from src.domain.value_objects.node_category import NodeCategory, category_name
from src.domain.value_objects.payload import require_string_list
from src.domain.value_objects.port_schema import PortDirection, PortSchema


@dataclass(frozen=True, slots=True)
class NodeTypeDefinition:
    """节点类型定义

    属性说明：
    - type_id: 节点类型 ID（如 webhook、http、email）
    - category: 节点分类
    - ports: 端口声明
    - field_schema: 配置字段（按展示顺序）
    - label / description: 展示信息
    - tags: 描述性标记（如 output）
    """

    type_id: str
    category: NodeCategory | str
    ports: tuple[PortSchema, ...] = ()
    field_schema: tuple[FieldDescriptor, ...] = ()
    label: str | None = None
    description: str | None = None
    tags: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.type_id or not self.type_id.strip():
            raise DomainError("node type id 不能为空")
        category = NodeCategory.normalize(self.category)
        if not category:
            raise DomainError(f"node type '{self.type_id}' category 不能为空")
        object.__setattr__(self, "category", category)

        if category == NodeCategory.TRIGGER and any(p.direction == PortDirection.INPUT for p in self.ports):
            raise DomainError(f"trigger node type '{self.type_id}' cannot declare input ports")

        port_ids = [p.id for p in self.ports]
        if len(port_ids) != len(set(port_ids)):
            raise DomainError(f"node type '{self.type_id}' declares duplicate port ids")

        field_names = [f.name for f in self.field_schema]
        if len(field_names) != len(set(field_names)):
            raise DomainError(f"node type '{self.type_id}' declares duplicate fields")

    @property
    def category_name(self) -> str:
        return category_name(self.category)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> NodeTypeDefinition:
        type_id = data.get("type_id") or data.get("id") or data.get("type")
        if not isinstance(type_id, str):
            raise DomainError("node type id must be a string")

        raw_ports = data.get("ports") or ()
        raw_fields = data.get("field_schema") or data.get("fields") or ()
        if not isinstance(raw_ports, (list, tuple)) or not isinstance(raw_fields, (list, tuple)):
            raise DomainError(f"node type '{type_id}': ports and fields must be lists")

        return cls(
            type_id=type_id.strip().lower(),
            category=data.get("category") or "",
            ports=tuple(PortSchema.from_dict(p) for p in raw_ports),
            field_schema=tuple(FieldDescriptor.from_dict(f) for f in raw_fields),
            label=data.get("label") or data.get("name"),
            description=data.get("description"),
            tags=require_string_list(data.get("tags"), f"node type '{type_id}' tags"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "type_id": self.type_id,
            "category": self.category_name,
            "label": self.label,
            "description": self.description,
            "tags": list(self.tags),
            "ports": [p.to_dict() for p in self.ports],
            "field_schema": [f.to_dict() for f in self.field_schema],
        }


class NodeTypeRegistry(Protocol):
    """节点类型注册表"""

    def get(self, type_id: str) -> NodeTypeDefinition:
        """获取节点类型定义

        抛出：
            NodeTypeNotFoundError: 类型不存在
        """
        ...

    def find(self, type_id: str | None) -> NodeTypeDefinition | None:
        """获取节点类型定义，不存在时返回 None"""
        ...

    def list_types(self) -> list[NodeTypeDefinition]:
        """全部节点类型（按 type_id 排序）"""
        ...
