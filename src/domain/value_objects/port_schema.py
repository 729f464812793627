"""PortSchema 值对象 - 节点的类型化连接点

业务定义：
- 端口属于唯一的节点，方向为 input 或 output
- 端口声明数据类型；any 与任何类型兼容
- required 只对输入端口有意义
- allowed_categories 限制可以连入的对端节点分类
- rules 为按声明顺序执行的自定义连接规则

端口由节点类型注册表声明，终端用户不能编辑。
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from src.domain.exceptions import DomainError
from src.domain.value_objects.connection_rule import ConnectionRule
from src.domain.value_objects.payload import require_list, require_mapping, require_string_list


class PortDirection(str, Enum):
    INPUT = "input"
    OUTPUT = "output"


class PortDataType(str, Enum):
    """端口数据类型

    ANY 是通配类型：与任何类型都兼容。
    """

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    OBJECT = "object"
    ARRAY = "array"
    ANY = "any"


@dataclass(frozen=True, slots=True)
class PortSchema:
    """端口声明

    属性说明：
    - id: 端口 ID（即 React Flow 的 handle id）
    - direction: 端口方向
    - data_type: 数据类型
    - required: 是否必须连接（仅输入端口）
    - allowed_categories: 允许连入的源节点分类（空表示不限制）
    - rules: 自定义连接规则（按顺序执行，首个失败即短路）
    """

    id: str
    direction: PortDirection
    data_type: PortDataType = PortDataType.ANY
    required: bool = False
    allowed_categories: tuple[str, ...] = ()
    rules: tuple[ConnectionRule, ...] = ()
    label: str | None = None

    def __post_init__(self) -> None:
        if not self.id or not self.id.strip():
            raise DomainError("port id 不能为空")
        if self.required and self.direction == PortDirection.OUTPUT:
            raise DomainError(f"output port '{self.id}' cannot be required")

    @property
    def is_input(self) -> bool:
        return self.direction == PortDirection.INPUT

    @property
    def is_output(self) -> bool:
        return self.direction == PortDirection.OUTPUT

    @classmethod
    def from_dict(cls, data: Any) -> PortSchema:
        """从注册表 YAML / 前端 JSON 构造端口

        同时接受前端字段名（type / dataType / allowedConnections / validationRules）
        与后端字段名（direction / data_type / allowed_categories / rules）。
        """
        data = require_mapping(data, "port")
        port_id = data.get("id")
        if not isinstance(port_id, str):
            raise DomainError("port id must be a string")

        raw_direction = data.get("direction") or data.get("type")
        try:
            direction = PortDirection(str(raw_direction).strip().lower())
        except ValueError as exc:
            raise DomainError(f"invalid port direction: {raw_direction}") from exc

        raw_data_type = data.get("data_type") or data.get("dataType") or PortDataType.ANY.value
        try:
            data_type = PortDataType(str(raw_data_type).strip().lower())
        except ValueError as exc:
            raise DomainError(f"invalid port data type: {raw_data_type}") from exc

        allowed = require_string_list(
            data.get("allowed_categories") or data.get("allowedConnections"),
            f"port '{port_id}' allowed categories",
        )
        raw_rules = require_list(
            data.get("rules") or data.get("validationRules"),
            f"port '{port_id}' rules",
        )

        return cls(
            id=port_id.strip(),
            direction=direction,
            data_type=data_type,
            required=bool(data.get("required", False)),
            allowed_categories=allowed,
            rules=tuple(ConnectionRule.from_dict(rule) for rule in raw_rules),
            label=data.get("label"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "direction": self.direction.value,
            "data_type": self.data_type.value,
            "required": self.required,
            "allowed_categories": list(self.allowed_categories),
            "rules": [rule.to_dict() for rule in self.rules],
            "label": self.label,
        }
