"""ConnectionRule 值对象 - 端口上的自定义连接规则

规则以数据形式声明（带 kind 判别字段），由 ConnectionValidator 按声明
顺序依次求值；不再是散落在 UI 组件里的闭包。

支持的 kind：
- source_data_type: 源端口数据类型必须在 allowed_types 中
- required_source_field: 源节点配置中的 field 必须非空
- format: 源节点配置中的 field 必须匹配正则 pattern
- range: 源节点配置中的 field 必须是数值且落在 [minimum, maximum]
- deny_source_category: 源节点分类不能在 categories 中
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any

from src.domain.exceptions import DomainError
from src.domain.value_objects.payload import require_mapping, require_string_list


class ConnectionRuleKind(str, Enum):
    SOURCE_DATA_TYPE = "source_data_type"
    REQUIRED_SOURCE_FIELD = "required_source_field"
    FORMAT = "format"
    RANGE = "range"
    DENY_SOURCE_CATEGORY = "deny_source_category"


_FIELD_KINDS = {
    ConnectionRuleKind.REQUIRED_SOURCE_FIELD,
    ConnectionRuleKind.FORMAT,
    ConnectionRuleKind.RANGE,
}


@dataclass(frozen=True, slots=True)
class ConnectionRule:
    """单条自定义连接规则

    属性说明：
    - kind: 规则类型
    - field: 源节点配置字段名（required_source_field / format / range）
    - pattern: 正则表达式（format）
    - minimum / maximum: 数值边界（range）
    - allowed_types: 允许的源端口数据类型（source_data_type）
    - categories: 被拒绝的源节点分类（deny_source_category）
    - message: 自定义失败消息
    """

    kind: ConnectionRuleKind
    field: str | None = None
    pattern: str | None = None
    minimum: float | None = None
    maximum: float | None = None
    allowed_types: tuple[str, ...] = ()
    categories: tuple[str, ...] = ()
    message: str | None = None

    def __post_init__(self) -> None:
        if self.kind in _FIELD_KINDS and not self.field:
            raise DomainError(f"connection rule '{self.kind.value}' requires a field")
        if self.kind == ConnectionRuleKind.FORMAT:
            if not self.pattern:
                raise DomainError("format rule requires a pattern")
            try:
                re.compile(self.pattern)
            except re.error as exc:
                raise DomainError(f"invalid format pattern: {exc}") from exc
        if self.kind == ConnectionRuleKind.SOURCE_DATA_TYPE and not self.allowed_types:
            raise DomainError("source_data_type rule requires allowed_types")
        if self.kind == ConnectionRuleKind.DENY_SOURCE_CATEGORY and not self.categories:
            raise DomainError("deny_source_category rule requires categories")

    @classmethod
    def from_dict(cls, data: Any) -> ConnectionRule:
        """从注册表 / API 的字典形式构造规则"""
        data = require_mapping(data, "connection rule")
        raw_kind = data.get("kind") or data.get("type")
        try:
            kind = ConnectionRuleKind(str(raw_kind))
        except ValueError as exc:
            raise DomainError(f"unknown connection rule kind: {raw_kind}") from exc

        return cls(
            kind=kind,
            field=data.get("field"),
            pattern=data.get("pattern"),
            minimum=data.get("minimum", data.get("min")),
            maximum=data.get("maximum", data.get("max")),
            allowed_types=require_string_list(
                data.get("allowed_types") or data.get("allowedTypes"), "allowed_types"
            ),
            categories=require_string_list(data.get("categories"), "categories"),
            message=data.get("message"),
        )

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"kind": self.kind.value}
        if self.field:
            payload["field"] = self.field
        if self.pattern:
            payload["pattern"] = self.pattern
        if self.minimum is not None:
            payload["minimum"] = self.minimum
        if self.maximum is not None:
            payload["maximum"] = self.maximum
        if self.allowed_types:
            payload["allowed_types"] = list(self.allowed_types)
        if self.categories:
            payload["categories"] = list(self.categories)
        if self.message:
            payload["message"] = self.message
        return payload
