"""FieldDescriptor 值对象 - 节点配置字段声明

业务定义：
- 每种节点类型声明一组可配置字段（字段 schema）
- 字段声明类型与约束：数值上下限、字符串长度与正则、枚举选项
- 只用于节点配置校验，从不参与连接校验
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any

from src.domain.exceptions import DomainError


class FieldType(str, Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ENUM = "enum"
    ARRAY = "array"
    OBJECT = "object"


# 前端表单控件类型 → 字段类型
_FIELD_TYPE_ALIASES = {
    "text": FieldType.STRING,
    "textarea": FieldType.STRING,
    "email": FieldType.STRING,
    "url": FieldType.STRING,
    "password": FieldType.STRING,
    "integer": FieldType.NUMBER,
    "select": FieldType.ENUM,
    "checkbox": FieldType.BOOLEAN,
    "list": FieldType.ARRAY,
    "json": FieldType.OBJECT,
}


@dataclass(frozen=True, slots=True)
class FieldDescriptor:
    """字段声明

    属性说明：
    - name: 配置字段名
    - type: 字段类型
    - required: 是否必填
    - minimum / maximum: 数值边界（number）
    - min_length / max_length: 长度边界（string）
    - pattern: 正则（string，search 语义）
    - pattern_message: 正则不匹配时的自定义消息
    - options: 固定选项（enum）
    - label: 展示名
    """

    name: str
    type: FieldType = FieldType.STRING
    required: bool = False
    minimum: float | None = None
    maximum: float | None = None
    min_length: int | None = None
    max_length: int | None = None
    pattern: str | None = None
    pattern_message: str | None = None
    options: tuple[Any, ...] = ()
    label: str | None = None

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise DomainError("field name 不能为空")
        if self.pattern is not None:
            try:
                re.compile(self.pattern)
            except re.error as exc:
                raise DomainError(f"invalid pattern for field '{self.name}': {exc}") from exc
        if self.type == FieldType.ENUM and not self.options:
            raise DomainError(f"enum field '{self.name}' requires options")
        if (
            self.minimum is not None
            and self.maximum is not None
            and self.minimum > self.maximum
        ):
            raise DomainError(f"field '{self.name}': minimum is greater than maximum")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FieldDescriptor:
        name = data.get("name")
        if not isinstance(name, str):
            raise DomainError("field name must be a string")

        raw_type = str(data.get("type") or FieldType.STRING.value).strip().lower()
        field_type = _FIELD_TYPE_ALIASES.get(raw_type)
        if field_type is None:
            try:
                field_type = FieldType(raw_type)
            except ValueError as exc:
                raise DomainError(f"unknown field type '{raw_type}' for '{name}'") from exc

        # 前端 fieldValidations 把约束放在 validation 子对象中
        constraints = dict(data.get("validation") or {})
        constraints.update({k: v for k, v in data.items() if k != "validation"})

        raw_options = constraints.get("options") or ()
        options = tuple(
            opt.get("value") if isinstance(opt, dict) else opt for opt in raw_options
        )
        return cls(
            name=name.strip(),
            type=field_type,
            required=bool(constraints.get("required", False)),
            minimum=constraints.get("minimum", constraints.get("min")),
            maximum=constraints.get("maximum", constraints.get("max")),
            min_length=constraints.get("min_length", constraints.get("minLength")),
            max_length=constraints.get("max_length", constraints.get("maxLength")),
            pattern=constraints.get("pattern"),
            pattern_message=constraints.get("pattern_message", constraints.get("message")),
            options=options,
            label=constraints.get("label"),
        )

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "name": self.name,
            "type": self.type.value,
            "required": self.required,
        }
        for key in ("minimum", "maximum", "min_length", "max_length", "pattern", "pattern_message", "label"):
            value = getattr(self, key)
            if value is not None:
                payload[key] = value
        if self.options:
            payload["options"] = list(self.options)
        return payload
