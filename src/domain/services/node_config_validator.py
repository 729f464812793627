"""NodeConfigValidator - 节点配置（表单）校验

业务定义：
- 按节点类型的字段 schema 校验节点当前配置
- 返回字段级错误列表（按 schema 顺序）
- 与图无关；配置向导每一步（Next）和最终提交（Complete）都会调用

规则：
- 必填且为空（缺失 / None / 空白字符串 / 空集合）→ "{field} is required"，该字段不再继续检查
- 非必填且为空 → 跳过
- number: 必须能解析为有限数值，再检查上下限
- string: 长度上下限、正则（search 语义）
- boolean / enum / array / object: 类型与选项检查

纯函数：同一 (schema, values) 多次调用结果完全一致。
"""

from __future__ import annotations

import math
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from src.domain.value_objects.field_descriptor import FieldDescriptor, FieldType


@dataclass(frozen=True, slots=True)
class FieldError:
    """字段级错误"""

    field: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "message": self.message}


def is_empty_value(value: Any) -> bool:
    """未定义、None、空白字符串、空集合视为空；0 与 False 不是空值"""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict, set)):
        return len(value) == 0
    return False


def coerce_number(value: Any) -> float | None:
    """把值解析为有限数值；布尔值与无法解析的值返回 None"""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number):
        return None
    return number


def _format_bound(bound: float) -> str:
    if float(bound).is_integer():
        return str(int(bound))
    return str(bound)


class NodeConfigValidator:
    """节点配置校验器"""

    def validate(
        self,
        field_schema: Iterable[FieldDescriptor],
        config_values: Mapping[str, Any] | None,
    ) -> list[FieldError]:
        """校验节点配置

        参数：
            field_schema: 字段声明（按顺序）
            config_values: 当前配置值

        返回：
            字段级错误列表（空列表表示通过）
        """
        values = config_values or {}
        errors: list[FieldError] = []

        for descriptor in field_schema:
            value = values.get(descriptor.name)

            if is_empty_value(value):
                if descriptor.required:
                    errors.append(FieldError(descriptor.name, f"{descriptor.name} is required"))
                continue

            errors.extend(self._validate_value(descriptor, value))

        return errors

    def is_complete(
        self,
        field_schema: Iterable[FieldDescriptor],
        config_values: Mapping[str, Any] | None,
    ) -> bool:
        """所有必填字段都有非空且类型正确的值时，配置才算完整"""
        return not self.validate(field_schema, config_values)

    def _validate_value(self, descriptor: FieldDescriptor, value: Any) -> list[FieldError]:
        name = descriptor.name

        if descriptor.type == FieldType.NUMBER:
            return self._validate_number(descriptor, value)

        if descriptor.type == FieldType.STRING:
            return self._validate_string(descriptor, value)

        if descriptor.type == FieldType.BOOLEAN:
            if not isinstance(value, bool):
                return [FieldError(name, f"{name} must be a boolean")]
            return []

        if descriptor.type == FieldType.ENUM:
            if value not in descriptor.options:
                allowed = ", ".join(str(opt) for opt in descriptor.options)
                return [FieldError(name, f"{name} must be one of: {allowed}")]
            return []

        if descriptor.type == FieldType.ARRAY:
            if not isinstance(value, (list, tuple)):
                return [FieldError(name, f"{name} must be an array")]
            return []

        if descriptor.type == FieldType.OBJECT:
            if not isinstance(value, Mapping):
                return [FieldError(name, f"{name} must be an object")]
            return []

        return []

    def _validate_number(self, descriptor: FieldDescriptor, value: Any) -> list[FieldError]:
        name = descriptor.name
        number = coerce_number(value)
        if number is None:
            return [FieldError(name, f"{name} must be a number")]

        errors: list[FieldError] = []
        if descriptor.minimum is not None and number < descriptor.minimum:
            errors.append(FieldError(name, f"{name} must be at least {_format_bound(descriptor.minimum)}"))
        if descriptor.maximum is not None and number > descriptor.maximum:
            errors.append(FieldError(name, f"{name} must be at most {_format_bound(descriptor.maximum)}"))
        return errors

    def _validate_string(self, descriptor: FieldDescriptor, value: Any) -> list[FieldError]:
        name = descriptor.name
        if not isinstance(value, str):
            return [FieldError(name, f"{name} must be a string")]

        errors: list[FieldError] = []
        if descriptor.min_length is not None and len(value) < descriptor.min_length:
            errors.append(FieldError(name, f"{name} must be at least {descriptor.min_length} characters"))
        if descriptor.max_length is not None and len(value) > descriptor.max_length:
            errors.append(FieldError(name, f"{name} must be at most {descriptor.max_length} characters"))
        if descriptor.pattern is not None and re.search(descriptor.pattern, value) is None:
            errors.append(FieldError(name, descriptor.pattern_message or f"{name} has invalid format"))
        return errors
