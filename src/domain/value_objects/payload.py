"""编辑器 / 注册表原始载荷的结构检查

from_dict 工厂共用：载荷形状不对时抛 DomainError（API 层映射为 422），
而不是让 AttributeError 之类的异常冒泡。
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from src.domain.exceptions import DomainError


def require_mapping(value: Any, name: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise DomainError(f"{name} must be an object")
    return value


def require_list(value: Any, name: str) -> list[Any]:
    """None → 空列表；字符串与字典不当作列表"""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    raise DomainError(f"{name} must be a list")


def require_string_list(value: Any, name: str) -> tuple[str, ...]:
    items = require_list(value, name)
    if not all(isinstance(item, str) for item in items):
        raise DomainError(f"{name} must be a list of strings")
    return tuple(item.strip().lower() for item in items)
