"""领域层异常定义

异常分层：
- DomainError: 业务规则违反（如：图快照中存在重复节点 ID）
- NotFoundError: 引用的实体不存在（如：节点类型未注册）
- DomainValidationError: 携带结构化错误列表的校验失败

校验器本身不抛异常，而是返回结构化结果；这里的异常只用于
快照解析、注册表加载以及 API 边界上的请求校验。
"""

from __future__ import annotations

from typing import Any


class DomainError(Exception):
    """领域层异常基类

    用途：
    - 表示业务规则违反（如：节点 ID 不能为空）
    - 表示领域不变式违反（如：trigger 节点声明了输入端口）

    示例：
        if not node_id:
            raise DomainError("node id 不能为空")
    """

    pass


class NotFoundError(DomainError):
    """实体不存在异常

    参数：
        entity_type: 实体类型（如："NodeType"、"Node"）
        entity_id: 实体 ID
    """

    def __init__(self, entity_type: str, entity_id: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} 不存在: {entity_id}")


# EntityNotFoundError是NotFoundError的别名，用于Registry层
EntityNotFoundError = NotFoundError


class NodeTypeNotFoundError(NotFoundError):
    """节点类型未在注册表中找到"""

    def __init__(self, type_id: str):
        super().__init__("NodeType", type_id)


class DomainValidationError(DomainError):
    """结构化校验失败

    errors 中每一项形如 {"code": ..., "message": ..., "path": ...}，
    与前端展示的字段级错误一一对应。
    """

    def __init__(
        self,
        message: str = "validation failed",
        *,
        code: str = "validation_failed",
        errors: list[dict[str, Any]] | None = None,
    ):
        self.message = message
        self.code = code
        self.errors = list(errors or [])
        super().__init__(message)
