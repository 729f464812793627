"""ConnectionValidator - 单条连接的端口级校验

职责：
1. 校验两个节点之间（可指定 handle）的连接是否合法
2. 按固定优先级执行端口规则，首个失败即短路：
   节点存在 → 端口解析 → 数据类型 → 必填 → 分类白名单 → 自定义规则
3. 在结果中附带兼容性规则表给出的分数与说明

纯函数：不修改输入、不做 IO，可以重复、并发调用。
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any

from src.domain.entities.node import Node
from src.domain.services.compatibility_rules import (
    DEFAULT_RULE_TABLE,
    VALID_SCORE_THRESHOLD,
    CompatibilityRule,
    CompatibilityRuleTable,
    effective_category,
)
from src.domain.services.node_config_validator import coerce_number, is_empty_value
from src.domain.value_objects.connection_rule import ConnectionRule, ConnectionRuleKind
from src.domain.value_objects.port_schema import PortDataType, PortDirection, PortSchema

logger = logging.getLogger(__name__)

MISSING_NODE_MESSAGE = "connected node does not exist"
NUMBER_TO_STRING_ADVISORY = "Number will be converted to string"

# 结构化错误码（与前端 badge / tooltip 对应）
CODE_MISSING_NODE = "missing_node"
CODE_PORT_MISMATCH = "port_mismatch"
CODE_TYPE_MISMATCH = "type_mismatch"
CODE_REQUIRED_PORT = "required_port"
CODE_CATEGORY_NOT_ALLOWED = "category_not_allowed"
CODE_CUSTOM_RULE_FAILED = "custom_rule_failed"
CODE_LOW_COMPATIBILITY = "low_compatibility"


@dataclass(frozen=True, slots=True)
class ConnectionVerdict:
    """连接校验结果

    属性：
    - is_valid: 是否允许连接
    - message: 失败原因或提示信息
    - code: 失败错误码（通过时为 None）
    - advisory: 非阻塞提示（如数字到字符串的隐式转换）
    - source / target: 节点 ID
    - score / rationale: 兼容性规则表给出的分数与说明
    """

    is_valid: bool
    message: str | None = None
    code: str | None = None
    advisory: str | None = None
    source: str | None = None
    target: str | None = None
    score: int | None = None
    rationale: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"is_valid": self.is_valid, "message": self.message}
        if self.code:
            payload["code"] = self.code
        if self.advisory:
            payload["advisory"] = self.advisory
        if self.source:
            payload["source"] = self.source
        if self.target:
            payload["target"] = self.target
        if self.score is not None:
            payload["score"] = self.score
            payload["rationale"] = self.rationale
        return payload


@dataclass(frozen=True, slots=True)
class _Check:
    is_valid: bool
    message: str | None = None
    code: str | None = None


_PASS = _Check(is_valid=True)


def check_data_types(source_type: PortDataType, target_type: PortDataType) -> tuple[bool, str | None]:
    """数据类型兼容性

    返回：
        (是否通过, 消息)；数字到字符串通过但带提示消息
    """
    if source_type == PortDataType.ANY or target_type == PortDataType.ANY:
        return True, None
    if source_type == target_type:
        return True, None
    if source_type == PortDataType.NUMBER and target_type == PortDataType.STRING:
        return True, NUMBER_TO_STRING_ADVISORY
    return False, f"Type mismatch: cannot connect {source_type.value} to {target_type.value}"


def _invalid_connection_message(source_category: str, target_category: str) -> str:
    return f"Invalid connection: {source_category} cannot connect to {target_category}"


class ConnectionValidator:
    """连接校验器

    参数：
        rule_table: 兼容性规则表
        valid_score_threshold: 分数门槛（严格大于才通过）
        enforce_category_score: 是否把分数门槛作为阻塞检查（默认关闭，仅附带分数）
    """

    def __init__(
        self,
        *,
        rule_table: CompatibilityRuleTable = DEFAULT_RULE_TABLE,
        valid_score_threshold: int = VALID_SCORE_THRESHOLD,
        enforce_category_score: bool = False,
    ) -> None:
        self._rule_table = rule_table
        self._valid_score_threshold = valid_score_threshold
        self._enforce_category_score = enforce_category_score

    @property
    def rule_table(self) -> CompatibilityRuleTable:
        return self._rule_table

    def validate(
        self,
        source: Node | None,
        target: Node | None,
        source_handle: str | None = None,
        target_handle: str | None = None,
    ) -> ConnectionVerdict:
        """校验一条连接

        参数：
            source: 源节点
            target: 目标节点
            source_handle: 源输出端口 handle（可选，缺省为默认端口）
            target_handle: 目标输入端口 handle（可选，缺省为默认端口）

        返回：
            ConnectionVerdict
        """
        if not isinstance(source, Node) or not isinstance(target, Node):
            return ConnectionVerdict(
                is_valid=False,
                message=MISSING_NODE_MESSAGE,
                code=CODE_MISSING_NODE,
                source=source.id if isinstance(source, Node) else None,
                target=target.id if isinstance(target, Node) else None,
            )

        rule = self._rule_table.lookup(
            effective_category(source, self._rule_table),
            effective_category(target, self._rule_table),
        )

        def verdict(check: _Check, advisory: str | None = None) -> ConnectionVerdict:
            if not check.is_valid:
                logger.debug(
                    "connection %s -> %s rejected: %s", source.id, target.id, check.message
                )
            return ConnectionVerdict(
                is_valid=check.is_valid,
                message=check.message if not check.is_valid else advisory,
                code=check.code,
                advisory=advisory if check.is_valid else None,
                source=source.id,
                target=target.id,
                score=rule.score,
                rationale=rule.rationale,
            )

        # 端口是可选元数据：任一节点未声明端口时放行
        if not source.has_ports or not target.has_ports:
            return verdict(_PASS)

        if not target.input_ports:
            return verdict(
                _Check(
                    is_valid=False,
                    message=f"node '{target.id}' does not accept incoming connections",
                    code=CODE_PORT_MISMATCH,
                )
            )

        source_port = source.find_port(source_handle, PortDirection.OUTPUT)
        target_port = target.find_port(target_handle, PortDirection.INPUT)

        if target_port is None:
            return verdict(
                _PASS,
                advisory=f"port '{target_handle}' is not declared on node '{target.id}'; connection not type-checked",
            )

        advisory: str | None = None
        if source_port is not None:
            ok, message = check_data_types(source_port.data_type, target_port.data_type)
            if not ok:
                return verdict(_Check(is_valid=False, message=message, code=CODE_TYPE_MISMATCH))
            advisory = message
        elif source_handle is None:
            advisory = f"node '{source.id}' has no output ports; connection not type-checked"
        else:
            advisory = f"port '{source_handle}' is not declared on node '{source.id}'; connection not type-checked"

        if target_port.required and source_port is None:
            return verdict(
                _Check(
                    is_valid=False,
                    message=f"Required input '{target_port.id}' cannot be connected to an empty source",
                    code=CODE_REQUIRED_PORT,
                )
            )

        check = self._check_allowed_categories(source, target, target_port)
        if not check.is_valid:
            return verdict(check)

        for port_rule in target_port.rules:
            check = self._evaluate_rule(port_rule, source, source_port, target)
            if not check.is_valid:
                return verdict(check)

        if self._enforce_category_score:
            check = self._check_score(rule, source, target)
            if not check.is_valid:
                return verdict(check)

        return verdict(_PASS, advisory=advisory)

    def _source_categories(self, source: Node) -> set[str]:
        return {source.category_name, effective_category(source, self._rule_table)}

    def _check_allowed_categories(self, source: Node, target: Node, target_port: PortSchema) -> _Check:
        if not target_port.allowed_categories:
            return _PASS
        if self._source_categories(source) & set(target_port.allowed_categories):
            return _PASS
        return _Check(
            is_valid=False,
            message=_invalid_connection_message(source.category_name, target.category_name),
            code=CODE_CATEGORY_NOT_ALLOWED,
        )

    def _check_score(self, rule: CompatibilityRule, source: Node, target: Node) -> _Check:
        if rule.score > self._valid_score_threshold:
            return _PASS
        return _Check(
            is_valid=False,
            message=(
                f"Low compatibility: {source.category_name} to {target.category_name} "
                f"scores {rule.score} ({rule.rationale})"
            ),
            code=CODE_LOW_COMPATIBILITY,
        )

    def _evaluate_rule(
        self,
        rule: ConnectionRule,
        source: Node,
        source_port: PortSchema | None,
        target: Node,
    ) -> _Check:
        """执行单条自定义规则（纯函数）"""

        def fail(default_message: str) -> _Check:
            return _Check(
                is_valid=False,
                message=rule.message or default_message,
                code=CODE_CUSTOM_RULE_FAILED,
            )

        if rule.kind == ConnectionRuleKind.SOURCE_DATA_TYPE:
            if source_port is None or source_port.data_type == PortDataType.ANY:
                return _PASS
            if source_port.data_type.value in rule.allowed_types:
                return _PASS
            return fail(
                f"Source port type {source_port.data_type.value} is not one of: "
                f"{', '.join(rule.allowed_types)}"
            )

        if rule.kind == ConnectionRuleKind.DENY_SOURCE_CATEGORY:
            if self._source_categories(source) & set(rule.categories):
                return fail(_invalid_connection_message(source.category_name, target.category_name))
            return _PASS

        value = source.config.get(rule.field) if rule.field else None

        if rule.kind == ConnectionRuleKind.REQUIRED_SOURCE_FIELD:
            if is_empty_value(value):
                return fail(f"Source field '{rule.field}' is required")
            return _PASS

        if rule.kind == ConnectionRuleKind.FORMAT:
            if is_empty_value(value):
                return _PASS
            if re.search(rule.pattern or "", str(value)) is None:
                return fail(f"Source field '{rule.field}' has invalid format")
            return _PASS

        if rule.kind == ConnectionRuleKind.RANGE:
            if is_empty_value(value):
                return _PASS
            number = coerce_number(value)
            if number is None:
                return fail(f"Source field '{rule.field}' must be a number")
            if rule.minimum is not None and number < rule.minimum:
                return fail(f"Source field '{rule.field}' must be at least {rule.minimum}")
            if rule.maximum is not None and number > rule.maximum:
                return fail(f"Source field '{rule.field}' must be at most {rule.maximum}")
            return _PASS

        return fail(f"Unknown connection rule: {rule.kind}")
