"""测试：NodeConfigurationFlow 配置向导步骤门控

验收标准：
- Next：当前节点没有字段错误才能前进
- Complete：所有节点都没有字段错误才能提交
- 未注册的节点类型 → service 字段错误
"""

import pytest

from src.application.services.node_configuration_flow import (
    UNKNOWN_SERVICE_FIELD,
    UNKNOWN_SERVICE_MESSAGE,
    NodeConfigurationFlow,
)
from src.domain.entities.node import Node
from src.domain.exceptions import DomainValidationError, NotFoundError
from src.domain.services.node_config_validator import FieldError


@pytest.fixture
def flow(node_type_registry) -> NodeConfigurationFlow:
    return NodeConfigurationFlow(
        [
            Node(id="hook", category="trigger", node_type="webhook"),
            Node(id="mail", category="action", node_type="email"),
        ],
        registry=node_type_registry,
    )


class TestStepGating:
    def test_empty_step_cannot_advance(self, flow):
        result = flow.validate_step(0)

        assert result.node_id == "hook"
        assert result.can_advance is False
        assert [e.field for e in result.errors] == ["path", "method"]

    def test_step_advances_after_update(self, flow):
        flow.update_config("hook", {"path": "/orders", "method": "POST"})

        assert flow.validate_step(0).can_advance is True

    def test_invalid_email_blocks_step(self, flow):
        """测试：to 填写非法邮箱时 Next 被阻止"""
        flow.update_config("mail", {"to": "not-an-email", "subject": "Hi"})

        result = flow.validate_step(1)

        assert result.errors == (FieldError("to", "Please enter a valid email address"),)
        assert result.to_dict()["can_advance"] is False

    def test_out_of_range_step_should_raise_error(self, flow):
        with pytest.raises(DomainValidationError) as exc_info:
            flow.validate_step(2)

        assert exc_info.value.code == "invalid_step"

    def test_update_unknown_node_should_raise_not_found(self, flow):
        with pytest.raises(NotFoundError):
            flow.update_config("ghost", {})


class TestSubmission:
    def test_submission_requires_all_steps(self, flow):
        flow.update_config("hook", {"path": "/orders", "method": "POST"})

        result = flow.validate_submission()

        assert result.can_complete is False
        assert result.first_invalid_node_id == "mail"

    def test_submission_completes_when_all_valid(self, flow):
        flow.update_config("hook", {"path": "/orders", "method": "POST"})
        flow.update_config("mail", {"to": "ops@example.com", "subject": "New order"})

        result = flow.validate_submission()

        assert result.can_complete is True
        assert result.first_invalid_node_id is None

    def test_update_config_returns_new_snapshot(self, flow):
        original = flow.nodes[0]

        updated = flow.update_config("hook", {"path": "/x", "method": "GET"})

        assert original.config == {}
        assert updated.config == {"path": "/x", "method": "GET"}
        assert flow.nodes[0] is updated
        assert len(flow) == 2


class TestUnknownService:
    def test_unregistered_type_reports_service_error(self, node_type_registry):
        flow = NodeConfigurationFlow(
            [Node(id="x", category="action", node_type="telegram")],
            registry=node_type_registry,
        )

        result = flow.validate_step(0)

        assert result.errors == (FieldError(UNKNOWN_SERVICE_FIELD, UNKNOWN_SERVICE_MESSAGE),)
        assert flow.validate_submission().can_complete is False
