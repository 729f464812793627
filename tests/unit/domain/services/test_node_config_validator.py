"""测试：NodeConfigValidator 节点配置校验

验收标准：
- 必填且为空 → "{field} is required"，不再继续检查该字段
- 非必填且为空 → 跳过
- 错误按 schema 顺序返回
- 同一输入多次调用结果一致
"""

import pytest

from src.domain.services.node_config_validator import (
    FieldError,
    NodeConfigValidator,
    coerce_number,
    is_empty_value,
)
from src.domain.value_objects.field_descriptor import FieldDescriptor, FieldType

EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"


@pytest.fixture
def validator() -> NodeConfigValidator:
    return NodeConfigValidator()


@pytest.fixture
def email_schema() -> list[FieldDescriptor]:
    return [
        FieldDescriptor(
            name="to",
            required=True,
            pattern=EMAIL_PATTERN,
            pattern_message="Please enter a valid email address",
        ),
        FieldDescriptor(name="subject", required=True, max_length=200),
        FieldDescriptor(name="cc", pattern=EMAIL_PATTERN),
    ]


class TestEmptyValues:
    @pytest.mark.parametrize("value", [None, "", "   ", [], {}, ()])
    def test_empty_values(self, value):
        assert is_empty_value(value) is True

    @pytest.mark.parametrize("value", [0, False, "x", [0]])
    def test_non_empty_values(self, value):
        assert is_empty_value(value) is False

    @pytest.mark.parametrize(
        ("value", "expected"),
        [(3, 3.0), ("2.5", 2.5), (" 7 ", 7.0), ("abc", None), (True, None), ("inf", None), (None, None)],
    )
    def test_coerce_number(self, value, expected):
        assert coerce_number(value) == expected


class TestEmailScenario:
    def test_invalid_email_reports_pattern_message(self, validator, email_schema):
        """测试：to 填写了非法邮箱 → 自定义消息；subject 为空 → required"""
        errors = validator.validate(email_schema, {"to": "not-an-email"})

        assert errors == [
            FieldError("to", "Please enter a valid email address"),
            FieldError("subject", "subject is required"),
        ]

    def test_valid_config_passes(self, validator, email_schema):
        errors = validator.validate(email_schema, {"to": "a@b.co", "subject": "Hi"})

        assert errors == []
        assert validator.is_complete(email_schema, {"to": "a@b.co", "subject": "Hi"}) is True

    def test_blank_string_counts_as_missing(self, validator, email_schema):
        errors = validator.validate(email_schema, {"to": "   ", "subject": "Hi"})

        assert errors == [FieldError("to", "to is required")]

    def test_optional_empty_field_is_skipped(self, validator, email_schema):
        errors = validator.validate(email_schema, {"to": "a@b.co", "subject": "Hi", "cc": ""})

        assert errors == []

    def test_none_config_reports_all_required_fields(self, validator, email_schema):
        errors = validator.validate(email_schema, None)

        assert [e.field for e in errors] == ["to", "subject"]

    def test_validation_is_idempotent(self, validator, email_schema):
        config = {"to": "bad", "subject": "x" * 201}

        first = validator.validate(email_schema, config)
        second = validator.validate(email_schema, config)

        assert first == second
        assert second[1].message == "subject must be at most 200 characters"


class TestFieldTypes:
    def test_number_bounds(self, validator):
        schema = [FieldDescriptor(name="timeout", type=FieldType.NUMBER, minimum=1, maximum=300)]

        assert validator.validate(schema, {"timeout": 0})[0].message == "timeout must be at least 1"
        assert validator.validate(schema, {"timeout": "301"})[0].message == "timeout must be at most 300"
        assert validator.validate(schema, {"timeout": "soon"})[0].message == "timeout must be a number"
        assert validator.validate(schema, {"timeout": "30"}) == []

    def test_number_bound_keeps_fraction(self, validator):
        schema = [FieldDescriptor(name="temperature", type=FieldType.NUMBER, maximum=1.5)]

        errors = validator.validate(schema, {"temperature": 2})

        assert errors[0].message == "temperature must be at most 1.5"

    def test_zero_satisfies_required_number(self, validator):
        schema = [FieldDescriptor(name="retries", type=FieldType.NUMBER, required=True)]

        assert validator.validate(schema, {"retries": 0}) == []

    def test_string_type_and_min_length(self, validator):
        schema = [FieldDescriptor(name="name", min_length=3)]

        assert validator.validate(schema, {"name": 12})[0].message == "name must be a string"
        assert validator.validate(schema, {"name": "ab"})[0].message == "name must be at least 3 characters"

    def test_pattern_without_custom_message(self, validator):
        schema = [FieldDescriptor(name="path", pattern=r"^/")]

        assert validator.validate(schema, {"path": "hooks"})[0].message == "path has invalid format"

    def test_enum_options(self, validator):
        schema = [FieldDescriptor(name="method", type=FieldType.ENUM, options=("GET", "POST"))]

        assert validator.validate(schema, {"method": "GET"}) == []
        assert validator.validate(schema, {"method": "PUT"})[0].message == "method must be one of: GET, POST"

    def test_boolean_false_is_a_value(self, validator):
        schema = [FieldDescriptor(name="enabled", type=FieldType.BOOLEAN, required=True)]

        assert validator.validate(schema, {"enabled": False}) == []
        assert validator.validate(schema, {"enabled": "yes"})[0].message == "enabled must be a boolean"

    def test_array_and_object(self, validator):
        schema = [
            FieldDescriptor(name="tags", type=FieldType.ARRAY),
            FieldDescriptor(name="headers", type=FieldType.OBJECT),
        ]

        errors = validator.validate(schema, {"tags": "a,b", "headers": ["x"]})

        assert errors == [
            FieldError("tags", "tags must be an array"),
            FieldError("headers", "headers must be an object"),
        ]

    def test_unknown_config_keys_are_ignored(self, validator):
        schema = [FieldDescriptor(name="url")]

        assert validator.validate(schema, {"url": "https://x", "extra": 1}) == []

    def test_field_error_to_dict(self):
        assert FieldError("to", "to is required").to_dict() == {"field": "to", "message": "to is required"}
