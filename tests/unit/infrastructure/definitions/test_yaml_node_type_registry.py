"""测试：YamlNodeTypeRegistry 从 YAML 目录加载节点类型"""

import logging
from pathlib import Path

import pytest

from src.domain.value_objects.node_category import NodeCategory
from src.domain.value_objects.port_schema import PortDataType
from src.infrastructure.definitions.yaml_node_type_registry import (
    NodeTypeDefinitionLoadError,
    YamlNodeTypeRegistry,
)

SHIPPED_DEFINITIONS_DIR = Path(__file__).resolve().parents[4] / "definitions" / "node_types"


def _write(directory: Path, name: str, content: str) -> Path:
    path = directory / name
    path.write_text(content, encoding="utf-8")
    return path


class TestYamlNodeTypeRegistryLoading:
    def test_loads_definitions_from_directory(self, tmp_path, caplog):
        _write(
            tmp_path,
            "http.yaml",
            """
type_id: http
category: action
ports:
  - id: input
    direction: input
    data_type: object
fields:
  - name: url
    type: url
    required: true
""",
        )
        _write(tmp_path, "notes.txt", "ignored")

        with caplog.at_level(logging.INFO):
            registry = YamlNodeTypeRegistry(definitions_dir=tmp_path)

        definition = registry.get("http")
        assert len(registry) == 1
        assert definition.category is NodeCategory.ACTION
        assert definition.ports[0].data_type == PortDataType.OBJECT
        assert definition.field_schema[0].required is True
        assert registry.definitions_dir == tmp_path
        assert "loaded 1 node types" in caplog.text

    def test_missing_directory_should_raise_error(self, tmp_path):
        with pytest.raises(NodeTypeDefinitionLoadError, match="does not exist"):
            YamlNodeTypeRegistry(definitions_dir=tmp_path / "missing")

    def test_yaml_parse_error_points_at_file_and_line(self, tmp_path):
        path = _write(tmp_path, "broken.yaml", "type_id: x\ncategory: [action\n")

        with pytest.raises(NodeTypeDefinitionLoadError) as exc_info:
            YamlNodeTypeRegistry(definitions_dir=tmp_path)

        assert exc_info.value.source_path == path
        assert "yaml parse error:" in exc_info.value.message

    def test_top_level_must_be_mapping(self, tmp_path):
        _write(tmp_path, "list.yaml", "- type_id: x\n")

        with pytest.raises(NodeTypeDefinitionLoadError, match="must be a mapping"):
            YamlNodeTypeRegistry(definitions_dir=tmp_path)

    def test_missing_required_keys(self, tmp_path):
        _write(tmp_path, "partial.yaml", "type_id: x\n")

        with pytest.raises(NodeTypeDefinitionLoadError, match="missing required keys: category"):
            YamlNodeTypeRegistry(definitions_dir=tmp_path)

    def test_duplicate_type_id_across_files(self, tmp_path):
        _write(tmp_path, "a.yaml", "type_id: http\ncategory: action\n")
        _write(tmp_path, "b.yaml", "type_id: HTTP\ncategory: action\n")

        with pytest.raises(NodeTypeDefinitionLoadError, match="duplicate type_id 'http'"):
            YamlNodeTypeRegistry(definitions_dir=tmp_path)

    def test_invalid_definition_is_wrapped(self, tmp_path):
        _write(
            tmp_path,
            "hook.yaml",
            "type_id: hook\ncategory: trigger\nports:\n  - id: in\n    direction: input\n",
        )

        with pytest.raises(NodeTypeDefinitionLoadError, match="invalid node type: .*cannot declare input ports"):
            YamlNodeTypeRegistry(definitions_dir=tmp_path)


class TestShippedDefinitions:
    @pytest.fixture(scope="class")
    def registry(self) -> YamlNodeTypeRegistry:
        return YamlNodeTypeRegistry(definitions_dir=SHIPPED_DEFINITIONS_DIR)

    def test_all_shipped_types_load(self, registry):
        assert [d.type_id for d in registry.list_types()] == [
            "api",
            "condition",
            "email",
            "google_sheets",
            "openai",
            "schedule",
            "transformer",
            "webhook",
        ]

    def test_email_field_schema(self, registry):
        email = registry.get("email")

        to_field = email.field_schema[0]
        assert to_field.name == "to"
        assert to_field.required is True
        assert to_field.pattern_message == "Please enter a valid email address"
        assert "output" in email.tags

    def test_triggers_have_no_input_ports(self, registry):
        for definition in registry.list_types():
            if definition.category is NodeCategory.TRIGGER:
                assert all(not port.is_input for port in definition.ports)
