"""测试：API 容器按配置组装"""

from src.config import Settings
from src.interfaces.api.container import build_container


class TestBuildContainer:
    def test_coordinator_uses_min_display_duration_from_settings(self, definitions_dir, node_type_registry):
        settings = Settings(env="test", node_definitions_dir=definitions_dir, min_display_duration_ms=250)

        container = build_container(settings, registry=node_type_registry)

        assert container.validation_coordinator.min_display_seconds == 0.25

    def test_registry_defaults_to_yaml_definitions(self, test_settings):
        container = build_container(test_settings)

        assert len(container.registry.list_types()) == 8
