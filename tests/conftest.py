"""Pytest 配置文件 - 全局 fixtures"""

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from src.config import Settings
from src.infrastructure.definitions.yaml_node_type_registry import YamlNodeTypeRegistry
from src.interfaces.api.container import build_container
from src.interfaces.api.main import create_app

DEFINITIONS_DIR = Path(__file__).resolve().parents[1] / "definitions" / "node_types"


@pytest.fixture(scope="session")
def definitions_dir() -> Path:
    """仓库自带的节点类型 YAML 目录"""
    return DEFINITIONS_DIR


@pytest.fixture(scope="session")
def node_type_registry(definitions_dir: Path) -> YamlNodeTypeRegistry:
    """仓库自带节点类型的注册表（只读，整个测试会话共享）"""
    return YamlNodeTypeRegistry(definitions_dir=definitions_dir)


@pytest.fixture
def test_settings(definitions_dir: Path) -> Settings:
    return Settings(env="test", node_definitions_dir=definitions_dir, min_display_duration_ms=0)


@pytest.fixture
def client(test_settings: Settings, node_type_registry: YamlNodeTypeRegistry) -> TestClient:
    """FastAPI 测试客户端"""
    container = build_container(test_settings, registry=node_type_registry)
    with TestClient(create_app(test_settings, container=container)) as test_client:
        yield test_client
