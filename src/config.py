"""应用配置模块 - 使用 Pydantic Settings 管理环境变量"""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_REPO_ROOT = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    """应用配置类"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="Workflow Guard", description="应用名称")
    app_version: str = Field(default="0.1.0", description="应用版本")
    env: Literal["development", "production", "test"] = Field(
        default="development", description="运行环境"
    )
    debug: bool = Field(default=False, description="调试模式")

    # Server
    host: str = Field(default="0.0.0.0", description="服务器地址")
    port: int = Field(default=8000, description="服务器端口")

    # Validation rules
    valid_score_threshold: int = Field(
        default=50, ge=0, le=100, description="连接有效的兼容性分数门槛（严格大于）"
    )
    suggest_score_threshold: int = Field(
        default=60, ge=0, le=100, description="连接可推荐的兼容性分数门槛（严格大于）"
    )
    max_connection_suggestions: int = Field(default=3, ge=1, description="每次最多推荐的连接数")
    cycle_policy: Literal["allow", "warn", "error"] = Field(
        default="warn", description="环的处理策略"
    )
    enforce_category_score: bool = Field(
        default=False, description="是否把分类兼容性分数作为阻塞检查"
    )
    min_display_duration_ms: int = Field(
        default=800, ge=0, description="校验提示的最短展示时长（毫秒）"
    )

    # Node type registry
    node_definitions_dir: Path = Field(
        default=_REPO_ROOT / "definitions" / "node_types",
        description="节点类型 YAML 定义目录",
    )

    # CORS
    cors_origins: list[str] = Field(
        default=[
            "http://localhost:3000",
            "http://localhost:5173",
            "http://127.0.0.1:3000",
            "http://127.0.0.1:5173",
        ],
        description="允许的跨域源",
    )

    # Logging
    log_level: str = Field(default="INFO", description="日志级别")
    log_format: Literal["json", "text"] = Field(default="text", description="日志格式")


# 全局配置实例
settings = Settings()
