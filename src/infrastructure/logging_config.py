"""日志配置

基于 structlog 的 ProcessorFormatter：各模块照常使用
logging.getLogger(__name__)，stdlib 记录与 structlog 记录走同一条处理链。

- text: 人类可读格式（开发环境）
- json: 每行一个 JSON 对象（便于日志采集）
"""

from __future__ import annotations

import logging
from typing import Any

import structlog
from structlog.stdlib import ProcessorFormatter

# stdlib 与 structlog 记录共用的处理器
SHARED_PROCESSORS: list[Any] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_logger_name,
    structlog.processors.add_log_level,
    structlog.processors.TimeStamper(fmt="iso", utc=True),
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.processors.StackInfoRenderer(),
]


def build_formatter(log_format: str = "text") -> ProcessorFormatter:
    """构造 root handler 使用的 formatter"""
    if log_format == "json":
        final_processors: list[Any] = [
            ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ]
    else:
        final_processors = [
            ProcessorFormatter.remove_processors_meta,
            structlog.dev.ConsoleRenderer(colors=False),
        ]

    return ProcessorFormatter(
        processors=final_processors,
        # logging.getLogger(...).info(..., extra={...}) 的 extra 字段进入事件
        foreign_pre_chain=[*SHARED_PROCESSORS, structlog.stdlib.ExtraAdder()],
    )


def configure_logging(level: str = "INFO", log_format: str = "text") -> None:
    """配置 structlog 与根 logger（重复调用会替换已有 handler）"""
    structlog.configure(
        processors=[*SHARED_PROCESSORS, ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # 允许测试中重复配置
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(build_formatter(log_format))

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level.upper())
