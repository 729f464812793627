"""测试：日志配置"""

import json
import logging
import sys

import pytest
from structlog.stdlib import ProcessorFormatter

from src.infrastructure.logging_config import build_formatter, configure_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for handler in list(root.handlers):
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="src.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="dismissed %s",
        args=("add-output",),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJsonFormatter:
    def test_formats_stdlib_record_as_json_line(self):
        payload = json.loads(build_formatter("json").format(_record()))

        assert payload["event"] == "dismissed add-output"
        assert payload["level"] == "info"
        assert payload["logger"] == "src.test"
        assert "timestamp" in payload
        assert "_record" not in payload

    def test_includes_extra_fields(self):
        payload = json.loads(build_formatter("json").format(_record(graph_id="wf_1", session_id="s1")))

        assert payload["graph_id"] == "wf_1"
        assert payload["session_id"] == "s1"

    def test_includes_exception_text(self):
        try:
            raise ValueError("boom")
        except ValueError:
            record = logging.LogRecord("src.test", logging.ERROR, __file__, 1, "failed", None, None)
            record.exc_info = sys.exc_info()

        payload = json.loads(build_formatter("json").format(record))

        assert "ValueError: boom" in payload["exception"]


class TestTextFormatter:
    def test_renders_message_and_logger(self):
        line = build_formatter("text").format(_record())

        assert "dismissed add-output" in line
        assert "src.test" in line


class TestConfigureLogging:
    def test_text_format_replaces_root_handlers(self, restore_root_logger):
        configure_logging("debug", "text")

        root = restore_root_logger
        assert len(root.handlers) == 1
        assert root.level == logging.DEBUG
        assert isinstance(root.handlers[0].formatter, ProcessorFormatter)

    def test_json_format(self, restore_root_logger):
        configure_logging("WARNING", "json")

        root = restore_root_logger
        assert isinstance(root.handlers[0].formatter, ProcessorFormatter)
        assert root.level == logging.WARNING

    def test_repeated_calls_do_not_stack_handlers(self, restore_root_logger):
        configure_logging()
        configure_logging()

        assert len(restore_root_logger.handlers) == 1
