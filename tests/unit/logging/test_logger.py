# tests/unit/logging/test_logger.py — v1
"""Tests for logging/logger.py — formatters and setup."""

from __future__ import annotations

import json
import logging

from swiftpatterns.logging.context import log_context
from swiftpatterns.logging.logger import JsonFormatter, TextFormatter, setup_logging


def _record(msg: str = "Hello", level: int = logging.INFO) -> logging.LogRecord:
    return logging.LogRecord(
        name="test", level=level, pathname="", lineno=0,
        msg=msg, args=(), exc_info=None,
    )


class TestJsonFormatter:
    def test_format_basic(self):
        parsed = json.loads(JsonFormatter().format(_record()))
        assert parsed["level"] == "INFO"
        assert parsed["message"] == "Hello"
        assert "timestamp" in parsed
        assert "context" not in parsed

    def test_format_with_context(self):
        with log_context(tool="search_swift_content", query="async await"):
            parsed = json.loads(JsonFormatter().format(_record()))
        assert parsed["context"] == {"tool": "search_swift_content", "query": "async await"}

    def test_extra_data(self):
        record = _record()
        record.data = {"hits": 3}
        assert json.loads(JsonFormatter().format(record))["data"] == {"hits": 3}


class TestTextFormatter:
    def test_format_basic(self):
        output = TextFormatter().format(_record("Hello text"))
        assert "INFO" in output
        assert "Hello text" in output

    def test_format_with_context(self):
        with log_context(tool="get_swift_pattern", source="sundell"):
            output = TextFormatter().format(_record())
        assert "[get_swift_pattern]" in output
        assert "(sundell)" in output


class TestSetup:
    def teardown_method(self):
        logging.getLogger("swiftpatterns").handlers.clear()

    def test_setup_replaces_handlers(self):
        setup_logging(level="DEBUG", log_format="json")
        setup_logging(level="WARNING", log_format="text")
        root = logging.getLogger("swiftpatterns")
        assert root.level == logging.WARNING
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, TextFormatter)

    def test_setup_with_file(self, tmp_path):
        log_file = tmp_path / "logs" / "app.log"
        setup_logging(level="INFO", log_format="json", log_file=str(log_file))
        logging.getLogger("swiftpatterns.test").info("written")
        for handler in logging.getLogger("swiftpatterns").handlers:
            handler.flush()
        assert "written" in log_file.read_text(encoding="utf-8")
