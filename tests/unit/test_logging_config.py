"""Tests for structured logging configuration."""

import json
import logging
import re
from collections.abc import Iterator
from io import StringIO

import pytest
import structlog

from edu_master.logging_config import (
    MAX_VALUE_CHARS,
    _redact_sensitive_keys,
    configure_logging,
)


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    """Reset structlog state after each test."""
    yield
    structlog.reset_defaults()
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(logging.WARNING)


def _capture_log_output(environment: str, log_level: str = "DEBUG", **event: str) -> str:
    """Configure logging, emit a message, return captured output."""
    configure_logging(environment=environment, log_level=log_level)

    stream = StringIO()
    root = logging.getLogger()
    if not root.handlers or not isinstance(root.handlers[0], logging.StreamHandler):
        raise RuntimeError("Expected configure_logging to set up a StreamHandler")

    original_stream = root.handlers[0].stream
    root.handlers[0].stream = stream

    logger = structlog.get_logger()
    logger.info("test_event", **(event or {"key": "value"}))

    root.handlers[0].stream = original_stream
    return stream.getvalue()


class TestConfigureLogging:
    def test_configure_production_json(self) -> None:
        output = _capture_log_output("production")
        parsed = json.loads(output)
        assert parsed["event"] == "test_event"
        assert parsed["key"] == "value"
        assert parsed["level"] == "info"

    def test_configure_development_console(self) -> None:
        output = _capture_log_output("development")
        plain = re.sub(r"\x1b\[[0-9;]*m", "", output)
        assert "test_event" in plain
        assert "key=value" in plain

    def test_configure_sets_log_level(self) -> None:
        configure_logging(log_level="WARNING")
        assert logging.getLogger().level == logging.WARNING

    def test_configure_includes_timestamp(self) -> None:
        parsed = json.loads(_capture_log_output("production"))
        assert "T" in parsed["timestamp"]

    def test_api_key_redacted(self) -> None:
        parsed = json.loads(_capture_log_output("production", api_key="sk-live-123"))
        assert parsed["api_key"] == "***REDACTED***"

    def test_provider_key_suffix_redacted(self) -> None:
        parsed = json.loads(_capture_log_output("production", gemini_api_key="AIza-1"))
        assert parsed["gemini_api_key"] == "***REDACTED***"

    def test_nested_secret_redacted(self) -> None:
        configure_logging(environment="production")
        event = {"headers": {"authorization": "Bearer x", "accept": "json"}}
        scrubbed = _redact_sensitive_keys(logging.getLogger(), "info", event)
        assert scrubbed["headers"] == {"authorization": "***REDACTED***", "accept": "json"}

    def test_long_text_truncated(self) -> None:
        parsed = json.loads(_capture_log_output("production", output="가" * 600))
        assert parsed["output"].startswith("가" * MAX_VALUE_CHARS)
        assert parsed["output"].endswith("... (+100)")

    def test_handler_writes_to_stderr(self) -> None:
        import sys

        configure_logging()
        handler = logging.getLogger().handlers[0]
        assert isinstance(handler, logging.StreamHandler)
        assert handler.stream is sys.stderr
