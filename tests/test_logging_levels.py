"""Tests for the logging level system and formatters."""
from __future__ import annotations

import json
import logging

import pytest


@pytest.fixture
def restore_level():
    from tts_convert.core.logging import get_level
    from tts_convert.core.logging.context import set_level

    saved = get_level()
    yield set_level
    set_level(saved)


def _record(msg="delivered", tag="SUCCESS", **extra):
    record = logging.LogRecord("tts-convert.test", logging.INFO, __file__, 1, msg, None, None)
    record.tag = tag
    record.request_id = extra.pop("request_id", "-")
    record.event = extra.pop("event", None)
    record.seconds = extra.pop("seconds", None)
    record.numeric_level = 2
    record.extra_data = extra or None
    return record


class TestLogLevelEnum:
    """Test LogLevel enum values."""

    def test_level_enum_values(self):
        from tts_convert.core.logging import LogLevel

        assert LogLevel.MINIMAL == 1
        assert LogLevel.NORMAL == 2
        assert LogLevel.VERBOSE == 3
        assert LogLevel.DEBUG == 4

    def test_level_map(self):
        from tts_convert.core.logging import LEVEL_MAP, LogLevel

        assert LEVEL_MAP[LogLevel.MINIMAL] == logging.WARNING
        assert LEVEL_MAP[LogLevel.NORMAL] == logging.INFO


class TestLevelCoercion:
    """Test coerce_level from various input types."""

    def test_from_int(self):
        from tts_convert.core.logging import LogLevel, coerce_level

        assert coerce_level(1) == LogLevel.MINIMAL
        assert coerce_level(4) == LogLevel.DEBUG

    def test_from_names(self):
        from tts_convert.core.logging import LogLevel, coerce_level

        assert coerce_level("verbose") == LogLevel.VERBOSE
        assert coerce_level("INFO") == LogLevel.NORMAL
        assert coerce_level("WARNING") == LogLevel.MINIMAL

    def test_from_numeric_string(self):
        from tts_convert.core.logging import LogLevel, coerce_level

        assert coerce_level("3") == LogLevel.VERBOSE

    def test_from_stdlib_int(self):
        from tts_convert.core.logging import LogLevel, coerce_level

        assert coerce_level(logging.ERROR) == LogLevel.MINIMAL
        assert coerce_level(logging.INFO) == LogLevel.NORMAL

    def test_fallbacks(self):
        from tts_convert.core.logging import LogLevel, coerce_level

        assert coerce_level("nonsense") == LogLevel.NORMAL
        assert coerce_level(None) == LogLevel.NORMAL
        assert coerce_level(True) == LogLevel.NORMAL


class TestLevelFiltering:
    """Helpers below the current level emit nothing."""

    def test_verbose_suppressed_at_normal(self, restore_level, caplog):
        from tts_convert.core.logging import LogLevel, get_logger, info, verbose

        restore_level(LogLevel.NORMAL)
        log = get_logger("tts-convert.test")
        with caplog.at_level(logging.DEBUG - 5):
            verbose(log, "hidden_stage")
            info(log, "shown_request")
        messages = [r.getMessage() for r in caplog.records]
        assert "shown_request" in messages
        assert "hidden_stage" not in messages

    def test_fail_shown_at_minimal(self, restore_level, caplog):
        from tts_convert.core.logging import LogLevel, fail, get_logger, success

        restore_level(LogLevel.MINIMAL)
        log = get_logger("tts-convert.test")
        with caplog.at_level(logging.DEBUG - 5):
            fail(log, "provider_failed", error="timeout")
            success(log, "delivered")
        tags = {r.getMessage(): r.tag for r in caplog.records}
        assert tags.get("provider_failed") == "FAIL"
        assert "delivered" not in tags

    def test_request_id_attached(self, restore_level, caplog):
        from tts_convert.core.logging import LogLevel, get_logger, info, set_request_id

        restore_level(LogLevel.NORMAL)
        set_request_id("abc123")
        try:
            with caplog.at_level(logging.INFO):
                info(get_logger("tts-convert.test"), "request", chars=5)
        finally:
            set_request_id("-")
        record = [r for r in caplog.records if r.getMessage() == "request"][0]
        assert record.request_id == "abc123"
        assert record.extra_data == {"chars": 5}


class TestFormatters:
    """JSONL and console formatters."""

    def test_jsonl_fields(self):
        from tts_convert.core.logging import JsonlFormatter

        line = JsonlFormatter().format(_record(request_id="rid1", seconds=1.25, bytes=417))
        data = json.loads(line)
        assert data["tag"] == "SUCCESS"
        assert data["message"] == "delivered"
        assert data["request_id"] == "rid1"
        assert data["seconds"] == 1.25
        assert data["extra"] == {"bytes": 417}
        assert data["level"] == 2

    def test_jsonl_omits_empty_fields(self):
        from tts_convert.core.logging import JsonlFormatter

        data = json.loads(JsonlFormatter().format(_record()))
        assert "event" not in data
        assert "extra" not in data

    def test_console_plain(self):
        from tts_convert.core.logging import ColoredConsoleFormatter

        line = ColoredConsoleFormatter(use_colors=False).format(
            _record(request_id="rid1", seconds=0.1234, status=200)
        )
        assert "[SUCCESS]" in line
        assert "(rid1)" in line
        assert "delivered" in line
        assert "0.123s" in line
        assert "status=200" in line
        assert "\033[" not in line

    def test_console_colored(self):
        from tts_convert.core.logging import ColoredConsoleFormatter, Colors

        line = ColoredConsoleFormatter(use_colors=True).format(_record(status=500))
        assert Colors.RED in line
        assert Colors.RESET in line

    def test_no_color_env(self, monkeypatch):
        from tts_convert.core.logging import supports_color

        monkeypatch.setenv("TTS_CONVERT_NO_COLOR", "1")
        assert supports_color() is False
