"""Tests for structured logging helpers."""

from __future__ import annotations

import json

import structlog

from toolkit.core.logging import (
    LogContext,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    mask_secret,
)


class TestConfigureLogging:
    def test_json_output_carries_service_and_level(self, capsys):
        configure_logging(level="INFO", json_format=True, service="toolkit-test")
        get_logger("tests.logging").info("hello", answer=42)

        line = capsys.readouterr().out.strip().splitlines()[-1]
        record = json.loads(line)
        assert record["event"] == "hello"
        assert record["answer"] == 42
        assert record["level"] == "info"
        assert record["service"] == "toolkit-test"
        assert record["logger_name"] == "tests.logging"
        assert "timestamp" in record

    def test_level_filtering(self, capsys):
        configure_logging(level="WARNING", json_format=True)
        get_logger("tests.logging").info("quiet")

        assert "quiet" not in capsys.readouterr().out

    def test_to_stderr_keeps_stdout_clean(self, capsys):
        configure_logging(level="INFO", json_format=True, to_stderr=True)
        get_logger("tests.logging").warning("to_stderr")

        captured = capsys.readouterr()
        assert captured.out == ""
        assert json.loads(captured.err.strip().splitlines()[-1])["event"] == "to_stderr"


class TestContext:
    def setup_method(self):
        clear_context()

    def teardown_method(self):
        clear_context()

    def test_log_context_binds_and_unbinds(self):
        with LogContext(schedule_id=7):
            assert structlog.contextvars.get_contextvars()["schedule_id"] == 7
        assert "schedule_id" not in structlog.contextvars.get_contextvars()

    def test_bind_context(self):
        bind_context(request_id="abc")
        assert structlog.contextvars.get_contextvars()["request_id"] == "abc"


class TestRedaction:
    def test_mask_secret_keeps_tail(self):
        assert mask_secret("abcdefghijklmnop") == "***klmnop"

    def test_mask_secret_hides_short_values(self):
        assert mask_secret("short") == "***"

    def test_push_token_is_masked_in_output(self, capsys):
        configure_logging(level="INFO", json_format=True)
        token = "device-token-0123456789"
        get_logger("tests.logging").info("fcm_sent", push_token=token, schedule_id=3)

        line = capsys.readouterr().out.strip().splitlines()[-1]
        record = json.loads(line)
        assert record["push_token"] == "***456789"
        assert record["schedule_id"] == 3
        assert token not in line


class TestGetLogger:
    def test_logger_created_before_configure_uses_later_config(self, capsys):
        early = get_logger("tests.early")
        configure_logging(level="INFO", json_format=True, service="late-config")
        early.info("after_configure")

        record = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
        assert record["logger_name"] == "tests.early"
        assert record["service"] == "late-config"
