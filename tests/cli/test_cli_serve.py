"""Tests for ``toolkit serve``."""

from __future__ import annotations

import json
from unittest.mock import patch

from toolkit.cli import app


class TestServeStart:
    def test_defaults_come_from_settings(self, runner, monkeypatch):
        monkeypatch.setenv("TOOLKIT_PORT", "8123")
        with patch("toolkit.cli.serve.uvicorn.run") as run:
            result = runner.invoke(app, ["serve", "start"])
        assert result.exit_code == 0, result.output
        kwargs = run.call_args.kwargs
        assert run.call_args.args == ("toolkit.api:create_app",)
        assert kwargs["factory"] is True
        assert kwargs["port"] == 8123
        assert kwargs["workers"] == 1

    def test_flags_override_settings(self, runner):
        with patch("toolkit.cli.serve.uvicorn.run") as run:
            result = runner.invoke(app, ["serve", "start", "--host", "127.0.0.1", "--port", "9000"])
        assert result.exit_code == 0, result.output
        assert run.call_args.kwargs["host"] == "127.0.0.1"
        assert run.call_args.kwargs["port"] == 9000


class TestServeConfig:
    def test_json_reflects_environment(self, runner, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "sqlite:/tmp/other.db")
        monkeypatch.setenv("CHROME_DRIVER_ENDPOINT", "http://chrome:4444/wd/hub")
        result = runner.invoke(app, ["serve", "config", "--json"])
        assert result.exit_code == 0, result.output
        values = json.loads(result.stdout)
        assert values["database_url"] == "sqlite:/tmp/other.db"
        assert values["chrome_driver_endpoint"] == "http://chrome:4444/wd/hub"
        assert values["port"] == 3000
