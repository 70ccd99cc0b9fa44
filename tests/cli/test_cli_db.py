"""Tests for ``toolkit db``."""

from __future__ import annotations

import json
from pathlib import Path

from toolkit.cli import app


def test_version(runner):
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert result.output.startswith("toolkit ")


def test_setup_creates_database(runner, tmp_path):
    target = tmp_path / "nested" / "toolkit.db"

    result = runner.invoke(app, ["db", "setup", "--database-url", f"sqlite:{target}"])

    assert result.exit_code == 0, result.output
    assert "Database ready" in result.output
    assert "001_fcm_schedule.sql" in result.output
    assert target.exists()


def test_setup_twice_applies_nothing(runner, tmp_path):
    url = f"sqlite:{tmp_path / 'toolkit.db'}"
    runner.invoke(app, ["db", "setup", "--database-url", url])

    result = runner.invoke(app, ["db", "setup", "--database-url", url])

    assert result.exit_code == 0
    assert "001_fcm_schedule.sql" not in result.output


def test_setup_reads_database_url_env(runner, tmp_path):
    target = tmp_path / "env.db"
    result = runner.invoke(app, ["db", "setup"], env={"DATABASE_URL": f"sqlite:{target}"})
    assert result.exit_code == 0, result.output
    assert Path(target).exists()


def test_setup_rejects_other_backends(runner):
    result = runner.invoke(app, ["db", "setup", "--database-url", "postgres://db/toolkit"])
    assert result.exit_code == 1


def test_status_json(runner, db_url):
    result = runner.invoke(app, ["db", "status", "--database-url", db_url, "--json"])

    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert [m["filename"] for m in data["applied"]] == ["001_fcm_schedule.sql"]
    assert data["pending"] == []
