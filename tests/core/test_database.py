"""Tests for database URL handling and schema setup."""

from __future__ import annotations

import pytest

from toolkit.core.database import connect, setup_database, sqlite_path
from toolkit.core.errors import ConfigError, DatabaseError
from toolkit.core.migrations import MigrationRunner


class TestSqlitePath:
    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("sqlite:toolkit.db", "toolkit.db"),
            ("sqlite:db/toolkit.db", "db/toolkit.db"),
            ("sqlite://toolkit.db", "toolkit.db"),
            ("sqlite:///toolkit.db", "toolkit.db"),
            ("sqlite:////abs/toolkit.db", "/abs/toolkit.db"),
            ("sqlite:toolkit.db?mode=rwc", "toolkit.db"),
            ("sqlite::memory:", ":memory:"),
            ("plain/path.db", "plain/path.db"),
        ],
    )
    def test_strips_scheme(self, url, expected):
        assert sqlite_path(url) == expected

    def test_empty_url_rejected(self):
        with pytest.raises(ConfigError, match="DATABASE_URL must be set"):
            sqlite_path("  ")

    def test_other_schemes_rejected(self):
        with pytest.raises(ConfigError, match="only sqlite"):
            sqlite_path("postgresql://localhost/toolkit")

    def test_scheme_without_path_rejected(self):
        with pytest.raises(ConfigError):
            sqlite_path("sqlite:")


class TestSetupDatabase:
    def test_creates_file_and_parent_directory(self, tmp_path):
        target = tmp_path / "nested" / "dir" / "toolkit.db"
        result = setup_database(f"sqlite:{target}")

        assert target.exists()
        assert result.ok
        assert result.applied == ["001_fcm_schedule.sql"]

    def test_second_run_skips_applied(self, tmp_path):
        url = f"sqlite:{tmp_path / 'toolkit.db'}"
        setup_database(url)
        result = setup_database(url)

        assert result.applied == []
        assert result.skipped == ["001_fcm_schedule.sql"]

    def test_schema_has_fcm_schedule_table(self, conn):
        conn.execute("SELECT name FROM sqlite_master WHERE type = 'table' AND name = 'fcm_schedule'")
        assert conn.fetchone() is not None

    def test_failing_migration_raises_config_error(self, tmp_path):
        schema = tmp_path / "schema"
        schema.mkdir()
        (schema / "001_ok.sql").write_text("CREATE TABLE a (id INTEGER);")
        (schema / "002_bad.sql").write_text("CREATE TABLE oops (;")
        (schema / "003_later.sql").write_text("CREATE TABLE c (id INTEGER);")

        with pytest.raises(ConfigError, match="002_bad.sql"):
            setup_database(f"sqlite:{tmp_path / 'x.db'}", schema)


class TestMigrationRunner:
    def test_pending_then_applied(self, tmp_path):
        with connect(f"sqlite:{tmp_path / 'm.db'}") as conn:
            runner = MigrationRunner(conn)
            assert runner.get_pending() == ["001_fcm_schedule.sql"]

            runner.apply_pending()

            assert runner.get_pending() == []
            [record] = runner.get_applied()
            assert record.filename == "001_fcm_schedule.sql"
            assert len(record.checksum) == 64

    def test_failed_file_is_rolled_back(self, tmp_path):
        schema = tmp_path / "schema"
        schema.mkdir()
        (schema / "001_half.sql").write_text("CREATE TABLE half_done (id INTEGER);\nNOT SQL;")
        (schema / "002_good.sql").write_text("CREATE TABLE g (id INTEGER);")

        with connect(f"sqlite:{tmp_path / 'm.db'}") as conn:
            runner = MigrationRunner(conn, schema)
            result = runner.apply_pending()

            assert not result.ok
            assert "001_half.sql" in result.errors
            assert result.applied == []
            assert runner.get_pending() == ["001_half.sql", "002_good.sql"]
            conn.execute("SELECT name FROM sqlite_master WHERE name = 'half_done'")
            assert conn.fetchone() is None

    def test_record_commits_with_the_migration(self, tmp_path):
        schema = tmp_path / "schema"
        schema.mkdir()
        # the file succeeds but its _migrations row cannot be written
        (schema / "001_sneaky.sql").write_text("CREATE TABLE sneaky (id INTEGER);\nDROP TABLE _migrations;")

        with connect(f"sqlite:{tmp_path / 'm.db'}") as conn:
            runner = MigrationRunner(conn, schema)
            result = runner.apply_pending()

            assert "001_sneaky.sql" in result.errors
            assert runner.get_pending() == ["001_sneaky.sql"]
            conn.execute("SELECT name FROM sqlite_master WHERE name = 'sneaky'")
            assert conn.fetchone() is None

    def test_filename_with_quote_is_recorded(self, tmp_path):
        schema = tmp_path / "schema"
        schema.mkdir()
        (schema / "001_o'brien.sql").write_text("CREATE TABLE o (id INTEGER)")

        with connect(f"sqlite:{tmp_path / 'm.db'}") as conn:
            runner = MigrationRunner(conn, schema)
            assert runner.apply_pending().applied == ["001_o'brien.sql"]
            assert [r.filename for r in runner.get_applied()] == ["001_o'brien.sql"]

    def test_edited_migration_reported_as_modified(self, tmp_path):
        schema = tmp_path / "schema"
        schema.mkdir()
        migration = schema / "001_a.sql"
        migration.write_text("CREATE TABLE a (id INTEGER);")
        url = f"sqlite:{tmp_path / 'm.db'}"
        setup_database(url, schema)

        migration.write_text("CREATE TABLE a (id INTEGER, extra TEXT);")
        result = setup_database(url, schema)

        assert result.skipped == ["001_a.sql"]
        assert result.modified == ["001_a.sql"]


def test_connect_unopenable_path_raises_database_error(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("")

    with pytest.raises(DatabaseError, match="Cannot open database"):
        connect(f"sqlite:{blocker / 'toolkit.db'}")


def test_file_database_uses_wal(conn):
    conn.execute("PRAGMA journal_mode")
    assert conn.fetchone()[0] == "wal"
