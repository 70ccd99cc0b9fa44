"""Database access.

toolkit keeps its state in a single SQLite file addressed by a
``sqlite:`` URL, the same form the CI gate and the ``.env`` file use::

    DATABASE_URL=sqlite:toolkit.db           # relative file
    DATABASE_URL=sqlite:db/toolkit.db        # the compose volume
    DATABASE_URL=sqlite:///abs/path/x.db     # SQLAlchemy-style, also accepted
    DATABASE_URL=sqlite::memory:             # tests

The API threadpool and the scheduler thread each open short-lived
connections to the same file, so file databases run in WAL mode with a
busy timeout rather than failing on a concurrent writer.

Usage::

    from toolkit.core.database import connect, setup_database

    setup_database("sqlite:toolkit.db")   # create + migrate
    conn = connect("sqlite:toolkit.db")
"""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Any

from toolkit.core.errors import ConfigError, DatabaseError
from toolkit.core.logging import get_logger
from toolkit.core.migrations import MigrationResult, MigrationRunner

logger = get_logger(__name__)

_MEMORY = ":memory:"
BUSY_TIMEOUT_SECONDS = 5.0


class SqliteConnection:
    """A ``sqlite3.Connection`` with one cursor that repositories drive.

    ``execute()`` runs on the shared cursor, then ``fetchone()`` /
    ``fetchall()`` / ``lastrowid`` / ``rowcount`` read its outcome.
    Rows are :class:`sqlite3.Row`, addressable by column name.
    """

    def __init__(self, path: str) -> None:
        # FastAPI may open and close a request's connection on different threadpool workers
        self._conn = sqlite3.connect(path, timeout=BUSY_TIMEOUT_SECONDS, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        if path != _MEMORY:
            self._conn.execute("PRAGMA journal_mode = WAL")
        self._cursor = self._conn.cursor()
        self.path = path

    def execute(self, sql: str, params: tuple = ()) -> None:
        self._cursor.execute(sql, params)

    def executescript(self, sql: str) -> None:
        self._cursor.executescript(sql)

    def fetchone(self) -> Any:
        return self._cursor.fetchone()

    def fetchall(self) -> list[Any]:
        return self._cursor.fetchall()

    @property
    def lastrowid(self) -> int | None:
        return self._cursor.lastrowid

    @property
    def rowcount(self) -> int:
        return self._cursor.rowcount

    def commit(self) -> None:
        self._conn.commit()

    def rollback(self) -> None:
        self._conn.rollback()

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> SqliteConnection:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"SqliteConnection({self.path!r})"


def sqlite_path(url: str) -> str:
    """Strip the ``sqlite:`` scheme from *url* and return the file path.

    ``sqlite:x.db`` and ``sqlite://x.db`` are relative; ``sqlite:///x.db``
    follows the SQLAlchemy convention (relative after three slashes,
    absolute after four). Bare paths are returned unchanged.
    """
    if not url or not url.strip():
        raise ConfigError("DATABASE_URL must be set")

    url = url.strip()
    if url.startswith("sqlite:"):
        target = url[len("sqlite:"):]
        if target.startswith("///"):
            target = target[3:]
        elif target.startswith("//"):
            target = target[2:]
    elif "://" in url:
        raise ConfigError(f"Unsupported database URL {url!r}: only sqlite is supported")
    else:
        target = url

    target = target.split("?", 1)[0]
    if not target:
        raise ConfigError(f"Database URL {url!r} has no file path")
    return target


def connect(url: str) -> SqliteConnection:
    """Open a connection, creating the database file if missing.

    Raises:
        ConfigError: *url* is not a usable sqlite URL.
        DatabaseError: the file or its directory cannot be opened.
    """
    target = sqlite_path(url)
    if target == _MEMORY:
        return SqliteConnection(_MEMORY)

    path = Path(target)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        return SqliteConnection(str(path))
    except (OSError, sqlite3.Error) as exc:
        raise DatabaseError(f"Cannot open database {target!r}: {exc}", cause=exc) from exc


def migrate(conn: SqliteConnection, schema_dir: Path | str | None = None) -> MigrationResult:
    """Apply pending schema migrations on an open connection."""
    result = MigrationRunner(conn, schema_dir).apply_pending()
    if result.errors:
        logger.error("database_migration_failed", errors=result.errors)
    return result


def setup_database(url: str, schema_dir: Path | str | None = None) -> MigrationResult:
    """Create the database (if missing) and run all pending migrations.

    Raises:
        ConfigError: when a migration fails; the database is left at the
            last successfully applied migration.
    """
    with connect(url) as conn:
        result = migrate(conn, schema_dir)

    if result.errors:
        name, error = next(iter(result.errors.items()))
        raise ConfigError(f"Migration {name} failed: {error}")

    logger.info(
        "database_ready",
        database=sqlite_path(url),
        applied=len(result.applied),
        skipped=len(result.skipped),
        modified=result.modified,
    )
    return result
