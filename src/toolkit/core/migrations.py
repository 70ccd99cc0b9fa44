"""Schema migrations.

Numbered ``.sql`` files in ``toolkit/core/schema/`` are applied in
filename order.  Each file runs inside its own transaction and is
recorded in ``_migrations`` with a SHA-256 of its contents, so that an
already-applied file edited afterwards shows up as ``modified`` instead
of being silently ignored.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from toolkit.core.logging import get_logger
from toolkit.core.timestamps import to_iso8601, utc_now

logger = get_logger(__name__)

SCHEMA_DIR = Path(__file__).resolve().parent / "schema"

_CREATE_TABLE = """
CREATE TABLE IF NOT EXISTS _migrations (
    filename   TEXT PRIMARY KEY,
    checksum   TEXT NOT NULL,
    applied_at TEXT NOT NULL
)
"""


@dataclass(frozen=True)
class MigrationRecord:
    filename: str
    checksum: str
    applied_at: str


@dataclass
class MigrationResult:
    """What one :meth:`MigrationRunner.apply_pending` call did."""

    applied: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    modified: list[str] = field(default_factory=list)
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors


def _checksum(sql: str) -> str:
    return hashlib.sha256(sql.encode("utf-8")).hexdigest()


def _literal(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


class MigrationRunner:
    """Applies the ``.sql`` files of *schema_dir* to *conn*.

    Args:
        conn: An open :class:`~toolkit.core.database.SqliteConnection`.
        schema_dir: Defaults to the packaged ``schema/`` directory.
    """

    def __init__(self, conn: Any, schema_dir: Path | str | None = None) -> None:
        self._conn = conn
        self._schema_dir = Path(schema_dir) if schema_dir else SCHEMA_DIR
        self._conn.execute(_CREATE_TABLE)
        self._conn.commit()

    def files(self) -> list[Path]:
        if not self._schema_dir.is_dir():
            return []
        return sorted(self._schema_dir.glob("*.sql"))

    def get_applied(self) -> list[MigrationRecord]:
        self._conn.execute("SELECT filename, checksum, applied_at FROM _migrations ORDER BY filename")
        return [MigrationRecord(row[0], row[1], row[2]) for row in self._conn.fetchall()]

    def get_pending(self) -> list[str]:
        applied = {record.filename for record in self.get_applied()}
        return [path.name for path in self.files() if path.name not in applied]

    def apply_pending(self) -> MigrationResult:
        """Apply every pending file; stop at the first one that fails.

        A failed file is rolled back completely and it and every later
        file stay pending.
        """
        result = MigrationResult()
        applied = {record.filename: record.checksum for record in self.get_applied()}

        for path in self.files():
            sql = path.read_text(encoding="utf-8")
            checksum = _checksum(sql)

            if path.name in applied:
                result.skipped.append(path.name)
                if applied[path.name] != checksum:
                    result.modified.append(path.name)
                    logger.warning("migration_modified_after_apply", migration=path.name)
                continue

            record = (
                "INSERT INTO _migrations (filename, checksum, applied_at) VALUES "
                f"({_literal(path.name)}, {_literal(checksum)}, {_literal(to_iso8601(utc_now()))});"
            )
            try:
                # the file and its _migrations row commit together or not at all
                self._conn.executescript(f"BEGIN;\n{sql}\n;\n{record}\nCOMMIT;")
            except Exception as exc:  # noqa: BLE001 - reported through MigrationResult
                self._conn.rollback()
                result.errors[path.name] = str(exc)
                logger.error("migration_failed", migration=path.name, error=str(exc))
                break

            result.applied.append(path.name)
            logger.info("migration_applied", migration=path.name)

        return result
