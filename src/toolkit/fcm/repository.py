"""Persistence for FCM schedules (the ``fcm_schedule`` table).

Every read and write that acts on behalf of a user is scoped by
``fb_user_id`` so one user can never see or modify another user's
schedules.  The dispatcher is the only caller of the unscoped
``list_due`` / ``mark_executed``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from toolkit.core.timestamps import to_iso8601

_COLUMNS = (
    "id, name, fb_user_id, push_token, fb_project_id, cron_pattern, payload, "
    "last_execution, next_execution, created_at, updated_at"
)


@dataclass
class FcmSchedule:
    """One row of ``fcm_schedule``, with ``payload`` decoded from JSON."""

    id: int
    name: str
    fb_user_id: str
    push_token: str
    fb_project_id: str
    cron_pattern: str
    payload: dict[str, Any]
    last_execution: str
    next_execution: str
    created_at: str
    updated_at: str

    @classmethod
    def from_row(cls, row: Any) -> FcmSchedule:
        payload = row["payload"]
        return cls(
            id=row["id"],
            name=row["name"],
            fb_user_id=row["fb_user_id"],
            push_token=row["push_token"],
            fb_project_id=row["fb_project_id"],
            cron_pattern=row["cron_pattern"],
            payload=json.loads(payload) if isinstance(payload, str) else dict(payload or {}),
            last_execution=row["last_execution"],
            next_execution=row["next_execution"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )


class FcmScheduleRepository:
    """SQL access to ``fcm_schedule``. Callers own commit/rollback."""

    def __init__(self, conn: Any) -> None:
        self._conn = conn

    def insert(
        self,
        *,
        name: str,
        fb_user_id: str,
        push_token: str,
        fb_project_id: str,
        cron_pattern: str,
        payload: dict[str, Any],
        next_execution: datetime,
        now: datetime,
    ) -> int:
        """Insert a schedule and return its id.

        ``last_execution`` starts at the creation time.
        """
        stamp = to_iso8601(now)
        self._conn.execute(
            """
            INSERT INTO fcm_schedule (
                name, fb_user_id, push_token, fb_project_id, cron_pattern, payload,
                last_execution, next_execution, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                name,
                fb_user_id,
                push_token,
                fb_project_id,
                cron_pattern,
                json.dumps(payload),
                stamp,
                to_iso8601(next_execution),
                stamp,
                stamp,
            ),
        )
        return int(self._conn.lastrowid)

    def get(self, schedule_id: int) -> FcmSchedule | None:
        self._conn.execute(f"SELECT {_COLUMNS} FROM fcm_schedule WHERE id = ?", (schedule_id,))
        row = self._conn.fetchone()
        return FcmSchedule.from_row(row) if row else None

    def get_for_user(self, schedule_id: int, fb_user_id: str) -> FcmSchedule | None:
        self._conn.execute(
            f"SELECT {_COLUMNS} FROM fcm_schedule WHERE id = ? AND fb_user_id = ?",
            (schedule_id, fb_user_id),
        )
        row = self._conn.fetchone()
        return FcmSchedule.from_row(row) if row else None

    def list_for_user(self, fb_user_id: str) -> list[FcmSchedule]:
        self._conn.execute(
            f"SELECT {_COLUMNS} FROM fcm_schedule WHERE fb_user_id = ? ORDER BY id",
            (fb_user_id,),
        )
        return [FcmSchedule.from_row(r) for r in self._conn.fetchall()]

    def list_all(self) -> list[FcmSchedule]:
        self._conn.execute(f"SELECT {_COLUMNS} FROM fcm_schedule ORDER BY id")
        return [FcmSchedule.from_row(r) for r in self._conn.fetchall()]

    def update_for_user(
        self,
        schedule_id: int,
        fb_user_id: str,
        *,
        name: str,
        push_token: str,
        cron_pattern: str,
        payload: dict[str, Any],
        next_execution: datetime,
        now: datetime,
    ) -> int:
        """Replace the editable fields; return the number of rows changed."""
        self._conn.execute(
            """
            UPDATE fcm_schedule
               SET name = ?, push_token = ?, cron_pattern = ?, payload = ?,
                   next_execution = ?, updated_at = ?
             WHERE id = ? AND fb_user_id = ?
            """,
            (
                name,
                push_token,
                cron_pattern,
                json.dumps(payload),
                to_iso8601(next_execution),
                to_iso8601(now),
                schedule_id,
                fb_user_id,
            ),
        )
        return self._conn.rowcount

    def delete_for_user(self, schedule_id: int, fb_user_id: str) -> int:
        self._conn.execute(
            "DELETE FROM fcm_schedule WHERE id = ? AND fb_user_id = ?",
            (schedule_id, fb_user_id),
        )
        return self._conn.rowcount

    # -- dispatcher ------------------------------------------------------

    def list_due(self, now: datetime, limit: int = 500) -> list[FcmSchedule]:
        """Schedules whose ``next_execution`` is at or before *now*."""
        self._conn.execute(
            f"""
            SELECT {_COLUMNS} FROM fcm_schedule
             WHERE next_execution <= ?
             ORDER BY next_execution, id
             LIMIT ?
            """,
            (to_iso8601(now), limit),
        )
        return [FcmSchedule.from_row(r) for r in self._conn.fetchall()]

    def mark_executed(self, schedule_id: int, *, executed_at: datetime, next_execution: datetime) -> None:
        self._conn.execute(
            "UPDATE fcm_schedule SET last_execution = ?, next_execution = ? WHERE id = ?",
            (to_iso8601(executed_at), to_iso8601(next_execution), schedule_id),
        )
