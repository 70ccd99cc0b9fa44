"""Delivery of due FCM schedules.

On every scheduler tick :meth:`FcmDispatcher.run_due`:

1. opens a connection and selects schedules with ``next_execution <= now``
2. sends each one through :class:`~toolkit.fcm.messaging.FcmClient`
3. sets ``last_execution = now`` and ``next_execution`` to the next cron
   fire after ``now``, whether the send succeeded or not

Advancing failed schedules keeps a revoked push token or a deleted
service account from being retried on every tick; the failure is
logged and counted instead.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

from toolkit.core.errors import CronError, ToolkitError, is_retryable
from toolkit.core.logging import LogContext, get_logger
from toolkit.core.timestamps import utc_now
from toolkit.fcm.cron import decode_cron
from toolkit.fcm.messaging import FcmClient
from toolkit.fcm.repository import FcmSchedule, FcmScheduleRepository

logger = get_logger(__name__)

ConnectionFactory = Callable[[], Any]


@dataclass
class DispatchReport:
    """Outcome of one dispatcher pass."""

    due: int = 0
    sent: int = 0
    failed: int = 0
    errors: dict[int, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"due": self.due, "sent": self.sent, "failed": self.failed, "errors": self.errors}


class FcmDispatcher:
    """Sends due schedules and advances them.

    Args:
        connect: Zero-argument callable returning a new database connection.
        client: FCM sender.
        batch_size: Max schedules handled per pass.
    """

    def __init__(self, connect: ConnectionFactory, client: FcmClient, *, batch_size: int = 500) -> None:
        self._connect = connect
        self._client = client
        self._batch_size = batch_size

    async def tick(self) -> None:
        """Scheduler callback: one pass at the current time."""
        report = await self.run_due()
        if report.due:
            logger.info("fcm_dispatch_complete", **report.to_dict())

    async def run_due(self, now: datetime | None = None) -> DispatchReport:
        now = now or utc_now()
        report = DispatchReport()
        conn = self._connect()
        try:
            repo = FcmScheduleRepository(conn)
            due = repo.list_due(now, limit=self._batch_size)
            report.due = len(due)

            for schedule in due:
                with LogContext(schedule_id=schedule.id, project=schedule.fb_project_id):
                    error = await self._send(schedule)
                    if error is None:
                        report.sent += 1
                    else:
                        report.failed += 1
                        report.errors[schedule.id] = error
                    self._advance(repo, schedule, now)
                conn.commit()
        finally:
            conn.close()
        return report

    async def _send(self, schedule: FcmSchedule) -> str | None:
        try:
            await self._client.send(schedule.fb_project_id, schedule.push_token, schedule.payload)
        except Exception as exc:  # noqa: BLE001 - logged and counted; the schedule still advances
            if isinstance(exc, ToolkitError):
                details = exc.to_dict()
            else:
                details = {"error_type": type(exc).__name__, "message": f"{type(exc).__name__}: {exc}"}
            details["retryable"] = is_retryable(exc)
            logger.warning("fcm_send_failed", push_token=schedule.push_token, **details)
            return details["message"]
        logger.info("fcm_schedule_sent", name=schedule.name, push_token=schedule.push_token)
        return None

    def _advance(self, repo: FcmScheduleRepository, schedule: FcmSchedule, now: datetime) -> None:
        try:
            next_execution = decode_cron(schedule.cron_pattern, now)
        except CronError as exc:
            # Stored patterns are validated on write; keep the row but push it far out.
            logger.error("fcm_schedule_bad_cron", error=exc.message)
            next_execution = now + timedelta(days=365 * 100)
        repo.mark_executed(schedule.id, executed_at=now, next_execution=next_execution)
