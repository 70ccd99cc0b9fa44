"""Cron pattern evaluation for FCM schedules.

Two pattern shapes are accepted:

- 5 fields, minute precision: ``"30 9 * * mon-fri"``
- 6 fields with a leading seconds field: ``"0 30 9 * * mon-fri"``

Evaluation uses croniter in UTC.  The next fire time is always strictly
after the reference instant, so a schedule that just fired never fires
twice for the same slot.
"""

from __future__ import annotations

from datetime import UTC, datetime

from croniter import croniter

from toolkit.core.errors import CronError
from toolkit.core.timestamps import utc_now

_FIELD_COUNTS = (5, 6)


def _fields(pattern: str) -> list[str]:
    if pattern is None or not pattern.strip():
        raise CronError("Cron pattern must not be empty")
    fields = pattern.split()
    if len(fields) not in _FIELD_COUNTS:
        raise CronError(
            f"Invalid cron pattern {pattern!r}: expected 5 fields "
            f"(min hour day month weekday) or 6 with leading seconds, got {len(fields)}"
        )
    return fields


def _iterator(pattern: str, after: datetime) -> croniter:
    fields = _fields(pattern)
    expression = " ".join(fields)
    with_seconds = len(fields) == 6
    try:
        return croniter(expression, after, second_at_beginning=with_seconds)
    except (ValueError, KeyError) as exc:
        raise CronError(f"Invalid cron pattern {pattern!r}: {exc}", cause=exc) from exc


def _reference(after: datetime | None) -> datetime:
    if after is None:
        return utc_now()
    if after.tzinfo is None:
        return after.replace(tzinfo=UTC)
    return after.astimezone(UTC)


def decode_cron(pattern: str, after: datetime | None = None) -> datetime:
    """Validate *pattern* and return its next fire time after *after*.

    Args:
        pattern: 5- or 6-field cron pattern.
        after: Reference instant (default: now). Naive values are UTC.

    Returns:
        Aware UTC datetime strictly later than *after*.

    Raises:
        CronError: The pattern is empty, has the wrong number of fields,
            or cannot be parsed.
    """
    it = _iterator(pattern, _reference(after))
    try:
        next_run = it.get_next(datetime)
    except (ValueError, KeyError) as exc:
        raise CronError(f"Cron pattern {pattern!r} never fires: {exc}", cause=exc) from exc
    return next_run.astimezone(UTC)


def upcoming(pattern: str, count: int = 5, after: datetime | None = None) -> list[datetime]:
    """Return the next *count* fire times of *pattern*."""
    if count < 1:
        return []
    it = _iterator(pattern, _reference(after))
    try:
        return [it.get_next(datetime).astimezone(UTC) for _ in range(count)]
    except (ValueError, KeyError) as exc:
        raise CronError(f"Cron pattern {pattern!r} never fires: {exc}", cause=exc) from exc

