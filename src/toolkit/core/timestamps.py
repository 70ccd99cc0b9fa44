"""
UTC timestamp utilities.

Schedules store their timestamps as ISO-8601 strings in UTC with a
fixed second precision (``2026-01-01T09:00:00+00:00``), so SQLite can
compare them lexicographically in ``WHERE next_execution <= ?``.
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Get current UTC datetime, truncated to whole seconds."""
    return datetime.now(UTC).replace(microsecond=0)


def to_iso8601(dt: datetime | None) -> str | None:
    """Convert datetime to a normalised UTC ISO 8601 string.

    Naive datetimes are assumed to already be UTC.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC).replace(microsecond=0).isoformat()


def from_iso8601(s: str | None) -> datetime | None:
    """Parse ISO 8601 string to an aware UTC datetime."""
    if s is None:
        return None
    dt = datetime.fromisoformat(s)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)
