"""Tests for UTC timestamp helpers."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone

from toolkit.core.timestamps import from_iso8601, to_iso8601, utc_now


def test_utc_now_is_aware_and_whole_seconds():
    now = utc_now()
    assert now.tzinfo is UTC
    assert now.microsecond == 0


def test_to_iso8601_normalises_to_utc():
    dt = datetime(2026, 1, 1, 11, 0, 0, 123456, tzinfo=timezone(timedelta(hours=2)))
    assert to_iso8601(dt) == "2026-01-01T09:00:00+00:00"


def test_to_iso8601_treats_naive_as_utc():
    assert to_iso8601(datetime(2026, 1, 1, 9, 0)) == "2026-01-01T09:00:00+00:00"


def test_none_passthrough():
    assert to_iso8601(None) is None
    assert from_iso8601(None) is None


def test_from_iso8601():
    assert from_iso8601("2026-01-01T09:00:00+00:00") == datetime(2026, 1, 1, 9, tzinfo=UTC)
