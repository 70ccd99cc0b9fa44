"""Tests for cron pattern evaluation."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone

import pytest

from toolkit.core.errors import CronError
from toolkit.fcm.cron import decode_cron, upcoming

BASE = datetime(2026, 3, 2, 8, 59, 30, tzinfo=UTC)  # a Monday


class TestDecodeCron:
    def test_five_field_pattern(self):
        assert decode_cron("0 9 * * *", BASE) == datetime(2026, 3, 2, 9, 0, tzinfo=UTC)

    def test_six_field_pattern_has_leading_seconds(self):
        assert decode_cron("45 59 8 * * *", BASE) == datetime(2026, 3, 2, 8, 59, 45, tzinfo=UTC)

    def test_result_strictly_after_reference(self):
        at_fire_time = datetime(2026, 3, 2, 9, 0, tzinfo=UTC)
        assert decode_cron("0 9 * * *", at_fire_time) == datetime(2026, 3, 3, 9, 0, tzinfo=UTC)

    def test_naive_reference_is_utc(self):
        assert decode_cron("0 9 * * *", BASE.replace(tzinfo=None)) == datetime(2026, 3, 2, 9, 0, tzinfo=UTC)

    def test_other_timezone_reference_normalised(self):
        local = BASE.astimezone(timezone(timedelta(hours=5)))
        result = decode_cron("0 9 * * *", local)
        assert result == datetime(2026, 3, 2, 9, 0, tzinfo=UTC)
        assert result.utcoffset() == timedelta(0)

    def test_default_reference_is_now(self):
        before = datetime.now(UTC)
        assert decode_cron("* * * * *") > before

    def test_weekday_names(self):
        saturday = datetime(2026, 3, 7, 12, 0, tzinfo=UTC)
        assert decode_cron("0 9 * * mon-fri", saturday) == datetime(2026, 3, 9, 9, 0, tzinfo=UTC)

    @pytest.mark.parametrize("pattern", ["", "   ", "* * * *", "* * * * * * *"])
    def test_wrong_shape_rejected(self, pattern):
        with pytest.raises(CronError):
            decode_cron(pattern, BASE)

    @pytest.mark.parametrize("pattern", ["61 * * * *", "* 25 * * *", "a b c d e", "0 9 * * funday"])
    def test_unparsable_rejected(self, pattern):
        with pytest.raises(CronError, match="Invalid cron pattern"):
            decode_cron(pattern, BASE)


class TestUpcoming:
    def test_lists_consecutive_fire_times(self):
        times = upcoming("*/15 * * * *", 3, BASE)
        assert times == [
            datetime(2026, 3, 2, 9, 0, tzinfo=UTC),
            datetime(2026, 3, 2, 9, 15, tzinfo=UTC),
            datetime(2026, 3, 2, 9, 30, tzinfo=UTC),
        ]

    def test_zero_count(self):
        assert upcoming("* * * * *", 0, BASE) == []
