"""Tests for the scheduler thread."""

from __future__ import annotations

import threading

import pytest

from toolkit.core.scheduling import ThreadSchedulerBackend
from toolkit.core.scheduling.thread_backend import FAILURE_THRESHOLD


class TestThreadSchedulerBackend:
    def test_ticks_until_stopped(self):
        ticked = threading.Event()

        async def tick():
            ticked.set()

        backend = ThreadSchedulerBackend()
        backend.start(tick, interval_seconds=0.01)
        try:
            assert ticked.wait(timeout=2.0)
            assert backend.is_running
        finally:
            backend.stop()

        health = backend.get_health()
        assert not backend.is_running
        assert not health.healthy
        assert backend.tick_count >= 1
        assert backend.last_tick is not None
        assert health.consecutive_failures == 0

    def test_failing_ticks_are_counted_and_loop_survives(self):
        calls = []
        done = threading.Event()

        async def tick():
            calls.append(1)
            if len(calls) > FAILURE_THRESHOLD:
                done.set()
            raise RuntimeError("fcm down")

        backend = ThreadSchedulerBackend()
        backend.start(tick, interval_seconds=0.01)
        try:
            assert done.wait(timeout=2.0)
            assert backend.is_running
        finally:
            backend.stop()

        health = backend.get_health()
        assert health.consecutive_failures >= FAILURE_THRESHOLD
        assert health.last_error == "fcm down"
        assert health.to_dict()["last_error"] == "fcm down"

    def test_stop_without_start_is_noop(self):
        backend = ThreadSchedulerBackend()
        backend.stop()
        assert not backend.is_running
        assert backend.get_health().to_dict()["healthy"] is False

    def test_rejects_non_positive_interval(self):
        async def tick():
            return None

        with pytest.raises(ValueError):
            ThreadSchedulerBackend().start(tick, interval_seconds=0)
