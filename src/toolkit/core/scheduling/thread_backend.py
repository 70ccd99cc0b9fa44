"""Daemon-thread ticker.

::

    start(tick, interval)
       └─ thread "toolkit-scheduler":
            until stop():
                wait(interval)
                asyncio.run(tick())    # exceptions logged and counted

Each tick runs on a fresh event loop inside the thread, so a slow FCM
round trip never blocks the uvicorn loop serving the API.
"""

from __future__ import annotations

import asyncio
import threading
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from toolkit.core.logging import get_logger
from toolkit.core.timestamps import to_iso8601, utc_now

logger = get_logger(__name__)

TickCallback = Callable[[], Awaitable[None]]

# Consecutive failed ticks before the scheduler reports itself unhealthy
FAILURE_THRESHOLD = 3


@dataclass(frozen=True)
class SchedulerHealth:
    running: bool
    tick_count: int
    consecutive_failures: int
    last_tick: datetime | None
    last_error: str | None
    interval_seconds: float

    @property
    def healthy(self) -> bool:
        return self.running and self.consecutive_failures < FAILURE_THRESHOLD

    def to_dict(self) -> dict[str, Any]:
        return {
            "healthy": self.healthy,
            "running": self.running,
            "tick_count": self.tick_count,
            "consecutive_failures": self.consecutive_failures,
            "last_tick": to_iso8601(self.last_tick),
            "last_error": self.last_error,
            "interval_seconds": self.interval_seconds,
        }


class ThreadSchedulerBackend:
    """Calls an async tick every ``interval_seconds`` on a daemon thread.

    The first tick happens one interval after :meth:`start`, giving the
    app time to finish its own startup.
    """

    def __init__(self, *, join_timeout: float = 5.0) -> None:
        self._join_timeout = join_timeout
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()
        self._interval = 0.0
        self._tick_count = 0
        self._failures = 0
        self._last_tick: datetime | None = None
        self._last_error: str | None = None

    def start(self, tick: TickCallback, interval_seconds: float) -> None:
        if self.is_running:
            logger.warning("scheduler_already_running")
            return
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")

        self._interval = interval_seconds
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._loop,
            args=(tick, interval_seconds),
            daemon=True,
            name="toolkit-scheduler",
        )
        self._thread.start()

    def _loop(self, tick: TickCallback, interval: float) -> None:
        logger.info("scheduler_started", interval_seconds=interval)
        while not self._stop.wait(interval):
            try:
                asyncio.run(tick())
            except Exception as exc:  # noqa: BLE001 - one bad tick must not end the loop
                logger.exception("scheduler_tick_failed", error=str(exc))
                self._record(error=str(exc))
            else:
                self._record(error=None)
        logger.info("scheduler_stopped", ticks=self._tick_count)

    def _record(self, *, error: str | None) -> None:
        with self._lock:
            self._tick_count += 1
            self._last_tick = utc_now()
            self._last_error = error
            self._failures = self._failures + 1 if error else 0

    def stop(self) -> None:
        """Signal the loop and wait for an in-flight tick to finish."""
        thread, self._thread = self._thread, None
        if thread is None:
            return
        self._stop.set()
        thread.join(timeout=self._join_timeout)
        if thread.is_alive():
            logger.warning("scheduler_thread_still_running", join_timeout=self._join_timeout)

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def tick_count(self) -> int:
        return self._tick_count

    @property
    def last_tick(self) -> datetime | None:
        return self._last_tick

    def get_health(self) -> SchedulerHealth:
        with self._lock:
            return SchedulerHealth(
                running=self.is_running,
                tick_count=self._tick_count,
                consecutive_failures=self._failures,
                last_tick=self._last_tick,
                last_error=self._last_error,
                interval_seconds=self._interval,
            )
