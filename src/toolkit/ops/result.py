"""
What operations return.

An operation starts a :class:`Stopwatch` and finishes through it, so
every :class:`OperationResult` carries the time the operation took::

    timer = start_timer()
    if schedule is None:
        return timer.fail("NOT_FOUND", "Schedule not found")
    return timer.ok(schedule, warnings=warnings)

Error codes, and the HTTP status the API answers with:

=====================  ====  ==========================================
code                   HTTP  meaning
=====================  ====  ==========================================
``NOT_FOUND``          404   schedule missing or owned by someone else
``VALIDATION_FAILED``  400   bad payload, cron pattern or URL
``UNAUTHORIZED``       401   caller identity missing or not allowed
``TIMEOUT``            504   browser wait condition not met in time
``UNAVAILABLE``        503   browser disabled or sidecar unreachable
``INTERNAL``           500   database or unexpected failure
=====================  ====  ==========================================
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class OperationError:
    code: str
    message: str
    retryable: bool = False


@dataclass
class OperationResult(Generic[T]):
    success: bool
    data: T | None = None
    error: OperationError | None = None
    warnings: list[str] = field(default_factory=list)
    elapsed_ms: float = 0.0


class Stopwatch:
    """Times one operation and stamps the result it produces."""

    __slots__ = ("_started",)

    def __init__(self) -> None:
        self._started = time.perf_counter()

    @property
    def elapsed_ms(self) -> float:
        return round((time.perf_counter() - self._started) * 1000, 3)

    def ok(self, data: T, *, warnings: list[str] | None = None) -> OperationResult[T]:
        return OperationResult(success=True, data=data, warnings=list(warnings or []), elapsed_ms=self.elapsed_ms)

    def fail(self, code: str, message: str, *, retryable: bool = False) -> OperationResult:
        return OperationResult(
            success=False,
            error=OperationError(code=code, message=message, retryable=retryable),
            elapsed_ms=self.elapsed_ms,
        )


def start_timer() -> Stopwatch:
    return Stopwatch()
