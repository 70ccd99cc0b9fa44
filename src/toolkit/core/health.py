"""
Health endpoints for the toolkit container.

- ``GET /health``        every check, with per-check details (503 when unhealthy)
- ``GET /health/ready``  503 while a *required* check fails
- ``GET /health/live``   always 200 while the process serves requests

A check is an async callable returning a details dict (or ``None``) and
raising on failure.  The database check is required; the scheduler and
browser checks are informational and only mark the service ``degraded``.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Literal

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from toolkit.core.timestamps import to_iso8601, utc_now

_BOOTED_AT = time.monotonic()

Status = Literal["healthy", "degraded", "unhealthy"]

CheckFn = Callable[[], Awaitable[dict[str, Any] | None]]


class CheckResult(BaseModel):
    status: Status
    latency_ms: float | None = None
    error: str | None = None
    details: dict[str, Any] = Field(default_factory=dict)


class HealthResponse(BaseModel):
    """Body of ``GET /health`` and ``GET /health/ready``."""

    status: Status = "healthy"
    service: str = ""
    version: str = ""
    uptime_s: float = 0.0
    timestamp: str = ""
    checks: dict[str, CheckResult] = Field(default_factory=dict)


class LivenessResponse(BaseModel):
    status: str = "alive"


@dataclass(frozen=True)
class HealthCheck:
    """One dependency of the service.

    Args:
        name: Key in the ``checks`` map (``"database"``, ``"scheduler"``).
        check_fn: Async callable; raise to report failure.
        required: A failing required check makes the service ``unhealthy``
            and not ready; an optional one only ``degraded``.
        timeout_s: Seconds before the check counts as failed.
    """

    name: str
    check_fn: CheckFn
    required: bool = True
    timeout_s: float = 5.0


async def _run_one(check: HealthCheck) -> CheckResult:
    started = time.monotonic()

    def _ms() -> float:
        return round((time.monotonic() - started) * 1000, 2)

    try:
        details = await asyncio.wait_for(check.check_fn(), timeout=check.timeout_s)
    except TimeoutError:
        return CheckResult(status="unhealthy", latency_ms=_ms(), error=f"timed out after {check.timeout_s}s")
    except Exception as exc:  # noqa: BLE001 - any failure is reported, not raised
        return CheckResult(status="unhealthy", latency_ms=_ms(), error=str(exc)[:200])
    return CheckResult(status="healthy", latency_ms=_ms(), details=details or {})


async def run_checks(checks: list[HealthCheck]) -> dict[str, CheckResult]:
    """Run *checks* concurrently; the result keeps their order."""
    results = await asyncio.gather(*(_run_one(check) for check in checks))
    return {check.name: result for check, result in zip(checks, results)}


def overall_status(checks: list[HealthCheck], results: dict[str, CheckResult]) -> Status:
    failing = {name for name, result in results.items() if result.status != "healthy"}
    if any(check.required and check.name in failing for check in checks):
        return "unhealthy"
    return "degraded" if failing else "healthy"


def create_health_router(
    service_name: str,
    version: str,
    checks: list[HealthCheck] | None = None,
) -> APIRouter:
    """Build the ``/health`` router for *checks*."""
    router = APIRouter(prefix="/health", tags=["health"])
    registered = list(checks or [])

    async def _evaluate() -> HealthResponse:
        results = await run_checks(registered)
        return HealthResponse(
            status=overall_status(registered, results),
            service=service_name,
            version=version,
            uptime_s=round(time.monotonic() - _BOOTED_AT, 1),
            timestamp=to_iso8601(utc_now()),
            checks=results,
        )

    @router.get("", response_model=HealthResponse)
    async def health() -> JSONResponse:
        body = await _evaluate()
        code = 503 if body.status == "unhealthy" else 200
        return JSONResponse(content=body.model_dump(), status_code=code)

    @router.get("/ready", response_model=HealthResponse)
    async def readiness() -> JSONResponse:
        """Ready unless a required check fails; ``degraded`` still serves traffic."""
        body = await _evaluate()
        code = 503 if body.status == "unhealthy" else 200
        return JSONResponse(content=body.model_dump(), status_code=code)

    @router.get("/live", response_model=LivenessResponse)
    async def liveness() -> LivenessResponse:
        return LivenessResponse()

    return router
