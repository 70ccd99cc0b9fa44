"""
Typed request objects for operations.

Transports (API routers, CLI commands) build these from their own input
models; operations never see FastAPI or Typer types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class CreateFcmScheduleRequest:
    name: str
    push_token: str
    cron_pattern: str
    payload: Any = field(default_factory=dict)


@dataclass(frozen=True)
class UpdateFcmScheduleRequest:
    schedule_id: int
    name: str
    push_token: str
    cron_pattern: str
    payload: Any = field(default_factory=dict)


@dataclass(frozen=True)
class FetchPageRequest:
    url: str
    wait_for: str | None = None
    timeout_seconds: float | None = None
