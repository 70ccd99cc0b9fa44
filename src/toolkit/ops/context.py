"""Who is calling an operation, and over which connection."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any, Literal

Caller = Literal["api", "cli", "scheduler", "test"]


@dataclass
class OperationContext:
    """Passed first to every operation.

    ``user`` and ``project`` are the Firebase uid and project id taken
    from a checked ID token; the CLI leaves ``project`` unset and only
    sets ``user`` when filtering by uid.  ``caller`` gates operator-only
    operations such as :func:`toolkit.ops.fcm.list_all_schedules`.
    """

    conn: Any
    caller: Caller = "api"
    user: str | None = None
    project: str | None = None
    request_id: str = field(default_factory=lambda: uuid.uuid4().hex)
