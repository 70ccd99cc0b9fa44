"""Schemas for the scheduled push notification routes."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class FcmScheduleBody(BaseModel):
    """Request body for create and update.

    ``payload`` is typed loosely on purpose so that a non-object payload
    reaches the operation and is rejected with ``"Invalid payload"``
    rather than a generic validation error.
    """

    name: str = Field(description="Display name")
    push_token: str = Field(description="FCM registration token of the device")
    cron_pattern: str = Field(description="5-field cron, or 6-field with leading seconds")
    payload: Any = Field(description="JSON object merged into the FCM message")


class FcmScheduleSchema(BaseModel):
    """A stored schedule."""

    id: int
    name: str
    fb_user_id: str
    push_token: str
    fb_project_id: str
    cron_pattern: str
    payload: dict[str, Any] = Field(default_factory=dict)
    last_execution: str
    next_execution: str
    created_at: str
    updated_at: str
