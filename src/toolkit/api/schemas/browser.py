"""Schemas for the remote browser routes."""

from __future__ import annotations

from pydantic import BaseModel, Field


class PageBody(BaseModel):
    url: str = Field(description="Absolute http(s) URL to load")
    wait_for: str | None = Field(default=None, description="CSS selector to wait for after load")
    timeout_seconds: float | None = Field(default=None, description="Override the page timeout")


class PageSchema(BaseModel):
    url: str = Field(description="URL after redirects")
    title: str
    source: str = Field(description="Rendered HTML")


class BrowserStatusSchema(BaseModel):
    enabled: bool
    connected: bool
    session_id: str | None = None
    endpoint: str | None = None
