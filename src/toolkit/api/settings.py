"""
Service settings.

All values can be overridden via environment variables prefixed with
``TOOLKIT_`` or via a ``.env`` file in the working directory (the
compose file mounts one at ``/usr/src/app/.env``).  Two variables keep
their historical, unprefixed names: ``DATABASE_URL`` and
``CHROME_DRIVER_ENDPOINT``.
"""

from __future__ import annotations

import json
from typing import Annotated, Any

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode


class ToolkitSettings(BaseSettings):
    """Settings for the toolkit service.

    Order of precedence (highest → lowest):
        1. Environment variables (``DATABASE_URL``, ``TOOLKIT_PORT``, etc.)
        2. ``.env`` file
        3. Defaults below
    """

    # ── Server ───────────────────────────────────────────────────────────
    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=3000, description="Bind port")
    debug: bool = Field(default=False, description="Expose exception text in 500 responses")
    log_level: str = Field(default="INFO", description="Log level")
    log_json: bool | None = Field(default=None, description="JSON logs; None = auto (JSON when not a TTY)")

    # ── API ──────────────────────────────────────────────────────────────
    api_prefix: str = Field(default="/api", description="URL prefix for all endpoints")
    api_title: str = Field(default="ToolKit", description="OpenAPI title")
    api_version: str = Field(default="1.0", description="OpenAPI version string")

    # ── Database ─────────────────────────────────────────────────────────
    database_url: str = Field(
        default="sqlite:db/toolkit.db",
        validation_alias=AliasChoices("DATABASE_URL", "TOOLKIT_DATABASE_URL"),
        description="sqlite: URL of the schedule database",
    )

    # ── Firebase ─────────────────────────────────────────────────────────
    service_accounts_dir: str = Field(
        default="service_accounts",
        description="Directory of Google service-account JSON files",
    )
    firebase_projects: Annotated[list[str], NoDecode] = Field(
        default_factory=list,
        description="Extra project ids accepted without a service account (comma-separated)",
    )
    verify_id_tokens: bool = Field(default=True, description="Verify ID token signatures")

    # ── Scheduler / FCM ──────────────────────────────────────────────────
    scheduler_enabled: bool = Field(default=True, description="Run the FCM dispatcher")
    scheduler_interval_seconds: float = Field(default=30.0, gt=0, description="Dispatcher tick interval")
    fcm_endpoint: str = Field(default="https://fcm.googleapis.com/v1", description="FCM HTTP v1 base URL")
    fcm_timeout_seconds: float = Field(default=10.0, gt=0, description="FCM request timeout")

    # ── Browser ──────────────────────────────────────────────────────────
    browser_enabled: bool = Field(default=True, description="Enable the remote browser routes")
    chrome_driver_endpoint: str = Field(
        default="http://selenium:4444/wd/hub",
        validation_alias=AliasChoices("CHROME_DRIVER_ENDPOINT", "TOOLKIT_CHROME_DRIVER_ENDPOINT"),
        description="Selenium remote WebDriver endpoint",
    )
    browser_page_timeout_seconds: float = Field(default=30.0, gt=0, description="Page load / wait timeout")

    # ── CORS ─────────────────────────────────────────────────────────────
    cors_origins: list[str] = Field(
        default=["*"],
        description="Allowed CORS origins",
    )

    @field_validator("firebase_projects", mode="before")
    @classmethod
    def split_projects(cls, value: Any) -> Any:
        """``"a, b"`` -> ``["a", "b"]``; JSON arrays and lists pass through."""
        if isinstance(value, str) and value.lstrip().startswith("["):
            return json.loads(value)
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    model_config: dict[str, Any] = {
        "env_prefix": "TOOLKIT_",
        "env_file": ".env",
        "extra": "ignore",
        "populate_by_name": True,
    }
