"""
FastAPI dependency injection: shared singletons and per-request factories.

Usage in routers::

    from toolkit.api.deps import FcmContext

    @router.get("/")
    def list_schedules(ctx: FcmContext):
        ...

``FcmContext`` authenticates the caller from the ``firebase-auth``
header, checks its project against the allow-list and opens a database
connection for the request.
"""

from __future__ import annotations

import uuid
from collections.abc import Generator
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Header, Request

from toolkit.api.settings import ToolkitSettings
from toolkit.browser.session import BrowserSession
from toolkit.core.database import SqliteConnection, connect
from toolkit.fcm.claims import FirebaseClaims, extract_claims, require_project
from toolkit.ops.context import OperationContext

# ── Settings (singleton) ─────────────────────────────────────────────────


@lru_cache(maxsize=1)
def get_settings() -> ToolkitSettings:
    """Cached settings, loaded once per process."""
    return ToolkitSettings()


# ── Database connection (per-request) ────────────────────────────────────


def get_connection(
    settings: Annotated[ToolkitSettings, Depends(get_settings)],
) -> Generator[SqliteConnection, None, None]:
    """Yield a SQLite connection for the request lifespan."""
    conn = connect(settings.database_url)
    try:
        yield conn
    finally:
        conn.close()


# ── Firebase caller (per-request) ────────────────────────────────────────


def get_allowed_projects(
    request: Request,
    settings: Annotated[ToolkitSettings, Depends(get_settings)],
) -> set[str]:
    """Project ids with a loaded service account, plus configured extras."""
    projects = set(settings.firebase_projects)
    accounts = getattr(request.app.state, "accounts", None)
    if accounts is not None:
        projects.update(accounts.projects)
    return projects


def get_firebase_claims(
    settings: Annotated[ToolkitSettings, Depends(get_settings)],
    projects: Annotated[set[str], Depends(get_allowed_projects)],
    firebase_auth: Annotated[str | None, Header(alias="firebase-auth")] = None,
) -> FirebaseClaims:
    """Authenticate the caller.

    Raises ``AuthenticationError`` / ``AuthorizationError``; the app's
    ``ToolkitError`` handler renders them as 401 problem responses.
    """
    claims = extract_claims(firebase_auth, verify=settings.verify_id_tokens)
    return require_project(claims, projects)


def get_fcm_context(
    request: Request,
    conn: Annotated[SqliteConnection, Depends(get_connection)],
    claims: Annotated[FirebaseClaims, Depends(get_firebase_claims)],
) -> OperationContext:
    """Build an :class:`OperationContext` for the authenticated caller."""
    request_id = getattr(request.state, "request_id", None) or uuid.uuid4().hex
    return OperationContext(
        conn=conn,
        request_id=request_id,
        caller="api",
        user=claims.user_id,
        project=claims.aud,
    )


# ── Browser (shared) ─────────────────────────────────────────────────────


def get_browser(request: Request) -> BrowserSession | None:
    """The shared browser session, or ``None`` when browser support is off."""
    return getattr(request.app.state, "browser", None)


# ── Convenience type aliases ─────────────────────────────────────────────

Settings = Annotated[ToolkitSettings, Depends(get_settings)]
FcmContext = Annotated[OperationContext, Depends(get_fcm_context)]
Browser = Annotated[BrowserSession | None, Depends(get_browser)]
