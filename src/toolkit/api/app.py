"""
FastAPI application factory.

``create_app()`` wires middleware, routers, error handlers and lifespan
events into a single ``FastAPI`` instance.  The lifespan owns the
long-lived pieces:

- the schema migrations (run on every start)
- the service-account registry and the FCM client
- the dispatcher thread that sends due schedules
- the shared Selenium session
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from functools import partial

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse

from toolkit.api.deps import get_settings
from toolkit.api.middleware.errors import toolkit_error_handler, unhandled_exception_handler
from toolkit.api.middleware.request_context import RequestContextMiddleware
from toolkit.api.settings import ToolkitSettings
from toolkit.browser.session import BrowserSession
from toolkit.core.database import connect, setup_database, sqlite_path
from toolkit.core.errors import ToolkitError
from toolkit.core.health import HealthCheck, create_health_router
from toolkit.core.logging import configure_logging, get_logger
from toolkit.core.scheduling import ThreadSchedulerBackend
from toolkit.fcm.accounts import load_service_accounts
from toolkit.fcm.dispatcher import FcmDispatcher
from toolkit.fcm.messaging import FcmClient


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: startup / shutdown hooks."""
    settings: ToolkitSettings = app.state.settings
    configure_logging(level=settings.log_level, json_format=settings.log_json)
    log = get_logger("toolkit.api")
    log.info("toolkit_starting", version=app.version, port=settings.port)

    setup_database(settings.database_url)

    accounts = load_service_accounts(settings.service_accounts_dir, settings.firebase_projects)
    app.state.accounts = accounts
    app.state.fcm = FcmClient(
        accounts,
        endpoint=settings.fcm_endpoint,
        timeout_seconds=settings.fcm_timeout_seconds,
    )

    scheduler = None
    if settings.scheduler_enabled:
        dispatcher = FcmDispatcher(partial(connect, settings.database_url), app.state.fcm)
        scheduler = ThreadSchedulerBackend()
        scheduler.start(dispatcher.tick, interval_seconds=settings.scheduler_interval_seconds)
    app.state.scheduler = scheduler

    app.state.browser = (
        BrowserSession(
            settings.chrome_driver_endpoint,
            page_timeout_seconds=settings.browser_page_timeout_seconds,
        )
        if settings.browser_enabled
        else None
    )

    try:
        yield
    finally:
        log.info("toolkit_shutting_down")
        if scheduler is not None:
            scheduler.stop()
        if app.state.browser is not None:
            app.state.browser.close()


def _database_check(settings: ToolkitSettings) -> HealthCheck:
    def _count() -> dict:
        conn = connect(settings.database_url)
        try:
            conn.execute("SELECT COUNT(*) FROM fcm_schedule")
            return {"path": sqlite_path(settings.database_url), "schedules": conn.fetchone()[0]}
        finally:
            conn.close()

    async def _check() -> dict:
        return await asyncio.to_thread(_count)

    return HealthCheck(name="database", check_fn=_check, required=True)


def _scheduler_check(app: FastAPI) -> HealthCheck:
    async def _check() -> dict:
        scheduler = app.state.scheduler
        if scheduler is None:
            return {"enabled": False}
        health = scheduler.get_health()
        if not health.healthy:
            reason = health.last_error or "thread not running"
            raise RuntimeError(f"scheduler unhealthy: {reason}")
        return {"enabled": True, **health.to_dict()}

    return HealthCheck(name="scheduler", check_fn=_check, required=False)


def _browser_check(app: FastAPI) -> HealthCheck:
    async def _check() -> dict:
        browser = app.state.browser
        return {"enabled": False} if browser is None else {"enabled": True, **browser.status()}

    return HealthCheck(name="browser", check_fn=_check, required=False)


def create_app(
    *,
    settings: ToolkitSettings | None = None,
) -> FastAPI:
    """Build and return a fully-configured FastAPI application.

    Parameters
    ----------
    settings : ToolkitSettings | None
        Override settings (useful for testing).  When ``None`` the cached
        singleton from :func:`get_settings` is used.
    """

    settings = settings or get_settings()

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        lifespan=lifespan,
        docs_url=f"{settings.api_prefix}/docs",
        redoc_url=None,
        openapi_url=f"{settings.api_prefix}/openapi.json",
    )

    # Stash settings on app state for the lifespan and error handlers
    app.state.settings = settings

    # Override DI so endpoints use the provided settings
    app.dependency_overrides[get_settings] = lambda: settings

    # ── Middleware (each add_middleware wraps the ones before it) ────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    # outermost: CORS preflight answers also get a request id and a log line
    app.add_middleware(RequestContextMiddleware)

    # ── Exception handlers ───────────────────────────────────────────
    app.add_exception_handler(ToolkitError, toolkit_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # ── Routers ──────────────────────────────────────────────────────
    from toolkit.api.routers import browser, fcm

    prefix = settings.api_prefix

    # Health endpoints at root level (no prefix) for container healthchecks
    checks = [_database_check(settings), _scheduler_check(app), _browser_check(app)]
    app.include_router(
        create_health_router("toolkit", version=settings.api_version, checks=checks),
        tags=["health"],
    )

    app.include_router(fcm.router, prefix=prefix, tags=["fcm"])
    app.include_router(browser.router, prefix=prefix, tags=["browser"])

    @app.get("/", include_in_schema=False)
    async def root() -> RedirectResponse:
        return RedirectResponse(url=app.docs_url)

    return app
