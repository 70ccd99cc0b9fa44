"""
CLI: ``toolkit schedule``: inspect and dispatch scheduled push notifications.
"""

from __future__ import annotations

import asyncio

import typer

from toolkit.api.settings import ToolkitSettings
from toolkit.cli.utils import DATABASE_URL_OPTION, console, fail, make_context, output_result, resolve_database_url
from toolkit.core.database import connect
from toolkit.core.errors import CronError
from toolkit.core.timestamps import to_iso8601
from toolkit.fcm.accounts import load_service_accounts
from toolkit.fcm.cron import upcoming
from toolkit.fcm.dispatcher import FcmDispatcher
from toolkit.fcm.messaging import FcmClient

app = typer.Typer(no_args_is_help=True)

_LIST_COLUMNS = ["id", "name", "fb_user_id", "fb_project_id", "cron_pattern", "last_execution", "next_execution"]


@app.command("list")
def list_schedules(
    user: str | None = typer.Option(None, "--user", "-u", help="Only this Firebase uid"),
    database_url: str | None = DATABASE_URL_OPTION,
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """List stored schedules."""
    from toolkit.ops.fcm import list_all_schedules, list_schedules as _list

    ctx, conn = make_context(database_url, user=user)
    try:
        result = _list(ctx) if user else list_all_schedules(ctx)
    finally:
        conn.close()
    output_result(result, as_json=json_out, title="Schedules", columns=_LIST_COLUMNS)


@app.command("preview")
def preview(
    pattern: str = typer.Argument(..., help="Cron pattern (5 fields, or 6 with leading seconds)"),
    count: int = typer.Option(5, "--count", "-n", min=1, max=100, help="How many fire times"),
) -> None:
    """Show the next fire times of a cron pattern (UTC)."""
    try:
        times = upcoming(pattern, count)
    except CronError as exc:
        raise fail(exc.message, "VALIDATION_FAILED") from exc
    for when in times:
        console.print(to_iso8601(when))


@app.command("run-due")
def run_due(
    database_url: str | None = DATABASE_URL_OPTION,
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Send every due schedule once and advance it (one dispatcher pass)."""
    settings = ToolkitSettings()
    url = resolve_database_url(database_url)
    accounts = load_service_accounts(settings.service_accounts_dir, settings.firebase_projects)
    client = FcmClient(accounts, endpoint=settings.fcm_endpoint, timeout_seconds=settings.fcm_timeout_seconds)
    dispatcher = FcmDispatcher(lambda: connect(url), client)

    report = asyncio.run(dispatcher.run_due())

    if json_out:
        console.print_json(data=report.to_dict())
    else:
        console.print(f"due: {report.due}  sent: [green]{report.sent}[/green]  failed: [red]{report.failed}[/red]")
        for schedule_id, error in report.errors.items():
            console.print(f"  [red]#{schedule_id}[/red] {error}")
    if report.failed:
        raise typer.Exit(code=1)
