"""
CLI: ``toolkit serve``: run the API server and inspect its settings.
"""

from __future__ import annotations

import json

import typer
import uvicorn

from toolkit.api.settings import ToolkitSettings
from toolkit.cli.utils import console, fail

app = typer.Typer(no_args_is_help=True)


@app.command("start")
def start(
    host: str | None = typer.Option(None, "--host", "-h", help="Bind address (default: TOOLKIT_HOST)"),
    port: int | None = typer.Option(None, "--port", "-p", help="Bind port (default: TOOLKIT_PORT)"),
    reload: bool = typer.Option(False, "--reload", help="Auto-reload on changes"),
) -> None:
    """Start the API server with the dispatcher and browser session.

    Always one worker: the dispatcher thread lives in the server
    process, so a second worker would send every push twice.
    """
    settings = ToolkitSettings()
    bind_host = host or settings.host
    bind_port = port or settings.port
    console.print(f"[bold green]toolkit {settings.api_version}[/bold green] listening on {bind_host}:{bind_port}")
    uvicorn.run(
        "toolkit.api:create_app",
        factory=True,
        host=bind_host,
        port=bind_port,
        reload=reload,
        workers=1,
        log_level=settings.log_level.lower(),
    )


@app.command("config")
def show_config(
    as_json: bool = typer.Option(False, "--json", help="Print as JSON"),
) -> None:
    """Print the effective settings (environment and ``.env`` applied)."""
    try:
        values = ToolkitSettings().model_dump()
    except ValueError as exc:
        raise fail(str(exc), "CONFIG_INVALID") from exc
    if as_json:
        console.print_json(json.dumps(values, default=str))
        return
    for key, value in values.items():
        console.print(f"  [cyan]{key}[/cyan]: {value}")
