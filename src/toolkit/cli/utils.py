"""
Shared pieces of the CLI commands.

- ``console`` is stdout (tables, ``--json`` documents); ``err_console``
  is stderr (errors, operation warnings)
- ``make_context`` opens the database and builds a ``caller="cli"``
  :class:`OperationContext`
- ``output_result`` renders an :class:`OperationResult` or exits 1
"""

from __future__ import annotations

import json
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from toolkit.api.settings import ToolkitSettings
from toolkit.api.utils import as_dict
from toolkit.core.database import SqliteConnection, connect
from toolkit.ops.context import OperationContext
from toolkit.ops.result import OperationResult

console = Console()
err_console = Console(stderr=True)

DATABASE_URL_OPTION = typer.Option(
    None,
    "--database-url",
    "-d",
    envvar="DATABASE_URL",
    help="sqlite: database URL (default from settings)",
)


def resolve_database_url(database_url: str | None = None) -> str:
    """*database_url* if given, else the configured ``database_url``."""
    return database_url or ToolkitSettings().database_url


def make_context(database_url: str | None = None, *, user: str | None = None) -> tuple[OperationContext, SqliteConnection]:
    conn = connect(resolve_database_url(database_url))
    return OperationContext(conn=conn, caller="cli", user=user), conn


def fail(message: str, code: str = "ERROR") -> typer.Exit:
    """Report *message* on stderr and return the ``Exit`` for the caller to raise."""
    err_console.print(f"[bold red]{code}[/bold red] {message}")
    return typer.Exit(code=1)


def output_result(
    result: OperationResult,
    *,
    as_json: bool = False,
    title: str = "",
    columns: list[str] | None = None,
) -> None:
    """Print ``result.data`` as JSON, a table (lists) or key/value lines.

    Warnings go to stderr so they never mix with ``--json`` output.
    Raises ``typer.Exit(1)`` for a failed result.
    """
    if not result.success:
        error = result.error
        raise fail(error.message, error.code) if error else fail("operation failed")

    for warning in result.warnings:
        err_console.print(f"[yellow]warning[/yellow] {warning}")

    rows = result.data if isinstance(result.data, list | tuple) else None
    if as_json:
        document: Any = [as_dict(row) for row in rows] if rows is not None else as_dict(result.data)
        console.print_json(json.dumps(document, default=str))
    elif rows is None:
        if title:
            console.print(f"[bold]{title}[/bold]")
        for key, value in as_dict(result.data).items():
            console.print(f"  [cyan]{key}[/cyan]: {value}")
    elif not rows:
        console.print("[dim]Nothing to show.[/dim]")
    else:
        _print_table([as_dict(row) for row in rows], title=title, columns=columns)


def _print_table(rows: list[dict[str, Any]], *, title: str, columns: list[str] | None) -> None:
    names = columns or list(rows[0])
    table = Table(title=title or None, pad_edge=False)
    for name in names:
        table.add_column(name, overflow="fold")
    for row in rows:
        table.add_row(*("" if row.get(name) is None else str(row.get(name)) for name in names))
    console.print(table)
