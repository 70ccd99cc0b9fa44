"""
CLI: ``toolkit db``: database management commands.
"""

from __future__ import annotations

import typer

from toolkit.cli.utils import DATABASE_URL_OPTION, console, fail, resolve_database_url
from toolkit.core.database import connect, setup_database, sqlite_path
from toolkit.core.errors import ConfigError, DatabaseError
from toolkit.core.migrations import MigrationRunner

app = typer.Typer(no_args_is_help=True)


@app.command()
def setup(database_url: str | None = DATABASE_URL_OPTION) -> None:
    """Create the database file if missing and apply all migrations."""
    url = resolve_database_url(database_url)
    try:
        result = setup_database(url)
    except (ConfigError, DatabaseError) as exc:
        raise fail(exc.message, "CONFIG") from exc

    console.print(
        f"[bold green]Database ready[/bold green] at {sqlite_path(url)}: "
        f"{len(result.applied)} applied, {len(result.skipped)} already present"
    )
    for name in result.applied:
        console.print(f"  [cyan]applied[/cyan] {name}")
    for name in result.modified:
        console.print(f"  [yellow]changed since applied, not re-run[/yellow] {name}")


@app.command()
def status(
    database_url: str | None = DATABASE_URL_OPTION,
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Show applied and pending migrations."""
    url = resolve_database_url(database_url)
    try:
        conn = connect(url)
    except (ConfigError, DatabaseError) as exc:
        raise fail(exc.message, "CONFIG") from exc

    try:
        runner = MigrationRunner(conn)
        applied = runner.get_applied()
        pending = runner.get_pending()
    finally:
        conn.close()

    if json_out:
        console.print_json(
            data={
                "database": sqlite_path(url),
                "applied": [{"filename": r.filename, "applied_at": r.applied_at} for r in applied],
                "pending": pending,
            }
        )
        return

    console.print(f"[bold]Database[/bold] {sqlite_path(url)}")
    for record in applied:
        console.print(f"  [green]✓[/green] {record.filename}  [dim]{record.applied_at}[/dim]")
    for name in pending:
        console.print(f"  [yellow]…[/yellow] {name}  [dim]pending[/dim]")
    if not applied and not pending:
        console.print("[dim]No migrations found.[/dim]")
