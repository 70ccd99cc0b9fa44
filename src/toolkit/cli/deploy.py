"""
CLI: ``toolkit deploy``: write the operational descriptors.
"""

from __future__ import annotations

from pathlib import Path

import typer

from toolkit.cli.utils import console
from toolkit.deploy import (
    DEFAULT_WORKFLOW,
    default_services,
    generate_compose,
    generate_pr_workflow,
    write_compose_file,
    write_workflow_file,
)

app = typer.Typer(no_args_is_help=True)


@app.command("compose")
def compose(
    output: Path | None = typer.Option(None, "--output", "-o", help="Write to this file instead of stdout"),
) -> None:
    """Generate docker-compose.yaml (toolkit + selenium sidecar)."""
    content = generate_compose(default_services())
    if output is None:
        typer.echo(content, nl=False)
        return
    path = write_compose_file(content, output)
    console.print(f"[green]Wrote[/green] {path}")


@app.command("workflow")
def workflow(
    output: Path | None = typer.Option(None, "--output", "-o", help="Write to this file instead of stdout"),
) -> None:
    """Generate the pull-request CI workflow."""
    content = generate_pr_workflow(DEFAULT_WORKFLOW)
    if output is None:
        typer.echo(content, nl=False)
        return
    path = write_workflow_file(content, output)
    console.print(f"[green]Wrote[/green] {path}")
