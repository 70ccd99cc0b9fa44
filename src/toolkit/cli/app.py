"""
Root ``toolkit`` command.

::

    toolkit serve start|config
    toolkit db setup|status
    toolkit schedule list|preview|run-due
    toolkit deploy compose|workflow
"""

from __future__ import annotations

import typer

from toolkit import __version__
from toolkit.cli import db, deploy, schedule, serve
from toolkit.core.logging import configure_logging

app = typer.Typer(
    name="toolkit",
    help="Scheduled Firebase push notifications and a remote browser, behind one service.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.add_typer(serve.app, name="serve", help="Run the API server.")
app.add_typer(db.app, name="db", help="Create and migrate the schedule database.")
app.add_typer(schedule.app, name="schedule", help="Inspect and dispatch scheduled pushes.")
app.add_typer(deploy.app, name="deploy", help="Render the CI workflow and the compose file.")


def _print_version(value: bool) -> None:
    if not value:
        return
    typer.echo(f"toolkit {__version__}")
    raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=_print_version,
        is_eager=True,
        help="Print the version and exit.",
    ),
    log_level: str = typer.Option("WARNING", "--log-level", help="Log level; logs go to stderr."),
) -> None:
    configure_logging(level=log_level, json_format=False, to_stderr=True)
