"""Cerebro CLI entry point."""

from __future__ import annotations

import importlib.metadata
from typing import Annotated

import typer

from cerebro.cli.ask import ask_cmd
from cerebro.cli.create import create_cmd
from cerebro.cli.ingest import ingest_cmd
from cerebro.cli.init import init_cmd
from cerebro.cli.status import status_cmd


def _installed_version() -> str:
    try:
        return importlib.metadata.version("cerebro")
    except importlib.metadata.PackageNotFoundError:
        return "dev"


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"cerebro {_installed_version()}")
        raise typer.Exit()


app = typer.Typer(
    name="cerebro",
    help=(
        "Cerebro — ask questions about your documents.\n\n"
        "  cerebro init     Write config files and the mirror database.\n"
        "  cerebro create   Make a notebook.\n"
        "  cerebro ingest   Add documents to it.\n"
        "  cerebro ask      Answer from its documents, with sources."
    ),
    add_completion=False,
)


@app.callback()
def main_callback(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = False,
) -> None:
    """Cerebro — ask questions about your documents."""


app.command("init")(init_cmd)
app.command("create")(create_cmd)
app.command("ingest")(ingest_cmd)
app.command("ask")(ask_cmd)
app.command("status")(status_cmd)


@app.command("version")
def version_cmd() -> None:
    """Show the installed Cerebro version."""
    typer.echo(f"cerebro {_installed_version()}")


if __name__ == "__main__":
    app()
