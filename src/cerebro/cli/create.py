"""cerebro create — create an empty notebook (collection)."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from cerebro.cli.runtime import console, get_config, open_store, setup_logging
from cerebro.store import DEFAULT_DISPLAY_NAME


def create_cmd(
    name: Annotated[
        str,
        typer.Argument(help="Display name of the notebook."),
    ] = DEFAULT_DISPLAY_NAME,
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Path to the durable mirror (default: store.db)."),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging."),
    ] = False,
) -> None:
    """Create a new notebook and print its id."""
    setup_logging(verbose)
    cfg = get_config(db)

    with open_store(cfg) as store:
        collection_id = store.create_collection(name)

    console.print(f"[green]✓[/] Created notebook [bold]{name}[/]")
    console.print(collection_id, highlight=False)
