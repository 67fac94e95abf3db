"""cerebro status — list notebooks, or one notebook's files and chunk total."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.panel import Panel
from rich.table import Table

from cerebro.cli.errors import err_unknown_collection
from cerebro.cli.runtime import console, get_config, open_store, setup_logging
from cerebro.db.models import Collection, CollectionSummary


def status_cmd(
    store: Annotated[
        str | None,
        typer.Option("--store", "-S", help="Show the files of one notebook."),
    ] = None,
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Path to the durable mirror (default: store.db)."),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging."),
    ] = False,
) -> None:
    """Show notebooks with their file and chunk counts."""
    setup_logging(verbose)
    cfg = get_config(db)

    with open_store(cfg) as corpus:
        if store is None:
            _show_collections(corpus.list_collections())
            return

        collection = corpus.get_collection(store)
        if collection is None:
            console.print(err_unknown_collection(store))
            raise typer.Exit(1)
        _show_collection(collection)


def _show_collections(collections: list[CollectionSummary]) -> None:
    if not collections:
        console.print(
            Panel(
                "[yellow]No notebooks yet.[/]\n"
                "  Run:  cerebro create \"My notebook\"",
                title="[bold]Notebooks[/]",
                expand=False,
            )
        )
        return

    table = Table(title="Notebooks")
    table.add_column("Id", no_wrap=True)
    table.add_column("Name")
    table.add_column("Files", justify="right")
    table.add_column("Chunks", justify="right")
    table.add_column("Created")
    for c in collections:
        table.add_row(
            c.id,
            c.display_name,
            str(c.source_count),
            str(c.chunk_count),
            _short_time(c.created_at),
        )
    console.print(table)


def _show_collection(collection: Collection) -> None:
    lines = [
        f"Id:      {collection.id}",
        f"Created: {collection.created_at}",
        f"Files:   {len(collection.sources)}",
        f"Chunks:  {collection.total_chunks}",
    ]
    console.print(
        Panel("\n".join(lines), title=f"[bold]{collection.display_name}[/]", expand=False)
    )
    if not collection.sources:
        console.print("[yellow]⚠ No documents[/]")
        return

    table = Table()
    table.add_column("#", justify="right")
    table.add_column("File")
    table.add_column("Chunks", justify="right")
    table.add_column("Linked")
    for i, s in enumerate(collection.sources, start=1):
        table.add_row(str(i), s.source_name, str(s.chunk_count), _short_time(s.linked_at))
    console.print(table)


def _short_time(iso: str) -> str:
    return iso[:19].replace("T", " ")
