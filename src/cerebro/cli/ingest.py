"""cerebro ingest — extract, chunk, embed and append documents to a notebook.

Supported sources:
  .pdf        → text extracted page by page (pypdf)
  other files → decoded as UTF-8

Each source is appended as a new entry; ingesting the same file twice adds
its chunks twice.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Annotated

import typer
from rich.progress import Progress, SpinnerColumn, TextColumn

from cerebro.cli.errors import err_no_api_key, err_no_sources, err_source_missing
from cerebro.cli.runtime import (
    console,
    embedding_client,
    get_config,
    open_store,
    setup_logging,
)
from cerebro.config import CerebroConfig
from cerebro.errors import MissingCredential
from cerebro.ingest.embedding_writer import EmbeddingWriter, IngestConfig, IngestResult
from cerebro.ingest.extract import extract_text
from cerebro.ingest.paragraph import ParagraphChunker


def ingest_cmd(
    store: Annotated[
        str,
        typer.Option("--store", "-S", help="Target notebook id (see: cerebro status)."),
    ],
    source: Annotated[
        list[Path] | None,
        typer.Option("--source", "-s", help="Document path (repeatable)."),
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
    """Ingest one or more documents into a notebook."""
    setup_logging(verbose)
    sources = source or []

    if not sources:
        console.print(err_no_sources())
        raise typer.Exit(1)

    for path in sources:
        if not path.is_file():
            console.print(err_source_missing(str(path)))
            raise typer.Exit(1)

    cfg = get_config(db)

    with open_store(cfg) as corpus:
        writer = EmbeddingWriter(
            corpus,
            embedding_client(cfg),
            chunker=ParagraphChunker(cfg.chunker.target_size),
            config=IngestConfig(
                workers=cfg.ingest.workers,
                delay_seconds=cfg.ingest.delay_seconds,
            ),
        )
        for path in sources:
            _process_source(path, store, writer, cfg)


def _process_source(
    path: Path,
    collection_id: str,
    writer: EmbeddingWriter,
    cfg: CerebroConfig,
) -> IngestResult:
    """Extract, chunk, embed and append a single document."""
    console.print(f"\n[bold]→ {path.name}[/]")

    text = extract_text(path, max_chars=cfg.chunker.max_text_chars)
    console.print(f"  [dim]Extracted {len(text):,} characters[/]")

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        transient=True,
        console=console,
    ) as prog:
        prog.add_task(f"Embedding with {cfg.embedding.model}…", total=None)
        try:
            result = asyncio.run(writer.write(collection_id, path.name, text))
        except MissingCredential as exc:
            console.print(err_no_api_key(exc.provider))
            raise typer.Exit(1)

    console.print(f"  [green]✓[/] {result.chunk_count} chunks linked to {collection_id}")
    if result.failed_embeddings:
        console.print(
            f"  [yellow]⚠[/] {result.failed_embeddings} chunks stored without embedding "
            "(ranked by keyword overlap only)"
        )
    return result
