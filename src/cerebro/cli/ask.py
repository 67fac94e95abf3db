"""cerebro ask — answer a question from a notebook's documents."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table

from cerebro.cli.errors import err_generation_failed, err_no_api_key
from cerebro.cli.runtime import (
    console,
    embedding_client,
    generation_client,
    get_config,
    open_store,
    ranker_config,
    setup_logging,
)
from cerebro.errors import MissingCredential
from cerebro.rag.orchestrator import Answer, Orchestrator


def ask_cmd(
    query: Annotated[str, typer.Argument(help="Question to answer.")],
    store: Annotated[
        str,
        typer.Option("--store", "-S", help="Notebook id to search."),
    ],
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print {text, sources} as JSON."),
    ] = False,
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Path to the durable mirror (default: store.db)."),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging."),
    ] = False,
) -> None:
    """Answer QUERY using only the documents in the notebook."""
    setup_logging(verbose)
    cfg = get_config(db)

    with open_store(cfg) as corpus:
        orchestrator = Orchestrator(
            corpus,
            embedding_client(cfg),
            generation_client(cfg),
            ranker_config=ranker_config(cfg),
            preview_chars=cfg.retrieval.preview_chars,
        )
        try:
            answer = asyncio.run(orchestrator.answer(store, query))
        except MissingCredential as exc:
            console.print(err_no_api_key(exc.provider))
            raise typer.Exit(1)

    if as_json:
        payload = {
            "text": answer.text,
            "sources": [s.to_dict() for s in answer.sources],
        }
        if answer.error:
            payload["error"] = answer.error
        typer.echo(json.dumps(payload, ensure_ascii=False, indent=2))
    else:
        _print_answer(answer)

    if not answer.ok:
        raise typer.Exit(1)


def _print_answer(answer: Answer) -> None:
    if not answer.ok:
        console.print(err_generation_failed(answer.error or ""))
        return

    console.print(answer.text)
    if not answer.sources:
        return

    table = Table(title="Sources", show_lines=False)
    table.add_column("#", justify="right")
    table.add_column("Source")
    table.add_column("Chunk", justify="right")
    table.add_column("Score", justify="right")
    table.add_column("Preview", overflow="ellipsis", max_width=60)
    for i, src in enumerate(answer.sources, start=1):
        table.add_row(
            str(i),
            src.source_name,
            str(src.sequence_index),
            f"{src.final_score:.3f}",
            src.text_preview.replace("\n", " "),
        )
    console.print(table)
