"""Shared CLI wiring: config, logging, and the store / client instances.

The store is owned by the command that opens it and closed with it; nothing
here is a module-level singleton.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from cerebro.cli.errors import err_config, warn_mirror_disabled
from cerebro.config import CerebroConfig, ConfigError, load_config
from cerebro.db.connection import Database
from cerebro.db.repository import Repository
from cerebro.rag.llm_client import EmbeddingClient, GenerationClient
from cerebro.rag.ranker import RankerConfig
from cerebro.store import CollectionCache, InMemoryStore, LRUCache, MirroredStore

console = Console()


def setup_logging(verbose: bool) -> None:
    """Route log records through Rich (DEBUG with --verbose, else WARNING)."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
    # LiteLLM logs every request at INFO/DEBUG; keep it quiet.
    logging.getLogger("LiteLLM").setLevel(logging.WARNING)


def get_config(db: Path | None = None) -> CerebroConfig:
    """Load config, exiting with an actionable message on ConfigError."""
    try:
        cfg = load_config()
    except ConfigError as exc:
        console.print(err_config(str(exc)))
        raise typer.Exit(1)
    if db is not None:
        cfg.store.db = str(db)
    return cfg


@contextmanager
def open_store(cfg: CerebroConfig) -> Iterator[InMemoryStore]:
    """Yield the configured store; the mirror connection closes on exit."""
    cache: CollectionCache | None = (
        LRUCache(cfg.store.max_collections) if cfg.store.max_collections else None
    )
    if not cfg.store.mirror:
        console.print(warn_mirror_disabled())
        yield InMemoryStore(cache)
        return

    conn = Database(cfg.store.db).open()
    try:
        yield MirroredStore(Repository(conn), cache)
    finally:
        conn.close()


def embedding_client(cfg: CerebroConfig) -> EmbeddingClient:
    return EmbeddingClient(cfg.embedding.model)


def generation_client(cfg: CerebroConfig) -> GenerationClient:
    return GenerationClient(
        cfg.generation.model,
        timeout=cfg.generation.timeout_seconds,
        max_tokens=cfg.generation.max_tokens,
    )


def ranker_config(cfg: CerebroConfig) -> RankerConfig:
    return RankerConfig(
        top_k=cfg.retrieval.top_k,
        semantic_weight=cfg.retrieval.semantic_weight,
        lexical_weight=cfg.retrieval.lexical_weight,
        min_term_length=cfg.retrieval.min_term_length,
    )
