"""Embedding writer — chunk, embed and append one document to a collection.

For each document:
1. Split the extracted text with the configured chunker.
2. Embed every chunk through a bounded worker pool
   (``asyncio.Semaphore(workers)``), pausing ``delay_seconds`` after each
   provider call. Results are gathered in chunk order.
3. A chunk whose embedding fails is kept without one; it still ranks
   through lexical overlap.
4. Append the chunks to the store in a single call.

A missing API key is fatal and raised before any provider call.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field, replace

from cerebro.db.models import Chunk
from cerebro.errors import EmbeddingUnavailable
from cerebro.ingest.base import BaseChunker
from cerebro.ingest.paragraph import ParagraphChunker
from cerebro.rag.llm_client import EmbeddingClient
from cerebro.store import CorpusStore

logger = logging.getLogger(__name__)


@dataclass
class IngestConfig:
    """Worker pool settings for embedding generation."""

    workers: int = 1
    delay_seconds: float = 0.2


@dataclass
class IngestResult:
    """Outcome of one document ingestion.

    Attributes:
        collection_id: Target collection.
        source_name: Ingested document identifier.
        chunk_count: Number of chunks appended.
        chunks: The chunks as stored, embeddings included.
        failed_embeddings: Chunks stored without an embedding.
    """

    collection_id: str
    source_name: str
    chunk_count: int
    chunks: list[Chunk] = field(default_factory=list)
    failed_embeddings: int = 0


class EmbeddingWriter:
    """Ingest documents into a ``CorpusStore``.

    Args:
        store:    Store that receives the chunks.
        embedder: Embedding client.
        chunker:  Text splitter; defaults to ``ParagraphChunker()``.
        config:   Worker pool configuration.
    """

    def __init__(
        self,
        store: CorpusStore,
        embedder: EmbeddingClient,
        chunker: BaseChunker | None = None,
        config: IngestConfig | None = None,
    ) -> None:
        self._store = store
        self._embedder = embedder
        self._chunker = chunker or ParagraphChunker()
        self._config = config or IngestConfig()
        if self._config.workers < 1:
            raise ValueError("workers must be >= 1")

    async def write(self, collection_id: str, source_name: str, content: str) -> IngestResult:
        """Chunk, embed and append *content*. Returns the stored chunks."""
        self._embedder.check_credentials()

        chunks = self._chunker.chunk(source_name, content)
        embedded = await self.embed_chunks(chunks)
        failed = sum(1 for c in embedded if c.embedding is None)

        stored = self._store.append_chunks(collection_id, source_name, embedded)
        logger.info(
            "Ingested '%s' into %s: %d chunks (%d without embedding)",
            source_name,
            collection_id,
            len(stored),
            failed,
        )
        return IngestResult(
            collection_id=collection_id,
            source_name=source_name,
            chunk_count=len(stored),
            chunks=stored,
            failed_embeddings=failed,
        )

    async def embed_chunks(self, chunks: list[Chunk]) -> list[Chunk]:
        """Return *chunks* with embeddings attached, in the same order."""
        semaphore = asyncio.Semaphore(self._config.workers)

        async def _embed_one(chunk: Chunk) -> Chunk:
            async with semaphore:
                try:
                    vector = await self._embedder.embed(chunk.text)
                except EmbeddingUnavailable as exc:
                    logger.warning("No embedding for %s: %s", chunk.id, exc)
                    return chunk
                finally:
                    if self._config.delay_seconds:
                        await asyncio.sleep(self._config.delay_seconds)
                logger.debug("Embedded %s (%d dims)", chunk.id, len(vector))
                return replace(chunk, embedding=tuple(vector))

        return list(await asyncio.gather(*(_embed_one(c) for c in chunks)))
