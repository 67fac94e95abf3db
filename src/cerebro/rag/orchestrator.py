"""Retrieval orchestrator: query → ranked context → grounded answer.

Pipeline:
  1. Resolve the collection's chunks. None → fixed "no documents" answer,
     no provider call at all (not even the query embedding).
  2. Embed the query. Failure degrades ranking to lexical-only.
  3. Rank all chunks (0.7 semantic + 0.3 lexical) and keep the top-K.
  4. Build one prompt with attributed context blocks.
  5. Generate once, bounded by the client's timeout. Provider failures come
     back as ``Answer.error``; they are not retried.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from cerebro.db.models import Chunk
from cerebro.errors import EmbeddingUnavailable, ProviderError
from cerebro.rag.llm_client import EmbeddingClient, GenerationClient
from cerebro.rag.prompt import build_prompt
from cerebro.rag.ranker import RankerConfig, ScoredChunk, rank
from cerebro.store import CorpusStore

logger = logging.getLogger(__name__)

NO_DOCUMENTS_MESSAGE = "No documents ingested yet. Upload files to this notebook first."
DEFAULT_PREVIEW_CHARS = 200


@dataclass
class SourceRef:
    """One ranked source attached to an answer."""

    source_name: str
    sequence_index: int
    text_preview: str
    final_score: float

    def to_dict(self) -> dict:
        return {
            "sourceName": self.source_name,
            "sequenceIndex": self.sequence_index,
            "textPreview": self.text_preview,
            "finalScore": self.final_score,
        }


@dataclass
class Answer:
    """Result of ``Orchestrator.answer()``.

    Attributes:
        text: Generated answer verbatim ("" when generation failed).
        sources: Selected chunks in rank order.
        error: User-visible failure message, or None on success.
    """

    text: str
    sources: list[SourceRef] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class Orchestrator:
    """Answer queries against a collection held in *store*.

    Args:
        store:         Corpus store (owned by the caller).
        embedder:      Embedding client for the query.
        generator:     Generation client for the answer.
        ranker_config: Weights and top-K.
        preview_chars: Length of ``SourceRef.text_preview``.
    """

    def __init__(
        self,
        store: CorpusStore,
        embedder: EmbeddingClient,
        generator: GenerationClient,
        ranker_config: RankerConfig | None = None,
        preview_chars: int = DEFAULT_PREVIEW_CHARS,
    ) -> None:
        self._store = store
        self._embedder = embedder
        self._generator = generator
        self._ranker_config = ranker_config or RankerConfig()
        self._preview_chars = preview_chars

    async def answer(self, collection_id: str, query: str) -> Answer:
        chunks = self._store.get_chunks(collection_id)
        if not chunks:
            logger.info("Collection %s has no chunks; skipping providers", collection_id)
            return Answer(text=NO_DOCUMENTS_MESSAGE)

        self._generator.check_credentials()

        selected = await self.retrieve(query, chunks)
        sources = [self._source_ref(sc) for sc in selected]
        prompt = build_prompt(query, selected)

        try:
            text = await self._generator.generate(prompt)
        except ProviderError as exc:
            logger.error("Generation failed for %s: %s", collection_id, exc)
            return Answer(text="", sources=sources, error=str(exc))

        logger.info(
            "Answered query on %s from %d chunks (%d chars)",
            collection_id,
            len(selected),
            len(text),
        )
        return Answer(text=text, sources=sources)

    async def retrieve(self, query: str, chunks: Sequence[Chunk]) -> list[ScoredChunk]:
        """Rank *chunks* against *query*, falling back to lexical-only scoring."""
        query_embedding: list[float] | None
        try:
            self._embedder.check_credentials()
            query_embedding = await self._embedder.embed(query)
        except EmbeddingUnavailable as exc:
            logger.warning("Query embedding unavailable, ranking lexically: %s", exc)
            query_embedding = None
        return rank(query_embedding, query, chunks, self._ranker_config)

    def _source_ref(self, sc: ScoredChunk) -> SourceRef:
        return SourceRef(
            source_name=sc.chunk.source_name,
            sequence_index=sc.chunk.sequence_index,
            text_preview=sc.chunk.text[: self._preview_chars],
            final_score=sc.final_score,
        )
