"""Hybrid ranker: weighted cosine similarity + raw lexical hit count.

  final = 0.7 * cosine(query_embedding, chunk.embedding) + 0.3 * lexical_hits

Cosine lives in [-1, 1] while lexical hits are unbounded, so lexical overlap
boosts and breaks ties at normal term frequencies but dominates when a chunk
repeats query terms many times. The weights are part of the ranking contract.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from cerebro.db.models import Chunk
from cerebro.rag.similarity import MIN_TERM_LENGTH, cosine_similarity, lexical_score

SEMANTIC_WEIGHT = 0.7
LEXICAL_WEIGHT = 0.3
DEFAULT_TOP_K = 5


@dataclass
class RankerConfig:
    top_k: int = DEFAULT_TOP_K
    semantic_weight: float = SEMANTIC_WEIGHT
    lexical_weight: float = LEXICAL_WEIGHT
    min_term_length: int = MIN_TERM_LENGTH


@dataclass
class ScoredChunk:
    """A chunk together with its fused score and per-channel scores.

    Attributes:
        chunk: The ranked Chunk.
        final_score: Weighted combination used for ordering.
        semantic_score: Cosine similarity (0.0 when either embedding is absent).
        lexical_score: Raw term-occurrence count.
    """

    chunk: Chunk
    final_score: float
    semantic_score: float = 0.0
    lexical_score: int = 0


def score_chunk(
    query_embedding: Sequence[float] | None,
    query: str,
    chunk: Chunk,
    config: RankerConfig,
) -> ScoredChunk:
    semantic = cosine_similarity(query_embedding, chunk.embedding)
    lexical = lexical_score(query, chunk.text, config.min_term_length)
    return ScoredChunk(
        chunk=chunk,
        final_score=config.semantic_weight * semantic + config.lexical_weight * lexical,
        semantic_score=semantic,
        lexical_score=lexical,
    )


def rank(
    query_embedding: Sequence[float] | None,
    query: str,
    chunks: Iterable[Chunk],
    config: RankerConfig | None = None,
) -> list[ScoredChunk]:
    """Score every chunk and return the top-K, best first.

    Ties keep insertion order (``sorted`` is stable, also with ``reverse``).
    """
    config = config or RankerConfig()
    scored = [score_chunk(query_embedding, query, c, config) for c in chunks]
    scored.sort(key=lambda s: s.final_score, reverse=True)
    return scored[: config.top_k]
