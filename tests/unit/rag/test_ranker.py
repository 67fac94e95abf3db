"""Tests for hybrid ranking."""

from __future__ import annotations

import pytest

from cerebro.db.models import Chunk
from cerebro.rag.ranker import (
    LEXICAL_WEIGHT,
    SEMANTIC_WEIGHT,
    RankerConfig,
    rank,
    score_chunk,
)


def _chunk(i: int, text: str, embedding=None) -> Chunk:
    return Chunk.create("doc.txt", i, text, embedding)


def test_weights():
    assert SEMANTIC_WEIGHT == 0.7
    assert LEXICAL_WEIGHT == 0.3
    assert RankerConfig().top_k == 5


def test_score_formula():
    chunk = _chunk(0, "lighting lighting desk", [1.0, 0.0])
    scored = score_chunk([1.0, 0.0], "lighting", chunk, RankerConfig())

    assert scored.semantic_score == pytest.approx(1.0)
    assert scored.lexical_score == 2
    assert scored.final_score == pytest.approx(0.7 * 1.0 + 0.3 * 2)


def test_lexical_hits_can_outrank_perfect_semantic_match():
    semantic = _chunk(0, "nothing relevant in here", [1.0, 0.0])
    lexical = _chunk(1, "fox fox fox fox fox", [0.0, 1.0])

    ranked = rank([1.0, 0.0], "fox", [semantic, lexical])

    assert ranked[0].chunk is lexical
    assert ranked[0].final_score == pytest.approx(0.3 * 5)
    assert ranked[1].chunk is semantic
    assert ranked[1].final_score == pytest.approx(0.7)


def test_semantic_wins_when_lexical_hits_are_few():
    semantic = _chunk(0, "nothing relevant", [1.0, 0.0])
    lexical = _chunk(1, "one fox here", [0.0, 1.0])

    ranked = rank([1.0, 0.0], "fox", [semantic, lexical])
    assert [s.chunk for s in ranked] == [semantic, lexical]


def test_no_query_embedding_is_lexical_only():
    a = _chunk(0, "alpha", [1.0])
    b = _chunk(1, "beta beta", [1.0])

    ranked = rank(None, "beta", [a, b])
    assert ranked[0].chunk is b
    assert all(s.semantic_score == 0.0 for s in ranked)


def test_chunk_without_embedding_gets_zero_semantic():
    chunk = _chunk(0, "plain text")
    scored = score_chunk([1.0, 0.0], "plain", chunk, RankerConfig())
    assert scored.semantic_score == 0.0
    assert scored.final_score == pytest.approx(0.3)


def test_dimension_mismatch_scores_zero_semantic():
    chunk = _chunk(0, "text", [1.0, 0.0, 0.0])
    assert score_chunk([1.0, 0.0], "zzz", chunk, RankerConfig()).final_score == 0.0


def test_ties_keep_insertion_order():
    chunks = [_chunk(i, f"same text {i}") for i in range(4)]
    ranked = rank(None, "same", chunks)
    assert [s.chunk.sequence_index for s in ranked] == [0, 1, 2, 3]


def test_top_k_truncates():
    chunks = [_chunk(i, "xxx" * (i + 1)) for i in range(10)]
    ranked = rank(None, "xxx", chunks)
    assert len(ranked) == 5
    # More occurrences of "xxx" in longer texts
    assert ranked[0].chunk.sequence_index == 9


def test_fewer_chunks_than_top_k():
    chunks = [_chunk(0, "a"), _chunk(1, "b")]
    assert len(rank(None, "query", chunks, RankerConfig(top_k=5))) == 2


def test_empty_chunks():
    assert rank([1.0], "anything", []) == []


def test_custom_weights():
    chunk = _chunk(0, "fox", [1.0])
    cfg = RankerConfig(semantic_weight=1.0, lexical_weight=0.0)
    assert score_chunk([1.0], "fox", chunk, cfg).final_score == pytest.approx(1.0)
