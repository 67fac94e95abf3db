"""Tests for cosine similarity and lexical overlap."""

from __future__ import annotations

import math

import pytest

from cerebro.rag.similarity import cosine_similarity, lexical_score, query_terms


# ------------------------------------------------------------------
# cosine_similarity
# ------------------------------------------------------------------


def test_identical_vectors():
    assert cosine_similarity([1.0, 2.0, 3.0], [1.0, 2.0, 3.0]) == pytest.approx(1.0)


def test_orthogonal_vectors():
    assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == 0.0


def test_opposite_vectors():
    assert cosine_similarity([1.0, 1.0], [-1.0, -1.0]) == pytest.approx(-1.0)


def test_scale_invariant():
    assert cosine_similarity([1.0, 2.0], [10.0, 20.0]) == pytest.approx(1.0)


def test_known_angle():
    assert cosine_similarity([1.0, 0.0], [1.0, 1.0]) == pytest.approx(1 / math.sqrt(2))


@pytest.mark.parametrize(
    "a, b",
    [
        (None, [1.0]),
        ([1.0], None),
        ([], []),
        ([1.0, 2.0], [1.0]),
        ([0.0, 0.0], [1.0, 1.0]),
    ],
)
def test_degenerate_inputs_score_zero(a, b):
    assert cosine_similarity(a, b) == 0.0


def test_accepts_tuples():
    assert cosine_similarity((1.0, 0.0), [1.0, 0.0]) == pytest.approx(1.0)


# ------------------------------------------------------------------
# lexical_score
# ------------------------------------------------------------------


def test_query_terms_drop_short_words():
    assert query_terms("What is the DMX protocol") == ["what", "the", "dmx", "protocol"]


def test_counts_every_occurrence():
    assert lexical_score("fox", "The fox saw another fox.") == 2


def test_case_insensitive():
    assert lexical_score("FOX", "fox Fox fOx") == 3


def test_substring_matches_count():
    assert lexical_score("cat", "concatenate the category") == 2


def test_sums_over_terms():
    assert lexical_score("quick brown", "quick brown quick") == 3


def test_short_terms_ignored():
    assert lexical_score("a an is", "a an is a an is") == 0


def test_empty_query_or_text():
    assert lexical_score("", "anything") == 0
    assert lexical_score("anything", "") == 0


def test_custom_min_length():
    assert lexical_score("is", "this is", min_length=2) == 2
