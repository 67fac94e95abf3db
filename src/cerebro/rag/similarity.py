"""Vector similarity and lexical overlap scores.

Both functions are total: malformed input yields 0, never an exception.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

MIN_TERM_LENGTH = 3


def cosine_similarity(
    a: Sequence[float] | None,
    b: Sequence[float] | None,
) -> float:
    """Return ``dot(a, b) / (|a| * |b|)``.

    Returns 0.0 when either vector is missing or empty, when dimensions
    differ, or when either norm is zero.
    """
    if not a or not b or len(a) != len(b):
        return 0.0
    dot = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    return dot / (norm_a * norm_b)


def query_terms(query: str, min_length: int = MIN_TERM_LENGTH) -> list[str]:
    """Lowercase whitespace-split terms of *query*, dropping short ones."""
    return [t for t in query.lower().split() if len(t) >= min_length]


def lexical_score(query: str, text: str, min_length: int = MIN_TERM_LENGTH) -> int:
    """Sum of case-insensitive substring occurrences of each query term in *text*.

    Matches inside longer words count too ("cat" hits "concatenate").
    """
    terms = query_terms(query, min_length)
    if not terms:
        return 0
    haystack = text.lower()
    return sum(haystack.count(term) for term in terms)
