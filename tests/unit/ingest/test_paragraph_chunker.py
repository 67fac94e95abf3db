"""Tests for ParagraphChunker."""

from __future__ import annotations

import pytest

from cerebro.ingest.base import BaseChunker
from cerebro.ingest.paragraph import (
    ParagraphChunker,
    normalize_whitespace,
    split_segments,
)

SENTENCE = "The quick brown fox jumps. "


@pytest.fixture
def chunker():
    return ParagraphChunker()


# ------------------------------------------------------------------
# Segmentation
# ------------------------------------------------------------------


def test_normalize_whitespace():
    assert normalize_whitespace("  a\tb\n\n c  ") == "a b c"


def test_split_on_blank_lines_and_sentence_ends():
    text = "First para.\nStill first.\n\nSecond para! Third? Fourth"
    assert split_segments(text) == [
        "First para.",
        "Still first.",
        "Second para!",
        "Third?",
        "Fourth",
    ]


def test_split_keeps_abbreviation_like_dots_without_space():
    assert split_segments("Version 1.5 shipped.") == ["Version 1.5 shipped."]


def test_split_drops_empty_segments():
    assert split_segments("\n\n   \n\nOnly this.\n\n\n") == ["Only this."]


# ------------------------------------------------------------------
# Chunking
# ------------------------------------------------------------------


def test_is_base_chunker(chunker):
    assert isinstance(chunker, BaseChunker)
    assert chunker.target_size == 1000


def test_empty_content_returns_no_chunks(chunker):
    assert chunker.chunk("empty.txt", "") == []
    assert chunker.chunk("blank.txt", "  \n\n\t ") == []


def test_short_text_is_single_chunk(chunker):
    chunks = chunker.chunk("note.txt", "Hello   world.\n\nSecond paragraph.")
    assert len(chunks) == 1
    assert chunks[0].text == "Hello world. Second paragraph."
    assert chunks[0].id == "note.txt:0"
    assert chunks[0].char_count == len(chunks[0].text)
    assert chunks[0].embedding is None


def test_repeated_sentences_split_into_bounded_chunks(chunker):
    text = SENTENCE * 80  # 2160 chars
    chunks = chunker.chunk("fox.txt", text)

    assert len(chunks) >= 2
    for c in chunks:
        assert len(c.text) <= 1000
        assert c.text.startswith("The quick brown fox jumps.")


def test_sequence_indices_are_contiguous(chunker):
    chunks = chunker.chunk("fox.txt", SENTENCE * 200)
    assert [c.sequence_index for c in chunks] == list(range(len(chunks)))
    assert [c.id for c in chunks] == [f"fox.txt:{i}" for i in range(len(chunks))]
    assert all(c.source_name == "fox.txt" for c in chunks)


def test_concatenation_reproduces_normalized_text():
    text = (
        "Alpha beta gamma.  Delta\tepsilon!\n\n"
        "Zeta eta theta? Iota kappa lambda.\n\n\n"
        "Mu nu xi omicron pi rho sigma tau."
    )
    chunks = ParagraphChunker(target_size=30).chunk("greek.txt", text)
    assert len(chunks) > 1
    assert " ".join(c.text for c in chunks) == normalize_whitespace(text)


def test_oversized_segment_kept_whole():
    long_sentence = "word " * 60 + "end."
    text = f"Short one. {long_sentence} After."
    chunks = ParagraphChunker(target_size=50).chunk("big.txt", text)

    texts = [c.text for c in chunks]
    assert normalize_whitespace(long_sentence) in texts
    assert texts[0] == "Short one."
    assert texts[-1] == "After."


def test_chunk_never_exceeds_target_unless_single_segment():
    text = " ".join(f"Sentence number {i}." for i in range(100))
    chunks = ParagraphChunker(target_size=120).chunk("n.txt", text)
    for c in chunks:
        assert len(c.text) <= 120


def test_exact_fit_is_not_split():
    # Two 9-char segments + one separator = 19 chars
    chunks = ParagraphChunker(target_size=19).chunk("fit.txt", "Aaaa bbb. Cccc ddd.")
    assert [c.text for c in chunks] == ["Aaaa bbb. Cccc ddd."]


def test_rechunking_is_deterministic(chunker):
    text = SENTENCE * 50
    first = chunker.chunk("a.txt", text)
    second = chunker.chunk("a.txt", text)
    assert first == second


def test_invalid_target_size():
    with pytest.raises(ValueError):
        ParagraphChunker(target_size=0)
