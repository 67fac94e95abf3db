"""Paragraph chunker — greedy packing of paragraphs and sentences.

Strategy:
- Split on blank lines (paragraph breaks) and after ``.``, ``!`` or ``?``
  followed by whitespace.
- Collapse whitespace inside each segment; drop empty segments.
- Pack segments, joined by single spaces, into chunks of at most
  ``target_size`` characters. A single segment longer than the target is
  kept whole as one oversized chunk.

Joining the chunk texts with single spaces reproduces the
whitespace-normalized input.
"""

from __future__ import annotations

import re

from cerebro.db.models import Chunk
from cerebro.ingest.base import DEFAULT_TARGET_SIZE, BaseChunker

_SEGMENT_BOUNDARY = re.compile(r"\n\s*\n|(?<=[.!?])\s+")
_WHITESPACE = re.compile(r"\s+")


def normalize_whitespace(text: str) -> str:
    """Collapse whitespace runs to one space and trim."""
    return _WHITESPACE.sub(" ", text).strip()


def split_segments(text: str) -> list[str]:
    """Return the normalized, non-empty paragraph/sentence segments of *text*."""
    segments = (normalize_whitespace(s) for s in _SEGMENT_BOUNDARY.split(text))
    return [s for s in segments if s]


class ParagraphChunker(BaseChunker):
    """Split extracted document text into bounded, coherent chunks.

    Default target: 1000 characters (soft cap).
    """

    def __init__(self, target_size: int = DEFAULT_TARGET_SIZE) -> None:
        super().__init__(target_size=target_size)

    def chunk(self, source_name: str, content: str) -> list[Chunk]:
        if not content.strip():
            return []
        return self._make_chunks(source_name, self._pack(split_segments(content)))

    def _pack(self, segments: list[str]) -> list[str]:
        texts: list[str] = []
        buffer = ""
        for segment in segments:
            if buffer and len(buffer) + 1 + len(segment) > self.target_size:
                texts.append(buffer)
                buffer = ""
            buffer = f"{buffer} {segment}" if buffer else segment
            if len(buffer) > self.target_size:
                texts.append(buffer)
                buffer = ""
        if buffer.strip():
            texts.append(buffer)
        return texts
