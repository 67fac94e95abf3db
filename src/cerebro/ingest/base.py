"""Base chunker interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from cerebro.db.models import Chunk

DEFAULT_TARGET_SIZE = 1000


class BaseChunker(ABC):
    """Abstract base for chunkers.

    Subclasses implement ``chunk()`` and use ``_make_chunks()`` to turn the
    produced texts into sequentially indexed Chunks.

    Sizes are measured in characters.
    """

    def __init__(self, target_size: int = DEFAULT_TARGET_SIZE) -> None:
        if target_size < 1:
            raise ValueError("target_size must be >= 1")
        self.target_size = target_size

    @abstractmethod
    def chunk(self, source_name: str, content: str) -> list[Chunk]:
        """Split *content* into Chunk objects for *source_name*.

        Args:
            source_name: Originating document identifier.
            content: Full extracted text of the document.

        Returns:
            Ordered list of Chunk objects with sequential ``sequence_index``
            starting at 0. Each call reprocesses *content* from scratch.
        """

    @staticmethod
    def _make_chunks(source_name: str, texts: list[str]) -> list[Chunk]:
        """Convert a list of text strings into sequentially indexed Chunks."""
        return [Chunk.create(source_name, i, t) for i, t in enumerate(texts)]
