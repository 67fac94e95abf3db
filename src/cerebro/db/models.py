"""Domain models shared by the store, the ranker and the durable mirror."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone


def utcnow() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def chunk_id(source_name: str, sequence_index: int) -> str:
    return f"{source_name}:{sequence_index}"


@dataclass(frozen=True)
class Chunk:
    """A bounded segment of a source document, the unit of retrieval.

    Attributes:
        id: ``"{source_name}:{sequence_index}"``, unique within a collection.
        source_name: Originating document identifier.
        sequence_index: Zero-based position among chunks of the same ingestion.
        text: Non-empty, whitespace-normalized chunk text.
        char_count: ``len(text)``.
        embedding: Vector of dimension D, or None if embedding failed.
    """

    id: str
    source_name: str
    sequence_index: int
    text: str
    char_count: int
    embedding: tuple[float, ...] | None = None

    @classmethod
    def create(
        cls,
        source_name: str,
        sequence_index: int,
        text: str,
        embedding: list[float] | tuple[float, ...] | None = None,
    ) -> Chunk:
        return cls(
            id=chunk_id(source_name, sequence_index),
            source_name=source_name,
            sequence_index=sequence_index,
            text=text,
            char_count=len(text),
            embedding=tuple(embedding) if embedding is not None else None,
        )


@dataclass
class SourceEntry:
    source_name: str
    chunk_count: int
    linked_at: str = field(default_factory=utcnow)


@dataclass
class Collection:
    """A named notebook of ingested chunks, in ingestion order."""

    id: str
    display_name: str
    sources: list[SourceEntry] = field(default_factory=list)
    chunks: list[Chunk] = field(default_factory=list)
    created_at: str = field(default_factory=utcnow)

    @property
    def total_chunks(self) -> int:
        return len(self.chunks)

    def summary(self) -> CollectionSummary:
        return CollectionSummary(
            id=self.id,
            display_name=self.display_name,
            source_count=len(self.sources),
            chunk_count=len(self.chunks),
            created_at=self.created_at,
        )


@dataclass
class CollectionSummary:
    """Counts-only view of a collection, for listings."""

    id: str
    display_name: str
    source_count: int
    chunk_count: int
    created_at: str
