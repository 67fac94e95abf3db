"""Repository over the SQLite durable mirror.

Implements the ``DurableStore`` contract used by ``MirroredStore``:
``get``, ``put``, ``append_fields`` and ``list_summaries``. Embeddings are stored as
sqlite-vec float32 blobs and decoded with ``vec_to_json()``.

Every ``sqlite3.Error`` is wrapped: writes raise ``DurableWriteFailure``,
reads raise ``DurableStoreError``.
"""

from __future__ import annotations

import json
import sqlite3
from collections.abc import Sequence

import sqlite_vec

from cerebro.db.models import Chunk, Collection, CollectionSummary, SourceEntry
from cerebro.errors import DurableStoreError, DurableWriteFailure


class Repository:
    """Data access layer for collections, their sources and their chunks.

    Wraps an open sqlite3.Connection. The connection is owned by the caller
    and must be closed after use.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        """Initialise with an open database connection.

        Args:
            conn: An open sqlite3.Connection with sqlite-vec loaded and schema
                initialised (see cerebro.db.schema.initialize).
        """
        self._conn = conn

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, collection_id: str) -> Collection | None:
        """Return the full collection, or None if the mirror does not have it."""
        try:
            row = self._conn.execute(
                "SELECT id, display_name, created_at FROM collections WHERE id = ?",
                (collection_id,),
            ).fetchone()
            if row is None:
                return None
            source_rows = self._conn.execute(
                """
                SELECT source_name, chunk_count, linked_at FROM sources
                WHERE collection_id = ? ORDER BY position
                """,
                (collection_id,),
            ).fetchall()
            chunk_rows = self._conn.execute(
                """
                SELECT chunk_id, source_name, sequence_index, text,
                       CASE WHEN embedding IS NULL THEN NULL
                            ELSE vec_to_json(embedding) END AS embedding_json
                FROM chunks WHERE collection_id = ? ORDER BY position
                """,
                (collection_id,),
            ).fetchall()
        except sqlite3.Error as exc:
            raise DurableStoreError(
                f"Could not read collection '{collection_id}': {exc}"
            ) from exc

        return Collection(
            id=row["id"],
            display_name=row["display_name"],
            created_at=row["created_at"],
            sources=[_row_to_source(r) for r in source_rows],
            chunks=[_row_to_chunk(r) for r in chunk_rows],
        )

    def list_summaries(self) -> list[CollectionSummary]:
        """Return every collection with source and chunk counts, oldest first.

        Chunk rows are counted, not loaded.
        """
        try:
            rows = self._conn.execute(
                """
                SELECT c.id, c.display_name, c.created_at,
                       (SELECT COUNT(*) FROM sources s WHERE s.collection_id = c.id)
                           AS source_count,
                       (SELECT COUNT(*) FROM chunks k WHERE k.collection_id = c.id)
                           AS chunk_count
                FROM collections c ORDER BY c.created_at, c.id
                """
            ).fetchall()
        except sqlite3.Error as exc:
            raise DurableStoreError(f"Could not list collections: {exc}") from exc
        return [
            CollectionSummary(
                id=r["id"],
                display_name=r["display_name"],
                source_count=r["source_count"],
                chunk_count=r["chunk_count"],
                created_at=r["created_at"],
            )
            for r in rows
        ]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def put(self, collection: Collection) -> None:
        """Write *collection* in full, replacing any mirrored copy."""
        try:
            with self._conn:
                self._conn.execute(
                    "DELETE FROM collections WHERE id = ?", (collection.id,)
                )
                self._conn.execute(
                    "INSERT INTO collections (id, display_name, created_at) VALUES (?, ?, ?)",
                    (collection.id, collection.display_name, collection.created_at),
                )
                self._insert_sources(collection.id, collection.sources, start=0)
                self._insert_chunks(collection.id, collection.chunks, start=0)
        except sqlite3.Error as exc:
            raise DurableWriteFailure(
                f"Could not write collection '{collection.id}': {exc}"
            ) from exc

    def append_fields(
        self,
        collection_id: str,
        source: SourceEntry,
        chunks: Sequence[Chunk],
    ) -> None:
        """Append one source entry and its chunks after the existing rows."""
        try:
            with self._conn:
                exists = self._conn.execute(
                    "SELECT 1 FROM collections WHERE id = ?", (collection_id,)
                ).fetchone()
                if exists is None:
                    raise DurableWriteFailure(
                        f"Collection '{collection_id}' is not in the mirror."
                    )
                self._insert_sources(
                    collection_id, [source], start=self._next_position("sources", collection_id)
                )
                self._insert_chunks(
                    collection_id, chunks, start=self._next_position("chunks", collection_id)
                )
        except sqlite3.Error as exc:
            raise DurableWriteFailure(
                f"Could not append to collection '{collection_id}': {exc}"
            ) from exc

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _next_position(self, table: str, collection_id: str) -> int:
        row = self._conn.execute(
            f"SELECT COALESCE(MAX(position) + 1, 0) FROM {table} WHERE collection_id = ?",  # noqa: S608
            (collection_id,),
        ).fetchone()
        return row[0]

    def _insert_sources(
        self, collection_id: str, sources: Sequence[SourceEntry], start: int
    ) -> None:
        self._conn.executemany(
            """
            INSERT INTO sources (collection_id, position, source_name, chunk_count, linked_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            [
                (collection_id, start + i, s.source_name, s.chunk_count, s.linked_at)
                for i, s in enumerate(sources)
            ],
        )

    def _insert_chunks(
        self, collection_id: str, chunks: Sequence[Chunk], start: int
    ) -> None:
        self._conn.executemany(
            """
            INSERT INTO chunks
                (collection_id, position, chunk_id, source_name, sequence_index, text, embedding)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            [
                (
                    collection_id,
                    start + i,
                    c.id,
                    c.source_name,
                    c.sequence_index,
                    c.text,
                    sqlite_vec.serialize_float32(list(c.embedding))
                    if c.embedding
                    else None,
                )
                for i, c in enumerate(chunks)
            ],
        )


# ------------------------------------------------------------------
# Row → model helpers
# ------------------------------------------------------------------

def _row_to_source(row: sqlite3.Row) -> SourceEntry:
    return SourceEntry(
        source_name=row["source_name"],
        chunk_count=row["chunk_count"],
        linked_at=row["linked_at"],
    )


def _row_to_chunk(row: sqlite3.Row) -> Chunk:
    embedding = row["embedding_json"]
    return Chunk(
        id=row["chunk_id"],
        source_name=row["source_name"],
        sequence_index=row["sequence_index"],
        text=row["text"],
        char_count=len(row["text"]),
        embedding=tuple(json.loads(embedding)) if embedding is not None else None,
    )
