"""Corpus store: per-collection chunk storage with an optional durable mirror.

``InMemoryStore`` is the authoritative store for the life of the process.
``MirroredStore`` adds best-effort propagation of every create/append to a
``DurableStore`` (see ``cerebro.db.repository.Repository``) and reads through
it on cache misses. Mirror failures are logged, never raised.

The collection cache is pluggable: ``UnboundedCache`` keeps everything,
``LRUCache`` bounds the number of collections held in memory.

Appends to one collection are serialized by a per-collection lock; different
collections never contend. Reads return tuple snapshots.
"""

from __future__ import annotations

import logging
import threading
import time
from abc import ABC, abstractmethod
from collections import OrderedDict
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import replace
from typing import Protocol

from cerebro.db.models import Chunk, Collection, CollectionSummary, SourceEntry, chunk_id
from cerebro.errors import DurableStoreError

logger = logging.getLogger(__name__)

DEFAULT_DISPLAY_NAME = "Cerebro"
RECOVERED_DISPLAY_NAME = "Recuperado"


# ------------------------------------------------------------------
# Collection caches
# ------------------------------------------------------------------


class CollectionCache(ABC):
    """In-memory holder of collections, keyed by id."""

    @abstractmethod
    def get(self, collection_id: str) -> Collection | None: ...

    @abstractmethod
    def put(self, collection: Collection) -> None: ...

    @abstractmethod
    def values(self) -> list[Collection]: ...

    def __contains__(self, collection_id: object) -> bool:
        return isinstance(collection_id, str) and self.get(collection_id) is not None


class UnboundedCache(CollectionCache):
    """Keeps every collection; memory grows with ingested content."""

    def __init__(self) -> None:
        self._items: dict[str, Collection] = {}

    def get(self, collection_id: str) -> Collection | None:
        return self._items.get(collection_id)

    def put(self, collection: Collection) -> None:
        self._items[collection.id] = collection

    def values(self) -> list[Collection]:
        return list(self._items.values())

    def __len__(self) -> int:
        return len(self._items)


class LRUCache(CollectionCache):
    """Holds at most *max_collections*, evicting the least recently used."""

    def __init__(self, max_collections: int) -> None:
        if max_collections < 1:
            raise ValueError("max_collections must be >= 1")
        self.max_collections = max_collections
        self._items: OrderedDict[str, Collection] = OrderedDict()
        self._guard = threading.Lock()

    def get(self, collection_id: str) -> Collection | None:
        with self._guard:
            collection = self._items.get(collection_id)
            if collection is not None:
                self._items.move_to_end(collection_id)
            return collection

    def put(self, collection: Collection) -> None:
        with self._guard:
            self._items[collection.id] = collection
            self._items.move_to_end(collection.id)
            while len(self._items) > self.max_collections:
                evicted, _ = self._items.popitem(last=False)
                logger.debug("Evicted collection %s from cache", evicted)

    def values(self) -> list[Collection]:
        with self._guard:
            return list(self._items.values())

    def __len__(self) -> int:
        return len(self._items)


# ------------------------------------------------------------------
# Durable backend contract
# ------------------------------------------------------------------


class DurableStore(Protocol):
    def get(self, collection_id: str) -> Collection | None: ...

    def put(self, collection: Collection) -> None: ...

    def append_fields(
        self, collection_id: str, source: SourceEntry, chunks: Sequence[Chunk]
    ) -> None: ...

    def list_summaries(self) -> list[CollectionSummary]: ...


# ------------------------------------------------------------------
# Store interface
# ------------------------------------------------------------------


class CorpusStore(ABC):
    """Holds the chunks of every collection ("notebook")."""

    @abstractmethod
    def create_collection(self, display_name: str | None = None) -> str:
        """Create an empty collection and return its unique id."""

    @abstractmethod
    def append_chunks(
        self, collection_id: str, source_name: str, chunks: Sequence[Chunk]
    ) -> list[Chunk]:
        """Append the chunks of one ingested document. Returns them as stored."""

    @abstractmethod
    def get_collection(self, collection_id: str) -> Collection | None:
        """Return the collection, or None if it is unknown."""

    @abstractmethod
    def list_collections(self) -> list[CollectionSummary]:
        """Return id, name and counts of every known collection."""

    def get_chunks(self, collection_id: str) -> tuple[Chunk, ...]:
        """Snapshot of the collection's chunks; empty if the id is unknown."""
        collection = self.get_collection(collection_id)
        if collection is None:
            return ()
        return tuple(collection.chunks)


class InMemoryStore(CorpusStore):
    """Process-local store backed by a ``CollectionCache``.

    Args:
        cache: Collection cache; defaults to ``UnboundedCache``.
    """

    def __init__(self, cache: CollectionCache | None = None) -> None:
        self._cache = cache if cache is not None else UnboundedCache()
        self._locks: dict[str, _SharedLock] = {}
        self._locks_guard = threading.Lock()
        self._id_guard = threading.Lock()
        self._last_id_ms = 0

    # ------------------------------------------------------------------
    # CorpusStore API
    # ------------------------------------------------------------------

    def create_collection(self, display_name: str | None = None) -> str:
        collection = Collection(
            id=self._new_id(),
            display_name=display_name or DEFAULT_DISPLAY_NAME,
        )
        with self._locked(collection.id):
            self._cache.put(collection)
            self._on_create(collection)
        logger.info("Created collection %s (%s)", collection.id, collection.display_name)
        return collection.id

    def append_chunks(
        self, collection_id: str, source_name: str, chunks: Sequence[Chunk]
    ) -> list[Chunk]:
        with self._locked(collection_id):
            collection = self._load(collection_id)
            if collection is None:
                logger.warning(
                    "Collection %s is unknown; recreating it as '%s'",
                    collection_id,
                    RECOVERED_DISPLAY_NAME,
                )
                collection = Collection(id=collection_id, display_name=RECOVERED_DISPLAY_NAME)
                self._cache.put(collection)
                self._on_create(collection)

            key = _source_key(collection, source_name, len(chunks))
            stored = [
                replace(
                    c,
                    id=chunk_id(key, i),
                    source_name=source_name,
                    sequence_index=i,
                )
                for i, c in enumerate(chunks)
            ]
            entry = SourceEntry(source_name=source_name, chunk_count=len(stored))

            # Rebind instead of mutating so concurrent readers keep a consistent view.
            collection.chunks = [*collection.chunks, *stored]
            collection.sources = [*collection.sources, entry]
            self._cache.put(collection)
            self._on_append(collection, entry, stored)

        logger.info(
            "Appended %d chunks from '%s' to %s", len(stored), source_name, collection_id
        )
        return stored

    def get_collection(self, collection_id: str) -> Collection | None:
        with self._locked(collection_id):
            return self._load(collection_id)

    def list_collections(self) -> list[CollectionSummary]:
        return [c.summary() for c in self._cache.values()]

    # ------------------------------------------------------------------
    # Hooks for MirroredStore
    # ------------------------------------------------------------------

    def _load(self, collection_id: str) -> Collection | None:
        return self._cache.get(collection_id)

    def _on_create(self, collection: Collection) -> None:
        pass

    def _on_append(
        self, collection: Collection, entry: SourceEntry, stored: list[Chunk]
    ) -> None:
        pass

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @contextmanager
    def _locked(self, collection_id: str) -> Iterator[None]:
        """Hold the collection's lock; the entry is dropped once no caller uses it."""
        with self._locks_guard:
            shared = self._locks.get(collection_id)
            if shared is None:
                shared = self._locks[collection_id] = _SharedLock()
            shared.users += 1
        try:
            with shared.lock:
                yield
        finally:
            with self._locks_guard:
                shared.users -= 1
                if shared.users == 0:
                    del self._locks[collection_id]

    def _new_id(self) -> str:
        with self._id_guard:
            now_ms = time.time_ns() // 1_000_000
            self._last_id_ms = max(now_ms, self._last_id_ms + 1)
            return f"store-{self._last_id_ms}"


class MirroredStore(InMemoryStore):
    """In-memory store with one-way, best-effort propagation to a durable backend.

    Args:
        durable: Backend implementing ``DurableStore``.
        cache: Collection cache; defaults to ``UnboundedCache``.
    """

    def __init__(self, durable: DurableStore, cache: CollectionCache | None = None) -> None:
        super().__init__(cache)
        self._durable = durable

    def list_collections(self) -> list[CollectionSummary]:
        """Summaries from the mirror, with cached collections taking precedence."""
        try:
            mirrored = self._durable.list_summaries()
        except DurableStoreError as exc:
            logger.warning("Durable mirror unavailable, listing cache only: %s", exc)
            return super().list_collections()

        cached = {s.id: s for s in super().list_collections()}
        summaries = [cached.pop(s.id, s) for s in mirrored]
        summaries.extend(cached.values())
        return summaries

    def _load(self, collection_id: str) -> Collection | None:
        collection = self._cache.get(collection_id)
        if collection is not None:
            return collection
        try:
            collection = self._durable.get(collection_id)
        except DurableStoreError as exc:
            logger.warning("Durable read of %s failed: %s", collection_id, exc)
            return None
        if collection is not None:
            logger.debug("Loaded collection %s from durable mirror", collection_id)
            self._cache.put(collection)
        return collection

    def _on_create(self, collection: Collection) -> None:
        try:
            self._durable.put(collection)
        except DurableStoreError as exc:
            logger.warning("Durable write of %s failed: %s", collection.id, exc)

    def _on_append(
        self, collection: Collection, entry: SourceEntry, stored: list[Chunk]
    ) -> None:
        try:
            self._durable.append_fields(collection.id, entry, stored)
        except DurableStoreError as exc:
            logger.warning(
                "Durable append of '%s' to %s failed: %s",
                entry.source_name,
                collection.id,
                exc,
            )


class _SharedLock:
    """RLock plus the number of callers currently holding or waiting on it."""

    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = threading.RLock()
        self.users = 0


def _source_key(collection: Collection, source_name: str, chunk_count: int) -> str:
    """Chunk-id prefix for a new ingestion of *source_name*.

    The first ingestion uses the bare name; re-ingestions become ``name@2``,
    ``name@3``… The suffix is bumped past any id already in the collection,
    since a source may itself be named like ``name@2``.
    """
    taken = {c.id for c in collection.chunks}
    previous = sum(1 for s in collection.sources if s.source_name == source_name)
    n = previous + 1
    key = source_name if previous == 0 else f"{source_name}@{n}"
    while any(chunk_id(key, i) in taken for i in range(chunk_count)):
        n += 1
        key = f"{source_name}@{n}"
    return key
