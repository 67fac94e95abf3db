"""Forward-only migration runner for the durable mirror schema."""

from __future__ import annotations

import sqlite3

# schema_version is the bootstrap table, created before migrations run.
_CREATE_SCHEMA_VERSION = """
CREATE TABLE IF NOT EXISTS schema_version (
    version     INTEGER NOT NULL,
    applied_at  DATETIME NOT NULL DEFAULT (datetime('now'))
)
"""

_V1_SQL = """
CREATE TABLE IF NOT EXISTS collections (
    id              TEXT PRIMARY KEY,
    display_name    TEXT NOT NULL,
    created_at      TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS sources (
    collection_id   TEXT NOT NULL REFERENCES collections(id) ON DELETE CASCADE,
    position        INTEGER NOT NULL,
    source_name     TEXT NOT NULL,
    chunk_count     INTEGER NOT NULL,
    linked_at       TEXT NOT NULL,
    PRIMARY KEY (collection_id, position)
);

CREATE TABLE IF NOT EXISTS chunks (
    collection_id   TEXT NOT NULL REFERENCES collections(id) ON DELETE CASCADE,
    position        INTEGER NOT NULL,
    chunk_id        TEXT NOT NULL,
    source_name     TEXT NOT NULL,
    sequence_index  INTEGER NOT NULL,
    text            TEXT NOT NULL,
    embedding       BLOB,
    PRIMARY KEY (collection_id, position),
    UNIQUE (collection_id, chunk_id)
);
"""

# Append-only. Each entry: (version: int, sql: str).
# executescript() issues an implicit COMMIT before running.
MIGRATIONS: list[tuple[int, str]] = [
    (1, _V1_SQL),
]


def run_migrations(conn: sqlite3.Connection) -> None:
    """Apply all pending migrations in ascending version order.

    Idempotent: safe to call on a database at any version.
    """
    conn.execute(_CREATE_SCHEMA_VERSION)
    conn.commit()

    row = conn.execute("SELECT MAX(version) FROM schema_version").fetchone()
    current = row[0] if row[0] is not None else 0

    for version, sql in MIGRATIONS:
        if version > current:
            conn.executescript(sql)
            conn.execute(
                "INSERT INTO schema_version (version) VALUES (?)", (version,)
            )
            conn.commit()
