"""Cerebro durable mirror layer."""

from cerebro.db.connection import Database
from cerebro.db.migrations import MIGRATIONS, run_migrations
from cerebro.db.repository import Repository
from cerebro.db.schema import initialize

__all__ = [
    "Database",
    "initialize",
    "run_migrations",
    "MIGRATIONS",
    "Repository",
]
