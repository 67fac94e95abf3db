"""Cerebro ingest pipeline — text extraction, chunking, embedding writer."""

from cerebro.ingest.base import BaseChunker
from cerebro.ingest.embedding_writer import EmbeddingWriter, IngestConfig, IngestResult
from cerebro.ingest.extract import extract_text
from cerebro.ingest.paragraph import ParagraphChunker

__all__ = [
    "BaseChunker",
    "EmbeddingWriter",
    "IngestConfig",
    "IngestResult",
    "ParagraphChunker",
    "extract_text",
]
