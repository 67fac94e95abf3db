"""Document text extraction: PDF via pypdf, everything else as UTF-8."""

from __future__ import annotations

import logging
from pathlib import Path

import pypdf
from pypdf.errors import PyPdfError

logger = logging.getLogger(__name__)

DEFAULT_MAX_CHARS = 50_000
UNREADABLE_PDF_TEXT = "Texto no legible del PDF."

_PDF_EXTS = {".pdf"}


def extract_text(path: Path | str, max_chars: int = DEFAULT_MAX_CHARS) -> str:
    """Return the text of the document at *path*, truncated to *max_chars*.

    PDFs that pypdf cannot parse yield ``UNREADABLE_PDF_TEXT`` instead of
    failing the ingestion.
    """
    path = Path(path)
    if path.suffix.lower() in _PDF_EXTS:
        text = _extract_pdf(path)
    else:
        text = path.read_text(encoding="utf-8", errors="replace")

    if len(text) > max_chars:
        logger.info(
            "Truncated %s from %d to %d characters", path.name, len(text), max_chars
        )
        text = text[:max_chars]
    return text


def _extract_pdf(path: Path) -> str:
    """Extract all page text from the PDF at *path*, pages separated by blank lines."""
    try:
        reader = pypdf.PdfReader(path)
        parts: list[str] = []
        for page in reader.pages:
            stripped = (page.extract_text() or "").strip()
            if stripped:
                parts.append(stripped)
    except (PyPdfError, ValueError) as exc:
        logger.warning("Could not read PDF %s: %s", path.name, exc)
        return UNREADABLE_PDF_TEXT
    return "\n\n".join(parts)
