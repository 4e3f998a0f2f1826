"""PDF text extraction.

Uses PyMuPDF (fitz) for fast PDF text extraction.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import fitz  # PyMuPDF

from docindex.errors import ExtractionError
from docindex.utils.text import normalize_whitespace

LOGGER = logging.getLogger(__name__)


def iter_text_parts(path: Path) -> Iterator[str]:
    """Yield text content from a PDF file page by page."""
    try:
        doc = fitz.open(path)
    except Exception as exc:
        raise ExtractionError(f"could not open PDF file {path}: {exc}") from exc

    try:
        for index in range(len(doc)):
            try:
                text = doc[index].get_text() or ""
            except Exception as exc:
                raise ExtractionError(
                    f"could not extract text from page {index + 1} in {path}: {exc}"
                ) from exc
            normalized = normalize_whitespace([text])
            if normalized:
                yield normalized
    finally:
        doc.close()


def load_pdf_text(path: Path) -> str:
    """Return the text of every page of a PDF, pages separated by a space."""
    return " ".join(iter_text_parts(path))
