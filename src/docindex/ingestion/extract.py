"""Dispatch text extraction by file extension."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict

from docindex.errors import ExtractionError, UnsupportedFormatError
from docindex.ingestion.pdf_loader import load_pdf_text
from docindex.ingestion.xml_loader import load_xml_text


def load_plain_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        raise ExtractionError(f"could not read file {path}: {exc}") from exc


EXTRACTORS: Dict[str, Callable[[Path], str]] = {
    ".txt": load_plain_text,
    ".md": load_plain_text,
    ".xml": load_xml_text,
    ".xhtml": load_xml_text,
    ".pdf": load_pdf_text,
}

SUPPORTED_EXTENSIONS = frozenset(EXTRACTORS)


def is_supported(path: Path) -> bool:
    return path.suffix.lower() in SUPPORTED_EXTENSIONS


def extract_text(path: Path) -> str:
    """Return the character content of ``path``.

    Raises:
        UnsupportedFormatError: no extractor handles the extension.
        ExtractionError: the file could not be read or parsed.
    """
    extension = path.suffix.lower()
    extractor = EXTRACTORS.get(extension)
    if extractor is None:
        raise UnsupportedFormatError(
            f"unsupported file extension {extension or '(none)'} for file {path}"
        )
    return extractor(path)
