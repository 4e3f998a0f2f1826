"""Exceptions raised by docindex."""

from __future__ import annotations


class DocIndexError(Exception):
    """Base class for docindex errors."""


class ExtractionError(DocIndexError):
    """Raised when text cannot be extracted from a file."""


class UnsupportedFormatError(ExtractionError):
    """Raised for files whose extension has no extractor."""


class SnapshotError(DocIndexError):
    """Raised when a persisted index snapshot is unreadable or malformed."""
