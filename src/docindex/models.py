"""Core docindex data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping


@dataclass(slots=True)
class Document:
    """Term statistics of a single indexed file."""

    term_freq: Mapping[str, int] = field(default_factory=dict)
    count: int = 0
    last_modified: float = 0.0


@dataclass(slots=True)
class SourceFile:
    """A file found by the crawler, not yet extracted."""

    path: Path
    last_modified: float


@dataclass(slots=True)
class SearchResult:
    path: str
    rank: float


@dataclass(slots=True)
class IndexStats:
    document_count: int = 0
    term_count: int = 0
