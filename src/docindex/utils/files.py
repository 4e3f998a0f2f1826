"""Utility helpers for working with files."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

from docindex.models import SourceFile

LOGGER = logging.getLogger(__name__)


def iter_source_files(root: Path) -> Iterator[SourceFile]:
    """Yield files under ``root`` in sorted order, skipping dot entries and symlinked directories."""
    try:
        children = sorted(root.iterdir())
    except OSError as exc:
        LOGGER.error("Could not open directory %s for indexing: %s", root, exc)
        return

    for child in children:
        if child.name.startswith("."):
            continue
        if child.is_symlink() and child.is_dir():
            continue
        if child.is_dir():
            yield from iter_source_files(child)
        elif child.is_file():
            try:
                mtime = child.stat().st_mtime
            except OSError as exc:
                LOGGER.error("Could not stat %s: %s", child, exc)
                continue
            yield SourceFile(path=child, last_modified=mtime)
