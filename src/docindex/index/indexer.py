"""Crawl a document tree into the index."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable

from docindex.errors import ExtractionError
from docindex.index.model import InvertedIndex
from docindex.index.service import IndexService
from docindex.ingestion.extract import extract_text, is_supported
from docindex.models import SourceFile
from docindex.utils.files import iter_source_files

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class CrawlStats:
    indexed: int = 0
    unchanged: int = 0
    unsupported: int = 0
    failed: int = 0
    processed_files: list[Path] = field(default_factory=list)

    def increment(self, status: str, path: Path) -> None:
        if status == "indexed":
            self.indexed += 1
        elif status == "unchanged":
            self.unchanged += 1
        elif status == "unsupported":
            self.unsupported += 1
        else:
            self.failed += 1
        self.processed_files.append(path)

    def as_dict(self) -> dict[str, int]:
        return {
            "indexed": self.indexed,
            "unchanged": self.unchanged,
            "unsupported": self.unsupported,
            "failed": self.failed,
        }


class Indexer:
    """Feeds changed files into an :class:`IndexService`.

    With ``lock_scope="file"`` the lock is taken per file for the re-index
    check and again for the add, and text extraction runs unlocked; queries
    wait at most for one tokenization. With ``lock_scope="walk"`` the lock is
    held for the entire pass, so queries block until the crawl finishes but
    never see a partially crawled tree.

    Only one crawl runs at a time per indexer.
    """

    def __init__(
        self,
        service: IndexService,
        *,
        extractor: Callable[[Path], str] = extract_text,
        lock_scope: str = "file",
    ) -> None:
        if lock_scope not in ("file", "walk"):
            raise ValueError(f"unknown lock scope {lock_scope!r}")
        self.service = service
        self.extractor = extractor
        self.lock_scope = lock_scope
        self._crawl_lock = threading.Lock()

    def index(self, files: Iterable[SourceFile]) -> CrawlStats:
        """Index every changed file; per-file errors are logged and skipped."""
        stats = CrawlStats()
        if self.lock_scope == "walk":
            with self.service.locked() as index:
                for source in files:
                    stats.increment(self._index_single(source, index), source.path)
        else:
            for source in files:
                stats.increment(self._index_single(source, None), source.path)
        return stats

    def _index_single(self, source: SourceFile, index: InvertedIndex | None) -> str:
        if not is_supported(source.path):
            LOGGER.debug("Skipping unsupported file %s", source.path)
            return "unsupported"

        target = index if index is not None else self.service
        path = str(source.path)
        if not target.requires_reindexing(path, source.last_modified):
            return "unchanged"

        LOGGER.info("Indexing %s...", path)
        try:
            content = self.extractor(source.path)
        except ExtractionError as exc:
            LOGGER.error("%s", exc)
            return "failed"
        except Exception as exc:
            LOGGER.error("Failed to process %s: %s", path, exc)
            return "failed"

        target.add_document(path, source.last_modified, content)
        return "indexed"

    def crawl(self, root: Path, *, wait: bool = True) -> CrawlStats | None:
        """Walk ``root``, index changed files and save the snapshot if anything changed.

        With ``wait=False`` returns ``None`` immediately when another crawl is
        already running.
        """
        if not self._crawl_lock.acquire(blocking=wait):
            LOGGER.info("Crawl of %s skipped, another crawl is running", root)
            return None
        try:
            stats = self.index(iter_source_files(root))
            if stats.indexed > 0:
                self.service.save()
        finally:
            self._crawl_lock.release()

        LOGGER.info(
            "Finished indexing %s: indexed %d, unchanged %d, unsupported %d, failed %d",
            root,
            stats.indexed,
            stats.unchanged,
            stats.unsupported,
            stats.failed,
        )
        return stats
