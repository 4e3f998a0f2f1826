"""Lock-guarded access to a shared inverted index."""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List

from docindex.index.model import InvertedIndex
from docindex.index.search import Searcher
from docindex.index.storage import SnapshotStore
from docindex.models import Document, IndexStats, SearchResult

LOGGER = logging.getLogger(__name__)


class IndexService:
    """Serializes every read and write of one :class:`InvertedIndex`.

    A single exclusive lock is held for the full duration of each call, so
    queries never observe a half-applied :meth:`add_document`. Persistence
    takes the snapshot under the lock and writes it after releasing it.
    """

    def __init__(self, index: InvertedIndex | None = None, store: SnapshotStore | None = None) -> None:
        self._index = index if index is not None else InvertedIndex()
        self._lock = threading.Lock()
        self._save_lock = threading.Lock()
        self.store = store

    @classmethod
    def from_store(cls, store: SnapshotStore) -> "IndexService":
        """Restore from ``store``; raises ``SnapshotError`` when the snapshot is corrupt."""
        state = store.load()
        index = InvertedIndex.restore(state) if state is not None else InvertedIndex()
        LOGGER.info("Loaded %d documents from %s", len(index), store.path)
        return cls(index, store)

    @contextmanager
    def locked(self) -> Iterator[InvertedIndex]:
        """Hold the lock and expose the raw index for a batch of operations."""
        with self._lock:
            yield self._index

    def requires_reindexing(self, path: str, timestamp: float) -> bool:
        with self._lock:
            return self._index.requires_reindexing(path, timestamp)

    def add_document(self, path: str, timestamp: float, content: str) -> Document:
        with self._lock:
            return self._index.add_document(path, timestamp, content)

    def remove_document(self, path: str) -> bool:
        with self._lock:
            return self._index.remove_document(path)

    def search(self, query: str, *, top_k: int | None = None) -> List[SearchResult]:
        with self._lock:
            return Searcher(self._index).search(query, top_k=top_k)

    def stats(self) -> IndexStats:
        with self._lock:
            return self._index.stats()

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return self._index.snapshot()

    def save(self) -> bool:
        """Write a snapshot to the store. Failures are logged, not raised.

        Saves are serialized so an older snapshot never overwrites a newer one.
        """
        if self.store is None:
            return False
        with self._save_lock:
            state = self.snapshot()
            try:
                self.store.save(state)
            except Exception as exc:
                LOGGER.error("Could not save index to %s: %s", self.store.path, exc)
                return False
        return True
