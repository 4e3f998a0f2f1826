"""In-memory inverted index with per-document term statistics."""

from __future__ import annotations

from collections import Counter
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping

from docindex.errors import SnapshotError
from docindex.models import Document, IndexStats
from docindex.utils.text import Lexer


class InvertedIndex:
    """Maps document paths to term frequencies and tracks document frequency.

    Every mutation goes through :meth:`add_document` or :meth:`remove_document`,
    which keep ``document_freq[t]`` equal to the number of documents whose
    term map contains ``t``. Terms whose document frequency drops to zero are
    removed.
    """

    def __init__(self) -> None:
        self._documents: Dict[str, Document] = {}
        self._document_freq: Dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._documents)

    def __contains__(self, path: object) -> bool:
        return path in self._documents

    def paths(self) -> Iterator[str]:
        return iter(list(self._documents))

    def items(self) -> Iterator[tuple[str, Document]]:
        """Iterate over stored documents with read-only term maps."""
        for path, document in self._documents.items():
            yield path, Document(
                term_freq=MappingProxyType(document.term_freq),
                count=document.count,
                last_modified=document.last_modified,
            )

    def get_document(self, path: str) -> Document | None:
        document = self._documents.get(path)
        if document is None:
            return None
        return Document(
            term_freq=dict(document.term_freq),
            count=document.count,
            last_modified=document.last_modified,
        )

    @property
    def document_freq(self) -> Mapping[str, int]:
        """Read-only view of the document frequency map."""
        return MappingProxyType(self._document_freq)

    def document_frequency(self, term: str) -> int:
        return self._document_freq.get(term, 0)

    def requires_reindexing(self, path: str, timestamp: float) -> bool:
        """Return True when ``path`` is unknown or stored with an older timestamp."""
        document = self._documents.get(path)
        if document is None:
            return True
        return document.last_modified < timestamp

    def add_document(self, path: str, timestamp: float, content: str) -> Document:
        """Tokenize ``content`` and store it under ``path``, replacing any previous entry."""
        self.remove_document(path)

        term_freq = Counter(Lexer(content))
        document = Document(
            term_freq=dict(term_freq),
            count=sum(term_freq.values()),
            last_modified=timestamp,
        )

        for term in document.term_freq:
            self._document_freq[term] = self._document_freq.get(term, 0) + 1
        self._documents[path] = document
        return document

    def remove_document(self, path: str) -> bool:
        """Drop ``path`` and retract its document frequency contributions."""
        document = self._documents.pop(path, None)
        if document is None:
            return False

        for term in document.term_freq:
            remaining = self._document_freq[term] - 1
            if remaining == 0:
                del self._document_freq[term]
            else:
                self._document_freq[term] = remaining
        return True

    def stats(self) -> IndexStats:
        return IndexStats(
            document_count=len(self._documents),
            term_count=len(self._document_freq),
        )

    def snapshot(self) -> Dict[str, Any]:
        """Capture the full index state as plain, JSON-compatible data."""
        return {
            "documents": {
                path: {
                    "term_freq": dict(document.term_freq),
                    "count": document.count,
                    "last_modified": document.last_modified,
                }
                for path, document in self._documents.items()
            },
            "document_freq": dict(self._document_freq),
        }

    @classmethod
    def restore(cls, state: Mapping[str, Any]) -> "InvertedIndex":
        """Rebuild an index from :meth:`snapshot` output.

        Raises:
            SnapshotError: the state is missing fields, has the wrong types, or
                its counts and document frequencies disagree with the term maps.
        """
        try:
            documents = state["documents"]
            document_freq = state["document_freq"]
        except (KeyError, TypeError) as exc:
            raise SnapshotError(f"snapshot is missing field {exc}") from exc
        if not isinstance(documents, Mapping) or not isinstance(document_freq, Mapping):
            raise SnapshotError("snapshot fields must be mappings")

        index = cls()
        try:
            for path, entry in documents.items():
                index._documents[str(path)] = Document(
                    term_freq={str(term): int(n) for term, n in entry["term_freq"].items()},
                    count=int(entry["count"]),
                    last_modified=float(entry["last_modified"]),
                )
            index._document_freq = {str(term): int(n) for term, n in document_freq.items()}
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise SnapshotError(f"malformed snapshot entry: {exc!r}") from exc

        index._check_consistency()
        return index

    def _check_consistency(self) -> None:
        expected: Dict[str, int] = {}
        for path, document in self._documents.items():
            if any(n <= 0 for n in document.term_freq.values()):
                raise SnapshotError(f"non-positive term count in {path!r}")
            if sum(document.term_freq.values()) != document.count:
                raise SnapshotError(f"token count of {path!r} does not match its terms")
            for term in document.term_freq:
                expected[term] = expected.get(term, 0) + 1
        if self._document_freq != expected:
            raise SnapshotError("document frequencies do not match the stored documents")
