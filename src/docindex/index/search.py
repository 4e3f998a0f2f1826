"""TF-IDF ranking over the inverted index."""

from __future__ import annotations

import logging
import math
from typing import List, Mapping

from docindex.index.model import InvertedIndex
from docindex.models import Document, SearchResult
from docindex.utils.text import tokenize

LOGGER = logging.getLogger(__name__)


def compute_tf(term: str, document: Document) -> float:
    """Share of the document's tokens that are ``term``; 0.0 for empty documents."""
    if document.count == 0:
        return 0.0
    return document.term_freq.get(term, 0) / document.count


def compute_idf(term: str, total_documents: int, document_freq: Mapping[str, int]) -> float:
    """``log10(N / df)`` with ``df`` floored at 1 so unseen terms stay finite.

    Returns NaN for an empty corpus.
    """
    if total_documents <= 0:
        return math.nan
    frequency = max(document_freq.get(term, 0), 1)
    return math.log10(total_documents / frequency)


class Searcher:
    """Rank every indexed document against a query."""

    def __init__(self, index: InvertedIndex) -> None:
        self.index = index

    def search(self, query: str, *, top_k: int | None = None) -> List[SearchResult]:
        tokens = tokenize(query)
        LOGGER.debug("Query tokens: %s", tokens)

        total_documents = len(self.index)
        document_freq = self.index.document_freq
        idf = {term: compute_idf(term, total_documents, document_freq) for term in set(tokens)}

        results: List[SearchResult] = []
        for path, document in self.index.items():
            rank = sum(compute_tf(term, document) * idf[term] for term in tokens)
            if math.isfinite(rank):
                results.append(SearchResult(path=path, rank=rank))

        results.sort(key=lambda result: (-result.rank, result.path))
        if top_k is not None:
            results = results[: max(top_k, 0)]
        return results
