"""Tests for InvertedIndex."""

from __future__ import annotations

import pytest

from docindex.errors import SnapshotError
from docindex.index.model import InvertedIndex
from docindex.models import IndexStats


def _assert_invariants(index: InvertedIndex) -> None:
    documents = dict(index.items())
    for document in documents.values():
        assert sum(document.term_freq.values()) == document.count
        assert all(n > 0 for n in document.term_freq.values())

    expected: dict[str, int] = {}
    for document in documents.values():
        for term in document.term_freq:
            expected[term] = expected.get(term, 0) + 1
    assert dict(index.document_freq) == expected
    assert all(n > 0 for n in index.document_freq.values())


@pytest.fixture
def index() -> InvertedIndex:
    idx = InvertedIndex()
    idx.add_document("a.txt", 10.0, "the cat sat")
    idx.add_document("b.txt", 20.0, "the dog sat")
    return idx


class TestAddDocument:
    """Test add_document."""

    def test_builds_term_frequencies(self) -> None:
        """Should count every term occurrence."""
        idx = InvertedIndex()
        document = idx.add_document("doc.txt", 1.0, "Cats and cats, and dogs")

        assert document.term_freq == {"cat": 2, "and": 2, ",": 1, "dog": 1}
        assert document.count == 6
        assert document.last_modified == 1.0

    def test_document_frequency_counts_distinct_documents(self, index: InvertedIndex) -> None:
        """Should count each document once per term."""
        assert index.document_frequency("the") == 2
        assert index.document_frequency("sat") == 2
        assert index.document_frequency("cat") == 1
        assert index.document_frequency("dog") == 1
        assert index.document_frequency("bird") == 0

    def test_repeated_term_counts_once_for_df(self) -> None:
        """A term repeated inside one document increments DF by one."""
        idx = InvertedIndex()
        idx.add_document("doc.txt", 1.0, "echo echo echo")

        assert idx.document_frequency("echo") == 1

    def test_empty_content(self) -> None:
        """Empty content yields a zero-count document."""
        idx = InvertedIndex()
        document = idx.add_document("empty.txt", 1.0, "")

        assert document.count == 0
        assert document.term_freq == {}
        assert "empty.txt" in idx
        assert idx.stats() == IndexStats(document_count=1, term_count=0)

    def test_readd_replaces_without_double_counting(self, index: InvertedIndex) -> None:
        """Re-adding a path replaces it entirely."""
        index.add_document("a.txt", 30.0, "bird flew")

        assert index.get_document("a.txt").term_freq == {"bird": 1, "flew": 1}
        assert index.document_frequency("cat") == 0
        assert "cat" not in index.document_freq
        assert index.document_frequency("the") == 1
        assert index.document_frequency("sat") == 1
        _assert_invariants(index)

    def test_readd_same_content_is_stable(self, index: InvertedIndex) -> None:
        """Adding identical content twice leaves DF unchanged."""
        before = dict(index.document_freq)
        index.add_document("a.txt", 11.0, "the cat sat")

        assert dict(index.document_freq) == before


class TestRemoveDocument:
    """Test remove_document."""

    def test_remove_absent_is_noop(self, index: InvertedIndex) -> None:
        """Removing an unknown path changes nothing."""
        before = index.snapshot()

        assert index.remove_document("missing.txt") is False
        assert index.snapshot() == before

    def test_remove_prunes_zero_terms(self, index: InvertedIndex) -> None:
        """Terms only in the removed document disappear."""
        assert index.remove_document("a.txt") is True

        assert "a.txt" not in index
        assert "cat" not in index.document_freq
        assert index.document_frequency("the") == 1
        _assert_invariants(index)

    def test_add_then_remove_restores_document_freq(self, index: InvertedIndex) -> None:
        """Add followed by remove is an exact inverse for DF."""
        before = dict(index.document_freq)

        index.add_document("c.txt", 5.0, "the bird sat on 3 wires!")
        index.remove_document("c.txt")

        assert dict(index.document_freq) == before

    def test_remove_all(self, index: InvertedIndex) -> None:
        """Removing every document empties both maps."""
        index.remove_document("a.txt")
        index.remove_document("b.txt")

        assert len(index) == 0
        assert dict(index.document_freq) == {}


class TestInvariants:
    """Invariants hold across mixed mutation sequences."""

    def test_mixed_sequence(self) -> None:
        """DF matches document membership after every step."""
        idx = InvertedIndex()
        steps = [
            ("add", "a", "alpha beta gamma"),
            ("add", "b", "beta beta delta"),
            ("add", "a", "gamma epsilon"),
            ("remove", "b", None),
            ("add", "c", ""),
            ("add", "b", "alpha 42 ?"),
            ("remove", "missing", None),
            ("remove", "a", None),
        ]
        for number, (action, path, content) in enumerate(steps):
            if action == "add":
                idx.add_document(path, float(number), content)
            else:
                idx.remove_document(path)
            _assert_invariants(idx)


class TestRequiresReindexing:
    """Test requires_reindexing."""

    def test_unknown_path(self) -> None:
        """Unknown paths always need indexing."""
        assert InvertedIndex().requires_reindexing("new.txt", 0.0) is True

    def test_timestamp_monotonicity(self) -> None:
        """Only strictly newer timestamps trigger re-indexing."""
        idx = InvertedIndex()
        idx.add_document("doc.txt", 100.0, "content")

        assert idx.requires_reindexing("doc.txt", 100.0) is False
        assert idx.requires_reindexing("doc.txt", 101.0) is True
        assert idx.requires_reindexing("doc.txt", 99.0) is False

    def test_is_pure(self) -> None:
        """Checking does not modify the index."""
        idx = InvertedIndex()
        idx.requires_reindexing("doc.txt", 1.0)

        assert len(idx) == 0


class TestReadAccess:
    """Read accessors do not leak mutable state."""

    def test_get_document_returns_copy(self, index: InvertedIndex) -> None:
        """Mutating a returned document does not affect the index."""
        document = index.get_document("a.txt")
        document.term_freq["cat"] = 99

        assert index.get_document("a.txt").term_freq["cat"] == 1

    def test_items_term_maps_are_read_only(self, index: InvertedIndex) -> None:
        """Iterated documents reject writes to their term maps."""
        documents = dict(index.items())

        with pytest.raises(TypeError):
            documents["a.txt"].term_freq["cat"] = 99  # type: ignore[index]
        assert index.get_document("a.txt").term_freq["cat"] == 1

    def test_get_missing_document(self, index: InvertedIndex) -> None:
        """Unknown path returns None."""
        assert index.get_document("nope") is None

    def test_document_freq_is_read_only(self, index: InvertedIndex) -> None:
        """DF view rejects writes."""
        with pytest.raises(TypeError):
            index.document_freq["cat"] = 5  # type: ignore[index]

    def test_stats(self, index: InvertedIndex) -> None:
        """Stats report documents and distinct terms."""
        assert index.stats() == IndexStats(document_count=2, term_count=4)

    def test_paths(self, index: InvertedIndex) -> None:
        """Paths lists every document."""
        assert sorted(index.paths()) == ["a.txt", "b.txt"]


class TestSnapshot:
    """Test snapshot and restore."""

    def test_round_trip(self, index: InvertedIndex) -> None:
        """Restore reproduces identical state."""
        state = index.snapshot()
        restored = InvertedIndex.restore(state)

        assert restored.snapshot() == state
        assert dict(restored.document_freq) == dict(index.document_freq)
        assert restored.get_document("a.txt") == index.get_document("a.txt")

    def test_snapshot_shape(self, index: InvertedIndex) -> None:
        """Snapshot uses plain data."""
        state = index.snapshot()

        assert state["documents"]["a.txt"] == {
            "term_freq": {"the": 1, "cat": 1, "sat": 1},
            "count": 3,
            "last_modified": 10.0,
        }
        assert state["document_freq"]["the"] == 2

    def test_snapshot_is_detached(self, index: InvertedIndex) -> None:
        """Mutating a snapshot does not affect the index."""
        state = index.snapshot()
        state["documents"]["a.txt"]["term_freq"]["cat"] = 7
        state["document_freq"]["cat"] = 7

        assert index.get_document("a.txt").term_freq["cat"] == 1
        assert index.document_frequency("cat") == 1

    def test_restore_empty(self) -> None:
        """Empty state restores an empty index."""
        restored = InvertedIndex.restore({"documents": {}, "document_freq": {}})
        assert len(restored) == 0

    @pytest.mark.parametrize(
        "state",
        [
            {},
            {"documents": {}},
            {"documents": [], "document_freq": {}},
            {"documents": {"a": {"count": 1}}, "document_freq": {}},
            {"documents": {"a": {"term_freq": {"x": "many"}, "count": 1, "last_modified": 0}}, "document_freq": {}},
            None,
            {"documents": {"a": {"term_freq": {"cat": 1}, "count": 1, "last_modified": 0}}, "document_freq": {}},
            {"documents": {"a": {"term_freq": {"cat": 1}, "count": 1, "last_modified": 0}}, "document_freq": {"cat": 2}},
            {"documents": {}, "document_freq": {"cat": 1}},
            {"documents": {"a": {"term_freq": {"cat": 2}, "count": 3, "last_modified": 0}}, "document_freq": {"cat": 1}},
            {"documents": {"a": {"term_freq": {"cat": 0}, "count": 0, "last_modified": 0}}, "document_freq": {"cat": 1}},
            {"documents": {"a": {"term_freq": {"cat": -1, "dog": 2}, "count": 1, "last_modified": 0}}, "document_freq": {"cat": 1, "dog": 1}},
            {"documents": {"a": {"term_freq": {}, "count": 0, "last_modified": 0}}, "document_freq": {"cat": 0}},
        ],
    )
    def test_restore_malformed(self, state) -> None:
        """Malformed state raises SnapshotError."""
        with pytest.raises(SnapshotError):
            InvertedIndex.restore(state)

    def test_restore_inconsistent_is_rejected_before_use(self) -> None:
        """A DF map that disagrees with the term maps never reaches remove_document."""
        state = {
            "documents": {"a": {"term_freq": {"cat": 1}, "count": 1, "last_modified": 0}},
            "document_freq": {},
        }

        with pytest.raises(SnapshotError, match="document frequencies"):
            InvertedIndex.restore(state)

    def test_restore_zero_token_document(self) -> None:
        """Empty documents restore with count 0 and no DF entries."""
        state = {
            "documents": {"empty.txt": {"term_freq": {}, "count": 0, "last_modified": 1.0}},
            "document_freq": {},
        }

        restored = InvertedIndex.restore(state)

        assert restored.get_document("empty.txt").count == 0
        _assert_invariants(restored)
