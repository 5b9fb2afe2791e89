"""Tests for fingerprints and resurrection matching."""

import pytest

from Kindling.config.settings import ResurrectionConfig
from Kindling.core.embedding import BagOfWordsVectorizer, calculate_similarity, generate_fingerprint
from Kindling.core.resurrection import ArchiveIndex, ResurrectionMatcher
from Kindling.memory.schemas import ArchiveEntry
from Kindling.memory.storage_backend import InMemoryDocumentStorage
from Kindling.utils.errors import ParseError

CONTEXT = "Kubernetes ingress controller certificates renewal kubernetes cluster"


class TestFingerprint:
    """Test bag-of-words fingerprints."""

    def test_counts_in_first_seen_order(self):
        vector = generate_fingerprint("The quick brown fox jumps over the lazy dog quick")
        # vocabulary: quick, brown, jumps, over, lazy
        assert vector == [2, 1, 1, 1, 1]

    def test_case_insensitive(self):
        assert generate_fingerprint("Alpha ALPHA alpha") == [3]

    def test_vocabulary_capped_at_50(self):
        text = " ".join(f"word{i:02d}" for i in range(60)) + " word59 word00"
        vector = generate_fingerprint(text)
        assert len(vector) == 50
        assert vector[0] == 2

    def test_short_tokens_dropped(self):
        assert generate_fingerprint("a an the and") == []

    def test_empty_content(self):
        assert generate_fingerprint("") == []


class TestSimilarity:
    """Test truncated cosine similarity."""

    @pytest.mark.parametrize("vector", [[2, 1, 1, 1, 1], [3.5, 0.25], [7], [0.1, 0.2, 0.3]])
    def test_self_similarity_is_one(self, vector):
        assert calculate_similarity(vector, vector) == 1.0

    @pytest.mark.parametrize("vector", [[1e200, 1e200], [1e-200, 1e-200], [1e300, 3e299, 1.0]])
    def test_extreme_magnitudes(self, vector):
        assert calculate_similarity(vector, vector) == pytest.approx(1.0)

    def test_scale_invariant(self):
        assert calculate_similarity([1e-200, 2e-200], [3e150, 6e150]) == pytest.approx(1.0)

    @pytest.mark.parametrize("a,b", [([], [1, 2]), ([1, 2], []), ([0, 0], [1, 2]), ([1, 2], [0, 0, 0])])
    def test_empty_or_zero_norm_is_zero(self, a, b):
        assert calculate_similarity(a, b) == 0

    def test_compares_shared_prefix_only(self):
        assert calculate_similarity([1, 0], [1, 0, 5]) == pytest.approx(1.0)

    def test_orthogonal(self):
        assert calculate_similarity([1, 0], [0, 1]) == 0


class TestResurrectionMatcher:
    """Test archive matching."""

    def setup_method(self):
        self.matcher = ResurrectionMatcher()
        self.archive = {
            "ops/k8s-certs.md": {
                "fingerprint": generate_fingerprint(CONTEXT),
                "heat": 12.5,
                "archivedAt": "2025-11-02T08:00:00+00:00",
            },
            "ops/k8s-notes.md": {"fingerprint": [2, 1, 1, 1, 0.9], "heat": 40},
            "food/bread.md": {"fingerprint": [0, 0, 0, 0, 7], "heat": 3},
            "empty.md": {"fingerprint": [], "heat": 1},
        }

    def test_returns_similar_entries_sorted(self):
        candidates = self.matcher.check_resurrection(CONTEXT, self.archive)
        assert [c.path for c in candidates] == ["ops/k8s-certs.md", "ops/k8s-notes.md"]
        assert candidates[0].similarity == pytest.approx(1.0)
        assert candidates[0].original_heat == 12.5
        assert candidates[0].archived_at == "2025-11-02T08:00:00+00:00"

    def test_never_returns_at_or_below_threshold(self):
        for candidate in self.matcher.check_resurrection(CONTEXT, self.archive):
            assert candidate.similarity > 0.85

    def test_threshold_is_exclusive(self):
        matcher = ResurrectionMatcher(config=ResurrectionConfig(similarity_threshold=1.0))
        assert matcher.check_resurrection(CONTEXT, self.archive) == []

    def test_empty_archive(self):
        assert self.matcher.check_resurrection(CONTEXT, {}) == []

    def test_malformed_entry_raises_parse_error(self):
        with pytest.raises(ParseError):
            self.matcher.check_resurrection(CONTEXT, {"x.md": {"fingerprint": "nope"}})

    def test_vectorizer_is_replaceable(self):
        class FixedVectorizer:
            def text_to_vector(self, text):
                return [1.0, 1.0]

            def similarity(self, a, b):
                return 0.9 if a == b else 0.0

        matcher = ResurrectionMatcher(vectorizer=FixedVectorizer())
        archive = {"a.md": ArchiveEntry(fingerprint=[1.0, 1.0], heat=5), "b.md": ArchiveEntry(fingerprint=[2.0])}
        candidates = matcher.check_resurrection("anything", archive)
        assert [(c.path, c.similarity) for c in candidates] == [("a.md", 0.9)]

    def test_candidate_to_dict(self):
        data = self.matcher.check_resurrection(CONTEXT, self.archive)[0].to_dict()
        assert data["originalHeat"] == 12.5
        assert data["similarity"] == 1.0


class TestArchiveIndex:
    """Test the archive metadata document."""

    def test_missing_document_is_empty(self):
        assert ArchiveIndex(InMemoryDocumentStorage()).load() == {}

    def test_add_persists_entry(self, clock):
        storage = InMemoryDocumentStorage()
        index = ArchiveIndex(storage, BagOfWordsVectorizer(), clock=clock)
        entry = index.add("ops/k8s-certs.md", CONTEXT, heat=7.5)

        assert entry.fingerprint == generate_fingerprint(CONTEXT)
        raw = storage.read()["ops/k8s-certs.md"]
        assert raw["heat"] == 7.5
        assert raw["archivedAt"] == clock().isoformat()
        assert index.load()["ops/k8s-certs.md"].fingerprint == entry.fingerprint

    def test_added_entry_is_resurrectable(self, clock):
        index = ArchiveIndex(InMemoryDocumentStorage(), clock=clock)
        index.add("ops/k8s-certs.md", CONTEXT, heat=7.5)
        candidates = ResurrectionMatcher().check_resurrection(CONTEXT, index.load())
        assert [c.path for c in candidates] == ["ops/k8s-certs.md"]

    def test_malformed_document(self):
        storage = InMemoryDocumentStorage({"a.md": {"fingerprint": {"bad": 1}}})
        with pytest.raises(ParseError):
            ArchiveIndex(storage).load()
