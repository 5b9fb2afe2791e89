"""Text fingerprints for resurrection matching.

The bag-of-words fingerprint is a placeholder for a real embedding model. Code
that needs vectors depends on the TextVectorizer interface (text -> vector,
vector x vector -> score) so a model-backed vectorizer can be dropped in later.

Fingerprints from different documents use different vocabularies, so position i
in one vector is not the same word as position i in another. Similarity compares
the first ``min(len(a), len(b))`` components anyway; this is a known
approximation, kept as-is.
"""

from __future__ import annotations

from typing import List, Protocol, Sequence

import numpy as np


class TextVectorizer(Protocol):
    def text_to_vector(self, text: str) -> List[float]:
        ...

    def similarity(self, a: Sequence[float], b: Sequence[float]) -> float:
        ...


def generate_fingerprint(content: str, vocabulary_size: int = 50, min_token_length: int = 4) -> List[float]:
    """Term counts over the first ``vocabulary_size`` distinct tokens, in first-seen order."""
    if not content:
        return []
    tokens = [t for t in content.lower().split() if len(t) >= min_token_length]

    counts = {}
    for token in tokens:
        counts[token] = counts.get(token, 0) + 1
    # dicts keep insertion order, so this is first-seen order
    vocabulary = list(counts)[:vocabulary_size]
    return [float(counts[word]) for word in vocabulary]


def calculate_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity over the shared prefix; 0 for empty or zero-norm vectors."""
    if a is None or b is None:
        return 0.0
    n = min(len(a), len(b))
    if n == 0:
        return 0.0

    va = np.asarray(a[:n], dtype=float)
    vb = np.asarray(b[:n], dtype=float)
    if not (np.all(np.isfinite(va)) and np.all(np.isfinite(vb))):
        return 0.0
    # scale to unit max so huge or tiny components neither overflow nor underflow
    scale_a = float(np.max(np.abs(va)))
    scale_b = float(np.max(np.abs(vb)))
    if scale_a == 0 or scale_b == 0:
        return 0.0
    va = va / scale_a
    vb = vb / scale_b
    norm_a = float(np.dot(va, va))
    norm_b = float(np.dot(vb, vb))
    return float(np.dot(va, vb)) / float(np.sqrt(norm_a * norm_b))


class BagOfWordsVectorizer:
    """Word-frequency fingerprint vectorizer."""

    def __init__(self, vocabulary_size: int = 50, min_token_length: int = 4):
        self.vocabulary_size = vocabulary_size
        self.min_token_length = min_token_length

    def text_to_vector(self, text: str) -> List[float]:
        return generate_fingerprint(text, self.vocabulary_size, self.min_token_length)

    def similarity(self, a: Sequence[float], b: Sequence[float]) -> float:
        return calculate_similarity(a, b)


__all__ = [
    "TextVectorizer",
    "BagOfWordsVectorizer",
    "generate_fingerprint",
    "calculate_similarity",
]
