from .embedding import BagOfWordsVectorizer, TextVectorizer, calculate_similarity, generate_fingerprint
from .resurrection import ArchiveIndex, ResurrectionCandidate, ResurrectionMatcher
from .memory_tree import MemoryTree

__all__ = [
    "BagOfWordsVectorizer",
    "TextVectorizer",
    "calculate_similarity",
    "generate_fingerprint",
    "ArchiveIndex",
    "ResurrectionCandidate",
    "ResurrectionMatcher",
    "MemoryTree",
]
