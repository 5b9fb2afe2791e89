"""Resurrection: propose archived notes that resemble the current context."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from logging import getLogger
from typing import Callable, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError as SchemaError

from ..config.settings import ResurrectionConfig
from ..memory.schemas import ArchiveEntry
from ..memory.storage_backend import DocumentStorage
from ..utils.errors import ParseError
from ..utils.timeutil import utcnow
from .embedding import BagOfWordsVectorizer, TextVectorizer

logger = getLogger("KINDLING.Resurrection")

ArchiveMetadata = Mapping[str, Union[ArchiveEntry, dict]]


@dataclass
class ResurrectionCandidate:
    path: str
    similarity: float
    original_heat: float
    archived_at: Optional[str] = None

    def to_dict(self) -> Dict[str, object]:
        return {
            "path": self.path,
            "similarity": round(self.similarity, 4),
            "originalHeat": self.original_heat,
            "archivedAt": self.archived_at,
        }


class ResurrectionMatcher:
    """Compares a context fingerprint against archived fingerprints."""

    def __init__(self, vectorizer: Optional[TextVectorizer] = None, config: Optional[ResurrectionConfig] = None):
        self.config = config or ResurrectionConfig()
        self.vectorizer = vectorizer or BagOfWordsVectorizer(
            self.config.vocabulary_size, self.config.min_token_length
        )

    def check_resurrection(self, context: str, archive_metadata: ArchiveMetadata) -> List[ResurrectionCandidate]:
        """Archived entries with similarity above the threshold, most similar first."""
        if not archive_metadata:
            return []
        context_vector = self.vectorizer.text_to_vector(context)

        candidates = []
        for path, meta in archive_metadata.items():
            try:
                entry = meta if isinstance(meta, ArchiveEntry) else ArchiveEntry.model_validate(meta)
            except SchemaError as e:
                raise ParseError(f"Malformed archive entry for {path}", context={"path": path}) from e
            score = self.vectorizer.similarity(context_vector, entry.fingerprint)
            if score > self.config.similarity_threshold:
                candidates.append(ResurrectionCandidate(
                    path=path,
                    similarity=score,
                    original_heat=entry.heat,
                    archived_at=entry.archived_at,
                ))
        candidates.sort(key=lambda c: c.similarity, reverse=True)
        logger.debug(f"{len(candidates)} of {len(archive_metadata)} archived nodes above threshold")
        return candidates


class ArchiveIndex:
    """Archive metadata document: path -> {fingerprint, heat, archivedAt}."""

    def __init__(
        self,
        storage: DocumentStorage,
        vectorizer: Optional[TextVectorizer] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.storage = storage
        self.vectorizer = vectorizer or BagOfWordsVectorizer()
        self.clock = clock

    def load(self) -> Dict[str, ArchiveEntry]:
        """Validated archive entries; a missing document is an empty archive."""
        data = self.storage.read()
        if data is None:
            return {}
        try:
            return {path: ArchiveEntry.model_validate(meta) for path, meta in data.items()}
        except SchemaError as e:
            raise ParseError(
                f"Malformed archive metadata: {e.error_count()} validation error(s)",
                context={"storage": repr(self.storage)},
            ) from e

    def build_entry(self, content: str, heat: float) -> ArchiveEntry:
        return ArchiveEntry(
            fingerprint=self.vectorizer.text_to_vector(content),
            heat=heat,
            archived_at=self.clock().isoformat(),
        )

    def add(self, path: str, content: str, heat: float) -> ArchiveEntry:
        """Record a newly archived note."""
        entry = self.build_entry(content, heat)
        with self.storage.lease():
            entries = self.load()
            entries[path] = entry
            self.storage.write({p: e.to_document() for p, e in entries.items()})
        logger.info(f"Archived {path} (heat {heat:.1f}, {len(entry.fingerprint)} terms)")
        return entry


__all__ = ["ResurrectionCandidate", "ResurrectionMatcher", "ArchiveIndex"]
