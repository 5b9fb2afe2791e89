"""Persistence layer: the note tree, document backends and document schemas."""

from .node_store import NodeInfo, NodeStore
from .schemas import (
    AccessLogEntry,
    ArchiveCandidate,
    ArchiveEntry,
    Confidence,
    HeatLedgerDocument,
    HeatLevel,
    HeatReport,
    NodeRecord,
    ReportNode,
)
from .storage_backend import DocumentStorage, FileDocumentStorage, InMemoryDocumentStorage

__all__ = [
    "NodeInfo",
    "NodeStore",
    "AccessLogEntry",
    "ArchiveCandidate",
    "ArchiveEntry",
    "Confidence",
    "HeatLedgerDocument",
    "HeatLevel",
    "HeatReport",
    "NodeRecord",
    "ReportNode",
    "DocumentStorage",
    "FileDocumentStorage",
    "InMemoryDocumentStorage",
]
