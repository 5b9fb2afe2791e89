"""Kindling - heat tracking, sparks, resurrection and search for a Markdown memory tree"""

from __future__ import annotations

__version__ = "0.1.0"

# Configuration
from .config.settings import get_config, KindlingConfig
from .config.logging_config import setup_logging

# Persistence
from .memory.node_store import NodeStore
from .memory.storage_backend import FileDocumentStorage, InMemoryDocumentStorage
from .memory.schemas import Confidence, HeatLevel, HeatLedgerDocument, NodeRecord

# Heat tracking
from .heat.ledger import HeatLedger, get_heat_level
from .heat.risk import KeywordRiskClassifier, RiskAssessment, classify
from .heat.sparks import SparkDetector, KeywordRelevancePolicy, RecencyGatedPolicy, Spark
from .heat.report import ReportGenerator

# Resurrection
from .core.embedding import BagOfWordsVectorizer, generate_fingerprint, calculate_similarity
from .core.resurrection import ArchiveIndex, ResurrectionMatcher, ResurrectionCandidate
from .core.memory_tree import MemoryTree

# Search
from .search.engine import SearchEngine, SearchResult

# Errors
from .utils.errors import (
    KindlingException,
    ConfigurationError,
    StorageError,
    ParseError,
    WriteError,
    NodeNotFoundError,
    ValidationError,
)

__all__ = [
    # Version
    "__version__",
    # Configuration
    "get_config",
    "KindlingConfig",
    "setup_logging",
    # Persistence
    "NodeStore",
    "FileDocumentStorage",
    "InMemoryDocumentStorage",
    "Confidence",
    "HeatLevel",
    "HeatLedgerDocument",
    "NodeRecord",
    # Heat tracking
    "HeatLedger",
    "get_heat_level",
    "KeywordRiskClassifier",
    "RiskAssessment",
    "classify",
    "SparkDetector",
    "KeywordRelevancePolicy",
    "RecencyGatedPolicy",
    "Spark",
    "ReportGenerator",
    # Resurrection
    "BagOfWordsVectorizer",
    "generate_fingerprint",
    "calculate_similarity",
    "ArchiveIndex",
    "ResurrectionMatcher",
    "ResurrectionCandidate",
    "MemoryTree",
    # Search
    "SearchEngine",
    "SearchResult",
    # Errors
    "KindlingException",
    "ConfigurationError",
    "StorageError",
    "ParseError",
    "WriteError",
    "NodeNotFoundError",
    "ValidationError",
]
