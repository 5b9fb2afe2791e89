"""MemoryTree: wires the store, ledger and relevance components from one config."""

from __future__ import annotations

from datetime import datetime
from logging import getLogger
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence, Union

from ..config.settings import KindlingConfig
from ..heat.ledger import HeatLedger
from ..heat.report import ReportGenerator
from ..heat.risk import RiskClassifier
from ..heat.sparks import Spark, SparkDetector
from ..memory.node_store import NodeStore
from ..memory.schemas import Confidence, NodeRecord
from ..memory.storage_backend import FileDocumentStorage
from ..search.engine import SearchEngine
from ..utils.timeutil import utcnow
from .resurrection import ArchiveIndex, ResurrectionCandidate, ResurrectionMatcher

logger = getLogger("KINDLING.MemoryTree")


class MemoryTree:
    """Facade over one memory tree on disk."""

    def __init__(
        self,
        config: Optional[KindlingConfig] = None,
        clock: Callable[[], datetime] = utcnow,
        classifier: Optional[RiskClassifier] = None,
    ):
        self.config = config or KindlingConfig()
        self.clock = clock
        store_cfg = self.config.store
        self.root = Path(store_cfg.root)

        self.nodes = NodeStore.from_config(store_cfg)
        self.ledger = HeatLedger(
            FileDocumentStorage(store_cfg.resolve(store_cfg.ledger_file), store_cfg.lock_timeout_s),
            self.config.heat,
            classifier=classifier,
            clock=clock,
        )
        self.sparks = SparkDetector(self.ledger, self.config.sparks, clock=clock)
        self.reports = ReportGenerator(self.ledger, store_cfg.resolve(store_cfg.reports_dir), self.config.report, clock)
        self.matcher = ResurrectionMatcher(config=self.config.resurrection)
        self.archive = ArchiveIndex(
            FileDocumentStorage(store_cfg.resolve(store_cfg.archive_file), store_cfg.lock_timeout_s),
            vectorizer=self.matcher.vectorizer,
            clock=clock,
        )

    def touch(
        self,
        path: str,
        boost: Optional[float] = None,
        confidence: Union[str, Confidence, None] = None,
    ) -> NodeRecord:
        """Record an access, classifying the node's content when the note exists."""
        content = self.nodes.read(path) if self.nodes.exists(path) else None
        return self.ledger.record_access(path, content=content, boost=boost, confidence=confidence)

    def save_note(self, content: str, topic: str, tags: Iterable[str] = ()) -> str:
        path = self.nodes.save_note(content, topic, tags, clock=self.clock)
        self.ledger.record_access(path, content=content)
        return path

    def search_engine(self, with_heat: bool = False) -> SearchEngine:
        lookup = None
        if with_heat:
            nodes = self.ledger.snapshot().nodes

            def lookup(path: str) -> float:
                record = nodes.get(path)
                return record.heat if record is not None else 0.0

        return SearchEngine(self.nodes, self.config.search, heat_lookup=lookup, clock=self.clock)

    def detect_sparks(self, context: Union[str, Sequence[str], None], policy: Optional[str] = None) -> List[Spark]:
        return self.sparks.detect(context, policy)

    def resurrect(self, context: str) -> List[ResurrectionCandidate]:
        return self.matcher.check_resurrection(context, self.archive.load())


__all__ = ["MemoryTree"]
