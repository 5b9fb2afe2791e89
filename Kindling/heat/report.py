"""Heat reports: dated, read-only snapshots of the ledger."""

from __future__ import annotations

from datetime import datetime
from logging import getLogger
from pathlib import Path
from typing import Callable, List, Optional, Union

from ..config.settings import ReportConfig
from ..memory.schemas import ArchiveCandidate, HeatLedgerDocument, HeatLevel, HeatReport, ReportNode
from ..memory.storage_backend import DocumentStorage, FileDocumentStorage
from ..utils.errors import ValidationError
from ..utils.timeutil import days_between
from .ledger import HeatLedger

logger = getLogger("KINDLING.Report")

REPORT_KINDS = ("daily", "weekly", "monthly")


class ReportGenerator:
    def __init__(
        self,
        ledger: HeatLedger,
        reports_dir: Union[str, Path],
        config: Optional[ReportConfig] = None,
        clock: Optional[Callable[[], datetime]] = None,
        storage_factory: Callable[[Path], DocumentStorage] = FileDocumentStorage,
    ):
        self.ledger = ledger
        self.reports_dir = Path(reports_dir)
        self.config = config or ReportConfig()
        self.clock = clock or ledger.clock
        self.storage_factory = storage_factory

    def build(self, kind: str, doc: HeatLedgerDocument, now: datetime) -> HeatReport:
        """Aggregate ledger state without touching storage."""
        entries: List[ReportNode] = []
        candidates: List[ArchiveCandidate] = []
        for path, record in doc.nodes.items():
            entries.append(ReportNode(
                path=path,
                heat=round(record.heat, 2),
                level=self.ledger.get_heat_level(record.heat),
                access_count=record.access_count,
                last_accessed=record.last_accessed,
            ))
            idle = days_between(record.last_accessed, now)
            if idle > self.config.archive_after_days:
                candidates.append(ArchiveCandidate(path=path, days_since_access=int(idle)))

        entries.sort(key=lambda n: n.heat, reverse=True)
        candidates.sort(key=lambda c: c.days_since_access, reverse=True)
        total = len(entries)
        top_n = max(0, self.config.top_n)

        return HeatReport(
            generated=now,
            type=kind,
            total_nodes=total,
            high_heat=sum(1 for n in entries if n.level == HeatLevel.HIGH),
            medium_heat=sum(1 for n in entries if n.level == HeatLevel.MEDIUM),
            low_heat=sum(1 for n in entries if n.level == HeatLevel.LOW),
            average_heat=round(sum(r.heat for r in doc.nodes.values()) / total, 2) if total else 0.0,
            top_nodes=entries[:top_n],
            coldest_nodes=list(reversed(entries[-top_n:])) if top_n else [],
            archive_candidates=candidates,
        )

    def report_path(self, report: HeatReport) -> Path:
        return self.reports_dir / f"{report.generated.date().isoformat()}-{report.type}-report.json"

    def generate(self, kind: str = "daily") -> HeatReport:
        """Build a report of the given kind and write it under the reports directory."""
        if kind not in REPORT_KINDS:
            raise ValidationError(f"Unknown report kind: {kind!r}", context={"allowed": list(REPORT_KINDS)})

        report = self.build(kind, self.ledger.snapshot(), self.clock())
        target = self.report_path(report)
        self.storage_factory(target).write(report.to_document())
        logger.info(f"{kind.capitalize()} heat report written to {target}")
        return report


__all__ = ["REPORT_KINDS", "ReportGenerator"]
