"""Validation schemas for the persisted Kindling documents.

The on-disk field names are camelCase; Python attributes are snake_case and the
models accept either when loading.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..utils.timeutil import ensure_utc, utcnow


class Confidence(str, Enum):
    """Confidence tier of a node's content."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class HeatLevel(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class _Document(BaseModel):
    model_config = ConfigDict(populate_by_name=True, use_enum_values=False)

    def to_document(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class NodeRecord(_Document):
    """Heat state of one node."""
    heat: float = Field(default=0.0, ge=0.0, le=100.0)
    last_accessed: datetime = Field(default_factory=utcnow, alias="lastAccessed")
    access_count: int = Field(default=0, ge=0, alias="accessCount")
    risk_flag: bool = Field(default=False, alias="riskFlag")
    confidence: Confidence = Confidence.MEDIUM

    @field_validator("last_accessed")
    @classmethod
    def normalize_last_accessed(cls, value: datetime) -> datetime:
        return ensure_utc(value)


class AccessLogEntry(_Document):
    """One access event in the bounded ledger log."""
    timestamp: datetime
    node: str
    action: str = "access"
    new_heat: float = Field(alias="newHeat")

    @field_validator("timestamp")
    @classmethod
    def normalize_timestamp(cls, value: datetime) -> datetime:
        return ensure_utc(value)


class HeatLedgerDocument(_Document):
    """The whole heat ledger as persisted."""
    nodes: Dict[str, NodeRecord] = Field(default_factory=dict)
    last_decay: datetime = Field(default_factory=utcnow, alias="lastDecay")
    logs: List[AccessLogEntry] = Field(default_factory=list)

    @field_validator("last_decay")
    @classmethod
    def normalize_last_decay(cls, value: datetime) -> datetime:
        return ensure_utc(value)


class ArchiveEntry(_Document):
    """Metadata kept for one archived node."""
    fingerprint: List[float] = Field(default_factory=list)
    heat: float = 0.0
    archived_at: Optional[str] = Field(default=None, alias="archivedAt")


class ReportNode(_Document):
    path: str
    heat: float
    level: HeatLevel
    access_count: int = Field(alias="accessCount")
    last_accessed: datetime = Field(alias="lastAccessed")


class ArchiveCandidate(_Document):
    path: str
    days_since_access: int = Field(alias="daysSinceAccess")


class HeatReport(_Document):
    """Read-only snapshot of ledger state written by the report generator."""
    generated: datetime
    type: str
    total_nodes: int = Field(alias="totalNodes")
    high_heat: int = Field(alias="highHeat")
    medium_heat: int = Field(alias="mediumHeat")
    low_heat: int = Field(alias="lowHeat")
    average_heat: float = Field(alias="averageHeat")
    top_nodes: List[ReportNode] = Field(default_factory=list, alias="topNodes")
    coldest_nodes: List[ReportNode] = Field(default_factory=list, alias="coldestNodes")
    archive_candidates: List[ArchiveCandidate] = Field(default_factory=list, alias="archiveCandidates")


__all__ = [
    "Confidence",
    "HeatLevel",
    "NodeRecord",
    "AccessLogEntry",
    "HeatLedgerDocument",
    "ArchiveEntry",
    "ReportNode",
    "ArchiveCandidate",
    "HeatReport",
]
