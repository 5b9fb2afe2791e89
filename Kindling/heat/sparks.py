"""Spark detection: cold nodes that may still matter.

Two named policies share the Spark result type:

- keyword:  0 < heat < threshold and a path token occurs in the context text.
- recency:  heat below the low threshold, idle for a week, and either matching a
            context keyword or idle for over a month.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from logging import getLogger
from typing import Callable, Dict, List, Optional, Protocol, Sequence, Union

from ..config.settings import SparkConfig
from ..memory.schemas import HeatLedgerDocument, HeatLevel
from ..utils.errors import ValidationError
from ..utils.timeutil import days_between, utcnow
from .ledger import HeatLedger, get_heat_level

logger = getLogger("KINDLING.Sparks")

Context = Union[str, Sequence[str], None]

REASON_CONTEXT = "context-relevant"
REASON_LONG_IDLE = "long-idle"

_PATH_SPLIT = re.compile(r"[/\\\-_]")
_EXTENSION = re.compile(r"\.[a-z0-9]+$")


@dataclass
class Spark:
    path: str
    heat: float
    level: HeatLevel
    last_accessed: datetime
    days_idle: float
    reason: str
    message: str

    def to_dict(self) -> Dict[str, object]:
        return {
            "path": self.path,
            "heat": round(self.heat, 2),
            "level": self.level.value,
            "lastAccessed": self.last_accessed.isoformat(),
            "daysIdle": round(self.days_idle, 1),
            "reason": self.reason,
            "message": self.message,
        }


def _context_text(context: Context) -> str:
    if not context:
        return ""
    if isinstance(context, str):
        return context.lower()
    return " ".join(str(c) for c in context).lower()


def _context_keywords(context: Context) -> List[str]:
    if not context:
        return []
    words = context.split() if isinstance(context, str) else list(context)
    return [w.strip().lower() for w in words if w and w.strip()]


class SparkPolicy(Protocol):
    name: str

    def find(self, ledger: HeatLedgerDocument, context: Context, now: datetime) -> List[Spark]:
        ...


class KeywordRelevancePolicy:
    """Low but non-zero heat nodes whose path tokens appear in the context."""
    name = "keyword"

    def __init__(
        self,
        threshold: float = 30.0,
        min_token_length: int = 3,
        level_of: Callable[[float], HeatLevel] = get_heat_level,
    ):
        self.threshold = threshold
        self.min_token_length = min_token_length
        self.level_of = level_of

    def path_tokens(self, path: str) -> List[str]:
        stem = _EXTENSION.sub("", path.lower())
        return [t for t in _PATH_SPLIT.split(stem) if len(t) >= self.min_token_length]

    def is_relevant(self, path: str, context_text: str) -> bool:
        if not context_text:
            return False
        return any(token in context_text for token in self.path_tokens(path))

    def find(self, ledger: HeatLedgerDocument, context: Context, now: datetime) -> List[Spark]:
        text = _context_text(context)
        if not text:
            return []

        sparks = []
        for path, record in ledger.nodes.items():
            if not (0 < record.heat < self.threshold):
                continue
            if not self.is_relevant(path, text):
                continue
            sparks.append(Spark(
                path=path,
                heat=record.heat,
                level=self.level_of(record.heat),
                last_accessed=record.last_accessed,
                days_idle=max(0.0, days_between(record.last_accessed, now)),
                reason=REASON_CONTEXT,
                message=f'Spark: "{path}" is cold ({record.heat:.1f}) but may relate to the current topic',
            ))
        return sorted(sparks, key=lambda s: (-s.heat, s.path))


class RecencyGatedPolicy:
    """Cold, idle nodes; keyword-gated unless idle long enough to qualify on their own."""
    name = "recency"

    def __init__(
        self,
        low_threshold: float = 40.0,
        idle_days: float = 7.0,
        long_idle_days: float = 30.0,
        level_of: Callable[[float], HeatLevel] = get_heat_level,
    ):
        self.low_threshold = low_threshold
        self.idle_days = idle_days
        self.long_idle_days = long_idle_days
        self.level_of = level_of

    def find(self, ledger: HeatLedgerDocument, context: Context, now: datetime) -> List[Spark]:
        keywords = _context_keywords(context)

        sparks = []
        for path, record in ledger.nodes.items():
            idle = days_between(record.last_accessed, now)
            if record.heat >= self.low_threshold or idle <= self.idle_days:
                continue
            lowered = path.lower()
            relevant = any(k in lowered for k in keywords)
            if not relevant and idle <= self.long_idle_days:
                continue
            reason = REASON_CONTEXT if relevant else REASON_LONG_IDLE
            sparks.append(Spark(
                path=path,
                heat=record.heat,
                level=self.level_of(record.heat),
                last_accessed=record.last_accessed,
                days_idle=idle,
                reason=reason,
                message=f'Spark: "{path}" has not been opened for {round(idle)} days ({reason})',
            ))
        return sorted(sparks, key=lambda s: (-s.days_idle, s.path))


def build_policy(
    name: str,
    config: Optional[SparkConfig] = None,
    level_of: Callable[[float], HeatLevel] = get_heat_level,
) -> SparkPolicy:
    """Policy by name; ``level_of`` maps heat to a level, e.g. a ledger's get_heat_level."""
    config = config or SparkConfig()
    if name == KeywordRelevancePolicy.name:
        return KeywordRelevancePolicy(config.keyword_threshold, config.min_token_length, level_of)
    if name == RecencyGatedPolicy.name:
        return RecencyGatedPolicy(config.low_heat_threshold, config.idle_days, config.long_idle_days, level_of)
    raise ValidationError(
        f"Unknown spark policy: {name!r}",
        context={"allowed": [KeywordRelevancePolicy.name, RecencyGatedPolicy.name]},
    )


class SparkDetector:
    """Runs a spark policy against the current ledger state."""

    def __init__(
        self,
        ledger: HeatLedger,
        config: Optional[SparkConfig] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.ledger = ledger
        self.config = config or SparkConfig()
        self.clock = clock or ledger.clock or utcnow

    def detect(self, context: Context, policy: Union[str, SparkPolicy, None] = None) -> List[Spark]:
        if policy is None or isinstance(policy, str):
            policy = build_policy(policy or self.config.policy, self.config, self.ledger.get_heat_level)
        sparks = policy.find(self.ledger.snapshot(), context, self.clock())
        logger.debug(f"{policy.name} policy found {len(sparks)} sparks")
        return sparks


__all__ = [
    "Spark",
    "SparkPolicy",
    "KeywordRelevancePolicy",
    "RecencyGatedPolicy",
    "SparkDetector",
    "build_policy",
    "REASON_CONTEXT",
    "REASON_LONG_IDLE",
]
