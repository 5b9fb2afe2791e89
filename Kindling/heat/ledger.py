"""Heat Ledger: per-node heat with decay, boost, risk caps and echo-chamber damping.

Every mutating call is a full read-modify-write of the ledger document inside
the storage lease. Nothing is cached between calls.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta
from logging import getLogger
from typing import Callable, Dict, Optional, Protocol, Union

from pydantic import ValidationError as SchemaError

from ..config.settings import HeatConfig
from ..memory.schemas import AccessLogEntry, Confidence, HeatLedgerDocument, HeatLevel, NodeRecord
from ..memory.storage_backend import DocumentStorage
from ..utils.errors import ParseError, ValidationError
from ..utils.timeutil import hours_between, utcnow
from .risk import KeywordRiskClassifier, RiskClassifier, coerce_confidence

logger = getLogger("KINDLING.Heat")

MAX_HEAT = 100.0


def get_heat_level(heat: float, high: float = 80.0, medium: float = 40.0) -> HeatLevel:
    """81 is the first "high" value and 41 the first "medium" one."""
    if heat > high:
        return HeatLevel.HIGH
    if heat > medium:
        return HeatLevel.MEDIUM
    return HeatLevel.LOW


# ============================================================================
# Access decay policies
# ============================================================================

class AccessDecayPolicy(Protocol):
    name: str

    def decay(self, heat: float, rate: float, last_accessed: datetime, now: datetime) -> float:
        ...


class StepDecay:
    """One rate step per access, regardless of the time between accesses."""
    name = "step"

    def decay(self, heat: float, rate: float, last_accessed: datetime, now: datetime) -> float:
        return heat * rate


class ElapsedDecay:
    """``rate ** hours`` since the node was last accessed."""
    name = "elapsed"

    def decay(self, heat: float, rate: float, last_accessed: datetime, now: datetime) -> float:
        hours = max(0.0, hours_between(last_accessed, now))
        return heat * (rate ** hours)


ACCESS_DECAY_POLICIES: Dict[str, AccessDecayPolicy] = {
    StepDecay.name: StepDecay(),
    ElapsedDecay.name: ElapsedDecay(),
}


def resolve_access_decay(policy: Union[str, AccessDecayPolicy]) -> AccessDecayPolicy:
    if not isinstance(policy, str):
        return policy
    try:
        return ACCESS_DECAY_POLICIES[policy]
    except KeyError:
        raise ValidationError(
            f"Unknown access decay policy: {policy!r}",
            context={"allowed": sorted(ACCESS_DECAY_POLICIES)},
        ) from None


# ============================================================================
# Ledger
# ============================================================================

class HeatLedger:
    """Explicit store object over one persisted ledger document."""

    def __init__(
        self,
        storage: DocumentStorage,
        config: Optional[HeatConfig] = None,
        classifier: Optional[RiskClassifier] = None,
        clock: Callable[[], datetime] = utcnow,
        access_decay: Union[str, AccessDecayPolicy, None] = None,
    ):
        self.storage = storage
        self.config = config or HeatConfig()
        self.classifier = classifier or KeywordRiskClassifier()
        self.clock = clock
        self.access_decay = resolve_access_decay(access_decay or self.config.access_decay)

    # -- document I/O --------------------------------------------------------

    def load(self) -> HeatLedgerDocument:
        """Read and validate the ledger. A missing document is an empty ledger."""
        data = self.storage.read()
        if data is None:
            return HeatLedgerDocument(last_decay=self.clock())
        try:
            return HeatLedgerDocument.model_validate(data)
        except SchemaError as e:
            raise ParseError(
                f"Malformed heat ledger: {e.error_count()} validation error(s)",
                context={"storage": repr(self.storage), "errors": e.errors(include_url=False)[:5]},
            ) from e

    def _save(self, doc: HeatLedgerDocument) -> None:
        self.storage.write(doc.to_document())

    # -- pure helpers ----------------------------------------------------------

    def get_heat_level(self, heat: float) -> HeatLevel:
        return get_heat_level(heat, self.config.high_threshold, self.config.medium_threshold)

    def decay_rate(self, record: NodeRecord) -> float:
        if record.risk_flag:
            return self.config.no_evidence_decay_rate
        if record.confidence == Confidence.LOW:
            return self.config.low_confidence_decay_rate
        return self.config.base_decay_rate

    def _recent_accesses(self, doc: HeatLedgerDocument, path: str, now: datetime) -> int:
        window_start = now - timedelta(seconds=self.config.access_cooldown_s)
        return sum(1 for entry in doc.logs if entry.node == path and entry.timestamp >= window_start)

    def _validate_boost(self, boost: Optional[float]) -> float:
        if boost is None:
            return self.config.boost
        try:
            value = float(boost)
        except (TypeError, ValueError):
            raise ValidationError(f"Boost must be a number: {boost!r}") from None
        if not math.isfinite(value) or value < 0:
            raise ValidationError(f"Boost must be a finite non-negative number: {boost!r}", context={"boost": boost})
        return value

    # -- mutations -----------------------------------------------------------

    def record_access(
        self,
        path: str,
        content: Optional[str] = None,
        boost: Optional[float] = None,
        confidence: Union[str, Confidence, None] = None,
    ) -> NodeRecord:
        """Record one access to ``path`` and return the updated node record.

        When ``content`` is given it is classified to refresh the node's risk flag
        and confidence; otherwise the stored classification is kept.
        """
        boost_value = self._validate_boost(boost)
        tier = coerce_confidence(confidence)

        with self.storage.lease():
            doc = self.load()
            now = self.clock()
            record = doc.nodes.get(path)
            if record is None:
                record = NodeRecord(heat=0.0, last_accessed=now)

            if content is not None:
                assessment = self.classifier.classify(content, tier or record.confidence)
                record.risk_flag = assessment.risk
                record.confidence = assessment.confidence
            elif tier is not None:
                record.confidence = tier

            if record.heat > self.config.echo_chamber_threshold:
                recent = self._recent_accesses(doc, path, now)
                if recent >= self.config.max_consecutive_accesses:
                    logger.debug(f"Echo-chamber damping on {path}: {recent} accesses in window")
                    boost_value *= self.config.echo_chamber_penalty

            decayed = self.access_decay.decay(record.heat, self.decay_rate(record), record.last_accessed, now)
            new_heat = min(MAX_HEAT, max(0.0, decayed + boost_value))
            if record.risk_flag:
                new_heat = min(new_heat, self.config.high_risk_cap)

            record.heat = new_heat
            record.last_accessed = now
            record.access_count += 1
            doc.nodes[path] = record

            doc.logs.append(AccessLogEntry(timestamp=now, node=path, action="access", new_heat=new_heat))
            if len(doc.logs) > self.config.max_log_entries:
                doc.logs = doc.logs[-self.config.max_log_entries:]

            self._save(doc)

        logger.debug(f"Access recorded: {path} heat={new_heat:.2f} count={record.access_count}")
        return record

    def apply_decay_pass(self, force: bool = False) -> bool:
        """Multiply every node's heat by the base rate once per decay interval.

        Returns True if the pass ran.
        """
        with self.storage.lease():
            doc = self.load()
            now = self.clock()
            elapsed = hours_between(doc.last_decay, now)
            if not force and elapsed < self.config.decay_interval_hours:
                logger.debug(f"Decay pass skipped: {elapsed:.1f}h since last pass")
                return False

            for record in doc.nodes.values():
                record.heat = max(0.0, record.heat * self.config.base_decay_rate)
            doc.last_decay = now
            self._save(doc)

        logger.info(f"Decay pass applied to {len(doc.nodes)} nodes")
        return True

    # -- reads ---------------------------------------------------------------

    def snapshot(self) -> HeatLedgerDocument:
        """Validated copy of the current ledger; changes to it are not persisted."""
        return self.load()

    def get_node(self, path: str) -> Optional[NodeRecord]:
        return self.load().nodes.get(path)

    def get_heat(self, path: str) -> float:
        record = self.get_node(path)
        return record.heat if record is not None else 0.0


__all__ = [
    "MAX_HEAT",
    "get_heat_level",
    "AccessDecayPolicy",
    "StepDecay",
    "ElapsedDecay",
    "ACCESS_DECAY_POLICIES",
    "resolve_access_decay",
    "HeatLedger",
]
