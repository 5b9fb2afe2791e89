"""Risk classification of node content.

The heat ledger only needs a ``classify(content)`` callable returning a
RiskAssessment; the keyword classifier here is the default and can be replaced
by anything implementing the RiskClassifier protocol.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Protocol, Union

from ..memory.schemas import Confidence
from ..utils.errors import ValidationError

HIGH_RISK_KEYWORDS = (
    # finance / payments
    "finance", "financial", "investment", "wire transfer", "payment",
    # credentials
    "password", "credential", "secret", "api key", "private key",
    # destructive or production operations
    "delete", "deletion", "production", "database",
    "财务", "投资", "配置", "密码", "密钥", "删除", "生产环境", "数据库", "转账", "支付",
)

EVIDENCE_MARKERS = ("evidence:", "[evidence]", "source:", "证据")


@dataclass(frozen=True)
class RiskAssessment:
    risk: bool = False
    confidence: Confidence = Confidence.MEDIUM


def coerce_confidence(value: Union[str, Confidence, None]) -> Optional[Confidence]:
    """Map a tier name to Confidence, raising ValidationError for unknown tiers."""
    if value is None or isinstance(value, Confidence):
        return value
    try:
        return Confidence(str(value).strip().lower())
    except ValueError as e:
        raise ValidationError(
            f"Unknown confidence tier: {value!r}",
            context={"allowed": [c.value for c in Confidence]},
        ) from e


class RiskClassifier(Protocol):
    def classify(self, content: str, confidence: Optional[Confidence] = None) -> RiskAssessment:
        ...


class KeywordRiskClassifier:
    """Flags content mentioning a high-risk keyword unless an evidence marker is present."""

    def __init__(
        self,
        keywords: Iterable[str] = HIGH_RISK_KEYWORDS,
        evidence_markers: Iterable[str] = EVIDENCE_MARKERS,
    ):
        self.keywords = tuple(k.lower() for k in keywords)
        self.evidence_markers = tuple(m.lower() for m in evidence_markers)

    def matched_keywords(self, content: str) -> list:
        text = (content or "").lower()
        return [k for k in self.keywords if k in text]

    def has_evidence(self, content: str) -> bool:
        text = (content or "").lower()
        return any(m in text for m in self.evidence_markers)

    def classify(self, content: str, confidence: Optional[Confidence] = None) -> RiskAssessment:
        risk = bool(self.matched_keywords(content)) and not self.has_evidence(content)
        return RiskAssessment(risk=risk, confidence=coerce_confidence(confidence) or Confidence.MEDIUM)


_default = KeywordRiskClassifier()


def classify(content: str, confidence: Union[str, Confidence, None] = None) -> RiskAssessment:
    """Classify with the default keyword classifier."""
    return _default.classify(content, coerce_confidence(confidence))


__all__ = [
    "HIGH_RISK_KEYWORDS",
    "EVIDENCE_MARKERS",
    "RiskAssessment",
    "RiskClassifier",
    "KeywordRiskClassifier",
    "coerce_confidence",
    "classify",
]
