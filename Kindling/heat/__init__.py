"""Heat tracking: ledger, risk classification, sparks and reports."""

from .ledger import (
    ACCESS_DECAY_POLICIES,
    ElapsedDecay,
    HeatLedger,
    StepDecay,
    get_heat_level,
)
from .report import REPORT_KINDS, ReportGenerator
from .risk import KeywordRiskClassifier, RiskAssessment, RiskClassifier, classify
from .sparks import KeywordRelevancePolicy, RecencyGatedPolicy, Spark, SparkDetector

__all__ = [
    "ACCESS_DECAY_POLICIES",
    "ElapsedDecay",
    "HeatLedger",
    "StepDecay",
    "get_heat_level",
    "REPORT_KINDS",
    "ReportGenerator",
    "KeywordRiskClassifier",
    "RiskAssessment",
    "RiskClassifier",
    "classify",
    "KeywordRelevancePolicy",
    "RecencyGatedPolicy",
    "Spark",
    "SparkDetector",
]
