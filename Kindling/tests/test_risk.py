"""Tests for risk classification."""

import pytest

from Kindling.heat.risk import KeywordRiskClassifier, RiskAssessment, classify
from Kindling.memory.schemas import Confidence
from Kindling.utils.errors import ValidationError


class TestKeywordRiskClassifier:
    """Test keyword-based risk classification."""

    @pytest.mark.parametrize("content", [
        "Quarterly FINANCE review",
        "reset the admin password",
        "Store the API key in the vault",
        "delete the old backups",
        "deploy to production tonight",
        "生产环境 数据库 迁移",
        "支付接口 配置",
    ])
    def test_risky_content_flagged(self, content):
        assert classify(content).risk is True

    def test_plain_content_not_flagged(self):
        assessment = classify("Notes on sourdough hydration and crumb structure")
        assert assessment == RiskAssessment(risk=False, confidence=Confidence.MEDIUM)

    @pytest.mark.parametrize("marker", ["Evidence: audit log", "[evidence] ticket 42", "source: runbook", "证据：审计记录"])
    def test_evidence_marker_clears_risk(self, marker):
        assert classify(f"Drop the production database\n{marker}").risk is False

    def test_confidence_defaults_to_medium(self):
        assert classify("anything").confidence == Confidence.MEDIUM

    def test_confidence_override(self):
        assert classify("anything", "low").confidence == Confidence.LOW
        assert classify("anything", Confidence.HIGH).confidence == Confidence.HIGH

    def test_unknown_confidence_rejected(self):
        with pytest.raises(ValidationError):
            classify("anything", "absolute")

    def test_empty_content(self):
        assert classify("").risk is False

    def test_custom_keywords(self):
        classifier = KeywordRiskClassifier(keywords=["launch codes"], evidence_markers=["approved-by:"])
        assert classifier.classify("the LAUNCH CODES are here").risk is True
        assert classifier.classify("launch codes\napproved-by: ops").risk is False
        assert classifier.classify("production password").risk is False
        assert classifier.matched_keywords("launch codes") == ["launch codes"]
