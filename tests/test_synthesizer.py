"""Unit tests for confidence aggregation and result synthesis."""
from __future__ import annotations

import pytest

from partner_email_parser.constants import METHOD_ALIAS, METHOD_EXACT, METHOD_FUZZY, METHOD_NONE
from partner_email_parser.models import (
    AIEnrichment,
    CounterpartyInfo,
    Degraded,
    Enriched,
    NameSignal,
    ParsingResult,
    ProjectMatch,
    StageSignal,
)
from partner_email_parser.synthesizer import (
    aggregate_confidence,
    build_error_reason,
    synthesize_result,
)


def _synth(project_match, counterparty, enrichment=None, threshold=0.5):
    return synthesize_result(
        filename="a.eml", subject="s", date="", sender="x@y.com",
        project_match=project_match, counterparty=counterparty,
        enrichment=enrichment, ai_confidence_threshold=threshold,
    )


class TestAggregateConfidence:

    def test_mean_of_non_zero(self):
        assert aggregate_confidence([0.95, 0.6, 0.0, 0.0]) == pytest.approx(0.775)

    def test_all_zero(self):
        assert aggregate_confidence([0.0, 0.0]) == 0.0
        assert aggregate_confidence([]) == 0.0


class TestErrorReason:

    def test_all_reasons(self):
        assert build_error_reason(None, None, 0.0, 0.5) == (
            "project name not recognized; partner email not found; confidence too low"
        )

    def test_threshold_is_inclusive(self):
        assert build_error_reason("Atlas", "a@b.co", 0.5, 0.5) == "confidence too low"


class TestSynthesize:

    def test_deterministic_only(self):
        result = _synth(ProjectMatch("Atlas", 0.95, METHOD_EXACT),
                        CounterpartyInfo(name="Jane", email="jane@acme.com"))
        assert result.confidence == pytest.approx(0.775)
        assert result.success
        assert result.error_reason is None
        assert result.match_type == "exact"
        assert result.communication_stage is None

    def test_ai_signals_blend_in(self):
        enrichment = AIEnrichment(
            partner_name=None,
            stage=Enriched(StageSignal("after-service", 0.7)),
            sub_stage=Enriched(StageSignal("reporting", 0.9)),
        )
        result = _synth(ProjectMatch("Atlas", 0.8, METHOD_ALIAS),
                        CounterpartyInfo(name="Jane", email="jane@acme.com"), enrichment)
        assert result.confidence == pytest.approx((0.8 + 0.6 + 0.7 + 0.9) / 4)
        assert result.communication_stage == "after-service"
        assert result.communication_sub_stage == "reporting"
        assert result.match_type == "ai_extracted"

    def test_ai_name_overrides_and_uses_ai_confidence(self):
        enrichment = AIEnrichment(partner_name=Enriched(NameSignal("Acme Corp", 0.9)))
        result = _synth(ProjectMatch("Atlas", 0.95, METHOD_EXACT),
                        CounterpartyInfo(name=None, email="x@acme.com"), enrichment)
        assert result.partner_name == "Acme Corp"
        assert result.confidence == pytest.approx((0.95 + 0.9) / 2)

    def test_fuzzy_method_wins_match_type(self):
        enrichment = AIEnrichment(stage=Enriched(StageSignal("after-service", 0.7)))
        result = _synth(ProjectMatch("Atlas", 0.7, METHOD_FUZZY),
                        CounterpartyInfo(email="x@acme.com"), enrichment)
        assert result.match_type == "fuzzy"

    def test_degraded_only_enrichment_is_not_ai(self):
        enrichment = AIEnrichment(stage=Degraded("stage: call failed"))
        result = _synth(ProjectMatch("Atlas", 0.95, METHOD_EXACT),
                        CounterpartyInfo(email="x@acme.com"), enrichment)
        assert result.match_type == "exact"
        assert result.confidence == pytest.approx(0.95)

    def test_missing_project_fails(self):
        result = _synth(ProjectMatch(None, 0.0, METHOD_NONE),
                        CounterpartyInfo(name="Jane", email="jane@acme.com"))
        assert not result.success
        assert "project name not recognized" in result.error_reason
        assert result.confidence == pytest.approx(0.6)


class TestParsingResultDict:

    def test_camel_case_keys(self):
        data = ParsingResult(filename="a.eml", project_name="Atlas", success=True).to_dict()
        assert data["projectName"] == "Atlas"
        assert data["matchType"] == "exact"
        assert "processingTime" in data
        assert "errorReason" not in data

    def test_error_reason_on_failure(self):
        data = ParsingResult(filename="a.eml", success=False, error_reason="boom").to_dict()
        assert data["errorReason"] == "boom"

    def test_unknown_match_type_rejected(self):
        with pytest.raises(ValueError):
            ParsingResult(filename="a.eml", match_type="guess")
