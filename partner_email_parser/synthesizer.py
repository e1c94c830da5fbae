"""
Result synthesizer – merges the project match, the deterministic
counterparty and the (possibly partial) AI enrichment into one
ParsingResult.

Confidence is the arithmetic mean of the NON-ZERO components among:
  * project-resolution confidence
  * name confidence (AI if used, else 0.6 for a deterministic name, else 0)
  * AI stage confidence
  * AI sub-stage confidence

Missing signals therefore drop out of the mean instead of pulling it down.
"""

import logging

from partner_email_parser.constants import (
    CONFIDENCE_MEDIUM,
    MATCH_AI,
    MATCH_EXACT,
    MATCH_FUZZY,
    METHOD_FUZZY,
    REASON_LOW_CONFIDENCE,
    REASON_NO_EMAIL,
    REASON_NO_PROJECT,
)
from partner_email_parser.models import (
    AIEnrichment,
    CounterpartyInfo,
    ParsingResult,
    ProjectMatch,
)

log = logging.getLogger(__name__)


def aggregate_confidence(scores: list[float]) -> float:
    non_zero = [s for s in scores if s > 0]
    if not non_zero:
        return 0.0
    return sum(non_zero) / len(non_zero)


def build_error_reason(project_name: str | None, partner_email: str | None,
                       confidence: float, threshold: float) -> str:
    reasons = []
    if not project_name:
        reasons.append(REASON_NO_PROJECT)
    if not partner_email:
        reasons.append(REASON_NO_EMAIL)
    if confidence <= threshold:
        reasons.append(REASON_LOW_CONFIDENCE)
    return "; ".join(reasons)


def synthesize_result(
    *,
    filename: str,
    subject: str,
    date: str,
    sender: str,
    project_match: ProjectMatch,
    counterparty: CounterpartyInfo,
    enrichment: AIEnrichment | None,
    ai_confidence_threshold: float,
    processing_time_ms: int = 0,
) -> ParsingResult:
    enrichment = enrichment or AIEnrichment()
    name_signal = enrichment.name_signal
    stage_signal = enrichment.stage_signal
    sub_stage_signal = enrichment.sub_stage_signal

    project_name = project_match.project_name
    partner_name = name_signal.value if name_signal else counterparty.name
    partner_email = counterparty.email

    if name_signal:
        name_confidence = name_signal.confidence
    else:
        name_confidence = CONFIDENCE_MEDIUM if counterparty.name else 0.0

    confidence = aggregate_confidence([
        project_match.confidence,
        name_confidence,
        stage_signal.confidence if stage_signal else 0.0,
        sub_stage_signal.confidence if sub_stage_signal else 0.0,
    ])

    success = bool(project_name and partner_email and confidence > ai_confidence_threshold)

    if project_match.method == METHOD_FUZZY:
        match_type = MATCH_FUZZY
    elif enrichment.used:
        match_type = MATCH_AI
    else:
        match_type = MATCH_EXACT

    result = ParsingResult(
        filename=filename,
        project_name=project_name,
        partner_name=partner_name,
        partner_email=partner_email,
        communication_stage=stage_signal.value if stage_signal else None,
        communication_sub_stage=sub_stage_signal.value if sub_stage_signal else None,
        success=success,
        error_reason=None if success else build_error_reason(
            project_name, partner_email, confidence, ai_confidence_threshold),
        email_subject=subject,
        email_date=date,
        email_from=sender,
        confidence=confidence,
        match_type=match_type,
        processing_time_ms=max(int(processing_time_ms), 0),
    )
    log.debug("Synthesized %s: success=%s confidence=%.3f match_type=%s",
              filename, success, confidence, match_type)
    return result
