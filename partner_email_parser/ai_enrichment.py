"""
AI enrichment adapter – optional, fallible chat calls layered on top of
the deterministic extractors.

Calls (sequential, per message):
  1. Partner name   – only when the deterministic name is missing or is
                      a bare email address
  2. Stage          – always; answer must be one of the configured ids
  3. Sub-stage      – only when (2) succeeded and that stage defines
                      sub-stages; answer must be one of its sub-stage ids

Every call returns Enriched(value) or Degraded(reason).  Transport errors,
unparseable JSON and explicit "null" answers all degrade the same way:
logged at WARNING, never raised.  No retries and no timeouts are applied
here.
"""

import json
import logging
import re
from typing import Any, Sequence

from partner_email_parser.llm_client import ChatClient
from partner_email_parser.models import (
    AIEnrichment,
    CounterpartyInfo,
    Degraded,
    Enriched,
    NameSignal,
    StageRecord,
    StageSignal,
    find_stage,
)

log = logging.getLogger(__name__)

# Maximum characters of body text sent per call
_BODY_CHAR_LIMIT = 1500

# ---- Prompts ----

_NAME_SYSTEM = """\
You are an email analysis assistant.  Identify the external partner
(the counterparty person or company) that the email is exchanged with.

Return JSON:
{
  "partnerName": "<person or company name>",
  "confidence": 0.8,
  "evidence": ["<short quote>", "<short quote>"]
}

If the partner cannot be determined, return:
{
  "partnerName": null,
  "confidence": 0,
  "evidence": []
}

Respond ONLY with valid JSON.
"""

_NAME_USER = """\
Extract the partner's name or company name from this email.

EMAIL CONTENT:
---
{body}
---
"""

_STAGE_SYSTEM = """\
You are a business communication analyst.  Read the email and decide
which communication stage the exchange is currently in.

Return JSON:
{
  "stage": "<stage-id>",
  "confidence": 0.7,
  "reasoning": "<one sentence>"
}

The stage MUST be one of the ids listed by the user.  Respond ONLY with
valid JSON.
"""

_STAGE_USER = """\
Classify the communication stage of this email.

AVAILABLE STAGES:
{stage_context}

EMAIL CONTENT:
---
{body}
---
"""

_SUB_STAGE_SYSTEM = """\
You are a business communication analyst.  The email has already been
classified into a main stage; decide which sub-stage of that stage fits
best.  Sub-stages have no strict order; if several fit, pick the dominant
one.

Return JSON:
{
  "subStage": "<substage-id>",
  "confidence": 0.8,
  "reasoning": "<one sentence>"
}

If no sub-stage can be determined, return:
{
  "subStage": null,
  "confidence": 0,
  "reasoning": "<why>"
}

Respond ONLY with valid JSON.
"""

_SUB_STAGE_USER = """\
Main stage: {stage_name} - {stage_description}

AVAILABLE SUB-STAGES:
{sub_stage_context}

EMAIL CONTENT:
---
{body}
---
"""

_NAME_PARAMS = {"temperature": 0.1, "max_tokens": 300}
_STAGE_PARAMS = {"temperature": 0.2, "max_tokens": 400}
_SUB_STAGE_PARAMS = {"temperature": 0.1, "max_tokens": 500}


# ------------------------------------------------------------------
# Response parsing
# ------------------------------------------------------------------

def strip_code_fences(raw: str) -> str:
    raw = (raw or "").strip()
    raw = re.sub(r"^```(?:json)?\s*", "", raw)
    raw = re.sub(r"\s*```$", "", raw)
    return raw.strip()


def parse_json_response(raw: str) -> dict[str, Any] | None:
    """Parse a model reply into a dict; None if it is not a JSON object.

    Handles markdown fences and trailing commas.
    """
    raw = strip_code_fences(raw)
    if not raw:
        return None
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        cleaned = re.sub(r",\s*([\]}])", r"\1", raw)
        try:
            data = json.loads(cleaned)
        except json.JSONDecodeError:
            log.warning("Cannot parse LLM JSON: %s", raw[:300])
            return None
    return data if isinstance(data, dict) else None


def _confidence(value) -> float:
    try:
        conf = float(value or 0.0)
    except (TypeError, ValueError):
        return 0.0
    return min(max(conf, 0.0), 1.0)


def needs_name_extraction(counterparty: CounterpartyInfo) -> bool:
    return not counterparty.name or "@" in counterparty.name


# ------------------------------------------------------------------
# Adapter
# ------------------------------------------------------------------

class EnrichmentAdapter:
    """Runs the enrichment calls against a ChatClient."""

    def __init__(self, client: ChatClient, body_char_limit: int = _BODY_CHAR_LIMIT):
        self.client = client
        self.body_char_limit = body_char_limit

    def enrich(
        self,
        body: str,
        counterparty: CounterpartyInfo,
        stages: Sequence[StageRecord],
        filename: str = "",
    ) -> AIEnrichment:
        partner_name = None
        if needs_name_extraction(counterparty):
            partner_name = self.extract_partner_name(body, filename=filename)

        stage = self.classify_stage(body, stages, filename=filename)

        sub_stage = None
        if isinstance(stage, Enriched):
            stage_record = find_stage(stages, stage.value.value)
            if stage_record is not None and stage_record.sub_stages:
                sub_stage = self.classify_sub_stage(body, stage_record, filename=filename)

        enrichment = AIEnrichment(partner_name=partner_name, stage=stage, sub_stage=sub_stage)
        if enrichment.degraded_reasons:
            log.info("AI enrichment degraded for %s: %s",
                     filename or "(inline)", "; ".join(enrichment.degraded_reasons))
        return enrichment

    # ---- individual calls ----

    def extract_partner_name(self, body: str, filename: str = "") -> Enriched[NameSignal] | Degraded:
        data = self._ask(
            "partner name", filename,
            messages=[{"role": "user", "content": _NAME_USER.format(body=self._clip(body))}],
            system_prompt=_NAME_SYSTEM,
            params=_NAME_PARAMS,
        )
        if isinstance(data, Degraded):
            return data

        name = data.get("partnerName")
        if not name or not isinstance(name, str) or not name.strip():
            return Degraded("partner name: no answer")

        evidence = data.get("evidence") or []
        if not isinstance(evidence, list):
            evidence = [str(evidence)]
        return Enriched(NameSignal(
            value=name.strip(),
            confidence=_confidence(data.get("confidence")),
            evidence=tuple(str(e) for e in evidence),
        ))

    def classify_stage(self, body: str, stages: Sequence[StageRecord],
                       filename: str = "") -> Enriched[StageSignal] | Degraded:
        if not stages:
            return Degraded("stage: no stages configured")

        stage_context = "\n".join(f"- {s.id}: {s.name} ({s.description})" for s in stages)
        data = self._ask(
            "stage", filename,
            messages=[{"role": "user", "content": _STAGE_USER.format(
                stage_context=stage_context, body=self._clip(body))}],
            system_prompt=_STAGE_SYSTEM,
            params=_STAGE_PARAMS,
        )
        if isinstance(data, Degraded):
            return data
        return self._stage_signal(data, "stage", [s.id for s in stages])

    def classify_sub_stage(self, body: str, stage: StageRecord,
                           filename: str = "") -> Enriched[StageSignal] | Degraded:
        sub_stage_context = "\n".join(
            f"- {s.id}: {s.name} ({s.description})" for s in stage.sub_stages
        )
        data = self._ask(
            "sub-stage", filename,
            messages=[{"role": "user", "content": _SUB_STAGE_USER.format(
                stage_name=stage.name,
                stage_description=stage.description,
                sub_stage_context=sub_stage_context,
                body=self._clip(body),
            )}],
            system_prompt=_SUB_STAGE_SYSTEM,
            params=_SUB_STAGE_PARAMS,
        )
        if isinstance(data, Degraded):
            return data
        return self._stage_signal(data, "subStage", [s.id for s in stage.sub_stages])

    # ---- internals ----

    def _clip(self, body: str) -> str:
        return (body or "")[: self.body_char_limit]

    def _ask(self, what: str, filename: str, **kwargs) -> dict[str, Any] | Degraded:
        try:
            response = self.client.chat(**kwargs)
        except Exception as exc:
            log.warning("AI %s call failed for %s: %s", what, filename or "(inline)", exc)
            return Degraded(f"{what}: call failed ({exc})")

        log.debug("AI %s raw response for %s: %s", what, filename, (response.content or "")[:500])
        data = parse_json_response(response.content)
        if data is None:
            log.warning("AI %s response parse failed for %s", what, filename or "(inline)")
            return Degraded(f"{what}: unparseable response")
        return data

    @staticmethod
    def _stage_signal(data: dict[str, Any], key: str, allowed: list[str]) -> Enriched[StageSignal] | Degraded:
        value = data.get(key)
        if not value:
            return Degraded(f"{key}: no answer")
        if value not in allowed:
            log.warning("AI returned unknown %s %r (allowed: %s)", key, value, allowed)
            return Degraded(f"{key}: unknown id {value!r}")
        return Enriched(StageSignal(
            value=value,
            confidence=_confidence(data.get("confidence")),
            reasoning=str(data.get("reasoning") or ""),
        ))
