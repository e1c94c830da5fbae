"""
Data model for the partner email parser.

Everything here is created fresh per batch and discarded once the caller
has consumed the BatchResult.  Registry records and the parsing config are
frozen; per-message outputs are plain dataclasses.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from partner_email_parser.constants import (
    AI_CONFIDENCE_THRESHOLD,
    DEFAULT_PLATFORM_DOMAINS,
    FUZZY_MATCH_THRESHOLD,
    MATCH_EXACT,
    MATCH_TYPES,
    MAX_CONTENT_LENGTH,
    METHOD_NONE,
)
from partner_email_parser.exceptions import ConfigError

T = TypeVar("T")


# ------------------------------------------------------------------
# Inputs
# ------------------------------------------------------------------

@dataclass(frozen=True)
class SourceMessage:
    """One raw message file as handed over by the caller."""
    filename: str
    raw_content: bytes | str
    size_bytes: int = 0


@dataclass(frozen=True)
class ProjectRecord:
    id: str
    name: str
    aliases: tuple[str, ...] = ()
    description: str = ""
    status: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "ProjectRecord":
        return cls(
            id=str(data.get("id") or data.get("name") or ""),
            name=str(data.get("name") or ""),
            aliases=tuple(str(a) for a in (data.get("aliases") or []) if a),
            description=str(data.get("description") or ""),
            status=str(data.get("status") or ""),
        )


@dataclass(frozen=True)
class SubStageRecord:
    id: str
    name: str
    description: str = ""
    keywords: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: dict) -> "SubStageRecord":
        return cls(
            id=str(data.get("id") or ""),
            name=str(data.get("name") or ""),
            description=str(data.get("description") or ""),
            keywords=tuple(str(k) for k in (data.get("keywords") or [])),
        )


@dataclass(frozen=True)
class StageRecord:
    """One entry of the stage taxonomy (closed set of stage ids)."""
    id: str
    name: str
    description: str = ""
    keywords: tuple[str, ...] = ()
    order: int = 0
    sub_stages: tuple[SubStageRecord, ...] = ()

    @classmethod
    def from_dict(cls, data: dict) -> "StageRecord":
        return cls(
            id=str(data.get("id") or ""),
            name=str(data.get("name") or ""),
            description=str(data.get("description") or ""),
            keywords=tuple(str(k) for k in (data.get("keywords") or [])),
            order=int(data.get("order") or 0),
            sub_stages=tuple(
                SubStageRecord.from_dict(s)
                for s in (data.get("subStages") or data.get("sub_stages") or [])
            ),
        )


@dataclass(frozen=True)
class ParsingConfig:
    """Per-batch parsing configuration.

    Raises ConfigError on construction when a threshold is outside [0, 1],
    max_content_length is not positive, or project ids are duplicated.
    """
    enable_ai: bool = False
    fuzzy_match_threshold: float = FUZZY_MATCH_THRESHOLD
    ai_confidence_threshold: float = AI_CONFIDENCE_THRESHOLD
    max_content_length: int = MAX_CONTENT_LENGTH
    projects: tuple[ProjectRecord, ...] = ()
    stages: tuple[StageRecord, ...] = ()
    platform_domains: tuple[str, ...] = DEFAULT_PLATFORM_DOMAINS

    def __post_init__(self):
        for name in ("fuzzy_match_threshold", "ai_confidence_threshold"):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or not 0.0 <= value <= 1.0:
                raise ConfigError(f"{name} must be within [0, 1], got {value!r}")
        if not isinstance(self.max_content_length, int) or self.max_content_length <= 0:
            raise ConfigError(
                f"max_content_length must be a positive integer, got {self.max_content_length!r}"
            )
        seen: set[str] = set()
        for project in self.projects:
            if project.id in seen:
                raise ConfigError(f"duplicate project id: {project.id!r}")
            seen.add(project.id)
        # Normalise sequences so callers may pass lists
        object.__setattr__(self, "projects", tuple(self.projects))
        object.__setattr__(self, "stages", tuple(self.stages))
        object.__setattr__(
            self, "platform_domains",
            tuple(d.lower().strip() for d in self.platform_domains if d and d.strip()),
        )


def find_stage(stages, stage_id: str) -> StageRecord | None:
    for s in stages:
        if s.id == stage_id:
            return s
    return None


# ------------------------------------------------------------------
# Decoded message
# ------------------------------------------------------------------

@dataclass(frozen=True)
class Address:
    email: str
    name: str | None = None


@dataclass(frozen=True)
class DecodedMessage:
    subject: str
    sender: Address | None
    to: tuple[Address, ...] = ()
    cc: tuple[Address, ...] = ()
    date: str = ""
    body_text: str | None = None
    body_html: str | None = None

    @property
    def recipients(self) -> tuple[Address, ...]:
        return self.to + self.cc


# ------------------------------------------------------------------
# Pipeline signals
# ------------------------------------------------------------------

@dataclass
class ProjectMatch:
    project_name: str | None = None
    confidence: float = 0.0
    method: str = METHOD_NONE
    evidence: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class CounterpartyInfo:
    name: str | None = None
    email: str | None = None


@dataclass(frozen=True)
class NameSignal:
    value: str
    confidence: float
    evidence: tuple[str, ...] = ()


@dataclass(frozen=True)
class StageSignal:
    value: str
    confidence: float
    reasoning: str = ""


@dataclass(frozen=True)
class Enriched(Generic[T]):
    """An AI call that produced a usable answer."""
    value: T


@dataclass(frozen=True)
class Degraded:
    """An AI call that was attempted but contributed nothing."""
    reason: str


def _value_of(outcome):
    return outcome.value if isinstance(outcome, Enriched) else None


@dataclass(frozen=True)
class AIEnrichment:
    """Outcome of the enrichment calls.

    Each half is None when the call was not attempted, Enriched when it
    produced an answer and Degraded when it failed or declined to answer.
    """
    partner_name: Enriched[NameSignal] | Degraded | None = None
    stage: Enriched[StageSignal] | Degraded | None = None
    sub_stage: Enriched[StageSignal] | Degraded | None = None

    @property
    def name_signal(self) -> NameSignal | None:
        return _value_of(self.partner_name)

    @property
    def stage_signal(self) -> StageSignal | None:
        return _value_of(self.stage)

    @property
    def sub_stage_signal(self) -> StageSignal | None:
        return _value_of(self.sub_stage)

    @property
    def used(self) -> bool:
        return any(s is not None for s in (self.name_signal, self.stage_signal,
                                           self.sub_stage_signal))

    @property
    def degraded_reasons(self) -> list[str]:
        return [o.reason for o in (self.partner_name, self.stage, self.sub_stage)
                if isinstance(o, Degraded)]


# ------------------------------------------------------------------
# Outputs
# ------------------------------------------------------------------

@dataclass
class ParsingResult:
    """Extraction result for a single message."""
    filename: str
    project_name: str | None = None
    partner_name: str | None = None
    partner_email: str | None = None
    communication_stage: str | None = None
    communication_sub_stage: str | None = None
    success: bool = False
    error_reason: str | None = None
    email_subject: str = ""
    email_date: str = ""
    email_from: str = ""
    confidence: float = 0.0
    match_type: str = MATCH_EXACT
    processing_time_ms: int = 0

    def __post_init__(self):
        if self.match_type not in MATCH_TYPES:
            raise ValueError(f"unknown match_type: {self.match_type!r}")

    def to_dict(self) -> dict[str, Any]:
        """Return the camelCase wire representation."""
        data: dict[str, Any] = {
            "projectName": self.project_name,
            "partnerName": self.partner_name,
            "partnerEmail": self.partner_email,
            "communicationStage": self.communication_stage,
            "communicationSubStage": self.communication_sub_stage,
            "success": self.success,
            "filename": self.filename,
            "emailSubject": self.email_subject,
            "emailDate": self.email_date,
            "emailFrom": self.email_from,
            "confidence": self.confidence,
            "matchType": self.match_type,
            "processingTime": self.processing_time_ms,
        }
        if not self.success:
            data["errorReason"] = self.error_reason
        return data


@dataclass
class BatchSummary:
    total: int = 0
    successful: int = 0
    failed: int = 0
    average_confidence: float = 0.0
    processing_time_ms: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "successful": self.successful,
            "failed": self.failed,
            "averageConfidence": self.average_confidence,
            "processingTime": self.processing_time_ms,
        }


@dataclass
class BatchResult:
    results: list[ParsingResult] = field(default_factory=list)
    summary: BatchSummary = field(default_factory=BatchSummary)
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "results": [r.to_dict() for r in self.results],
            "summary": self.summary.to_dict(),
            "errors": list(self.errors),
        }
