"""
Batch orchestrator – runs the full pipeline over a list of message files.

Pipeline per file:
  1) Decode MIME → subject / sender / recipients / date / body
  2) Normalise subject + body
  3) Resolve project (exact → alias → fuzzy)
  4) Extract counterparty (headers → body regex → body name patterns)
  5) Optional AI enrichment (name, stage, sub-stage)
  6) Synthesize ParsingResult

The fuzzy index is built once per batch and passed down explicitly.  Any
exception raised while handling a file is caught at the file boundary,
turned into a failed ParsingResult plus an entry in ``errors``, and the
batch moves on to the next file.
"""

import logging
import time
from typing import Callable, Sequence

from partner_email_parser.ai_enrichment import EnrichmentAdapter
from partner_email_parser.constants import FAILED_SUBJECT, MATCH_EXACT
from partner_email_parser.content_normalizer import normalize_message
from partner_email_parser.counterparty import extract_counterparty
from partner_email_parser.fuzzy_index import FuzzyIndex, build_project_index
from partner_email_parser.mime_decoder import decode_message
from partner_email_parser.models import (
    BatchResult,
    BatchSummary,
    ParsingConfig,
    ParsingResult,
    SourceMessage,
)
from partner_email_parser.project_resolver import resolve_project
from partner_email_parser.synthesizer import synthesize_result

log = logging.getLogger(__name__)

Clock = Callable[[], float]


def _elapsed_ms(clock: Clock, start: float) -> int:
    return max(int(round((clock() - start) * 1000)), 0)


def build_index(config: ParsingConfig) -> FuzzyIndex | None:
    """Build the per-batch fuzzy index; None for an empty registry."""
    if not config.projects:
        log.warning("Project registry is empty – every message will resolve to no_match")
        return None
    return build_project_index(config.projects, threshold=1.0 - config.fuzzy_match_threshold)


def parse_single_email(
    message: SourceMessage,
    config: ParsingConfig,
    index: FuzzyIndex | None,
    adapter: EnrichmentAdapter | None = None,
    clock: Clock = time.perf_counter,
) -> ParsingResult:
    """Run the full pipeline for one message.  Exceptions propagate."""
    start = clock()

    decoded = decode_message(message.raw_content)
    subject, body = normalize_message(decoded, config.max_content_length)
    log.debug("Parsing %s: subject=%r body_len=%d", message.filename, subject[:80], len(body))

    project_match = resolve_project(subject, body, config.projects, index)
    log.info("Project match for %s: %s (%s, %.2f)",
             message.filename, project_match.project_name,
             project_match.method, project_match.confidence)

    counterparty = extract_counterparty(decoded, body, config.platform_domains)
    log.info("Counterparty for %s: name=%s email=%s",
             message.filename, counterparty.name, counterparty.email)

    enrichment = None
    if config.enable_ai:
        if adapter is None:
            log.warning("AI enabled but no chat client configured – skipping enrichment")
        else:
            enrichment = adapter.enrich(body, counterparty, config.stages,
                                        filename=message.filename)

    return synthesize_result(
        filename=message.filename,
        subject=subject,
        date=decoded.date,
        sender=decoded.sender.email if decoded.sender else "",
        project_match=project_match,
        counterparty=counterparty,
        enrichment=enrichment,
        ai_confidence_threshold=config.ai_confidence_threshold,
        processing_time_ms=_elapsed_ms(clock, start),
    )


def failed_result(filename: str, error: str) -> ParsingResult:
    return ParsingResult(
        filename=filename,
        success=False,
        error_reason=error,
        email_subject=FAILED_SUBJECT,
        confidence=0.0,
        match_type=MATCH_EXACT,
        processing_time_ms=0,
    )


def summarize(results: Sequence[ParsingResult], errors: Sequence[str],
              total: int, processing_time_ms: int) -> BatchSummary:
    # failed counts unsuccessful results plus out-of-band errors; a file that
    # raised therefore contributes twice
    return BatchSummary(
        total=total,
        successful=sum(1 for r in results if r.success),
        failed=sum(1 for r in results if not r.success) + len(errors),
        average_confidence=(
            sum(r.confidence for r in results) / len(results) if results else 0.0
        ),
        processing_time_ms=processing_time_ms,
    )


def parse_emails(
    files: Sequence[SourceMessage],
    config: ParsingConfig,
    adapter: EnrichmentAdapter | None = None,
    clock: Clock = time.perf_counter,
) -> BatchResult:
    """Parse every file in order and return the aggregated BatchResult."""
    start = clock()
    results: list[ParsingResult] = []
    errors: list[str] = []

    log.info("Batch parse: %d files, %d projects, %d stages, ai=%s",
             len(files), len(config.projects), len(config.stages), config.enable_ai)

    index = build_index(config)

    for message in files:
        try:
            log.info("Processing file: %s", message.filename)
            results.append(parse_single_email(message, config, index, adapter, clock))
        except Exception as exc:
            error_msg = str(exc) or type(exc).__name__
            log.error("Parse failed for %s: %s", message.filename, error_msg)
            log.debug("Parse failure details", exc_info=True)
            results.append(failed_result(message.filename, error_msg))
            errors.append(f"{message.filename}: {error_msg}")

    summary = summarize(results, errors, total=len(files),
                        processing_time_ms=_elapsed_ms(clock, start))
    log.info("Batch complete: total=%d successful=%d failed=%d avg_confidence=%.3f time=%dms",
             summary.total, summary.successful, summary.failed,
             summary.average_confidence, summary.processing_time_ms)
    return BatchResult(results=results, summary=summary, errors=errors)
