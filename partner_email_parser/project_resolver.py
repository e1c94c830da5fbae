"""
Project resolver – matches normalised subject + body text against the
project registry.

Matching is an ordered table of independent matcher strategies; each one
returns a ProjectMatch or None and the first non-empty result wins:

  1. exact     project name is a substring            → 0.95
  2. alias     any alias is a substring               → 0.80
  3. fuzzy     best FuzzyIndex hit with score < 0.5   → max(1 - score, 0.3)

Within the exact and alias tiers projects are tried in registry order, so
the first configured project wins.  When nothing hits, a no_match result
with confidence 0 is returned.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Sequence

from partner_email_parser.constants import (
    CONFIDENCE_HIGH,
    CONFIDENCE_LOW,
    CONFIDENCE_VERY_HIGH,
    FUZZY_ACCEPT_SCORE,
    FUZZY_QUERY_CHARS,
    METHOD_ALIAS,
    METHOD_EXACT,
    METHOD_FUZZY,
    METHOD_NONE,
)
from partner_email_parser.fuzzy_index import FuzzyIndex
from partner_email_parser.models import ProjectMatch, ProjectRecord

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatchContext:
    """Inputs shared by every matcher for one message."""
    search_text: str                      # lower-cased "subject body"
    projects: Sequence[ProjectRecord]
    index: FuzzyIndex | None


Matcher = Callable[[MatchContext], ProjectMatch | None]


# ------------------------------------------------------------------
# Matcher strategies
# ------------------------------------------------------------------

def match_exact(ctx: MatchContext) -> ProjectMatch | None:
    """Project name substring, first configured project wins."""
    for project in ctx.projects:
        if project.name and project.name.lower() in ctx.search_text:
            return ProjectMatch(
                project_name=project.name,
                confidence=CONFIDENCE_VERY_HIGH,
                method=METHOD_EXACT,
                evidence=[f'exact project name match: "{project.name}"'],
            )
    return None


def match_alias(ctx: MatchContext) -> ProjectMatch | None:
    for project in ctx.projects:
        for alias in project.aliases:
            if alias and alias.lower() in ctx.search_text:
                return ProjectMatch(
                    project_name=project.name,
                    confidence=CONFIDENCE_HIGH,
                    method=METHOD_ALIAS,
                    evidence=[f'alias match: "{alias}" -> "{project.name}"'],
                )
    return None


def match_fuzzy(ctx: MatchContext) -> ProjectMatch | None:
    """Best approximate hit from the per-batch index."""
    if ctx.index is None or len(ctx.index) == 0:
        return None
    try:
        hits = ctx.index.search(ctx.search_text[:FUZZY_QUERY_CHARS])
    except Exception as exc:
        log.warning("Fuzzy project search failed: %s", exc)
        return None
    if not hits:
        return None

    best = hits[0]
    if best.score >= FUZZY_ACCEPT_SCORE:
        log.debug("Fuzzy best hit rejected: %s score=%.3f", best.item.name, best.score)
        return None
    return ProjectMatch(
        project_name=best.item.name,
        confidence=max(1.0 - best.score, CONFIDENCE_LOW),
        method=METHOD_FUZZY,
        evidence=[
            f'fuzzy match: "{best.item.name}" via {best.matched_key} '
            f'"{best.matched_value}" (score={best.score:.3f})'
        ],
    )


# Ordered matcher table – add tiers here
MATCHERS: list[tuple[str, Matcher]] = [
    ("exact", match_exact),
    ("alias", match_alias),
    ("fuzzy", match_fuzzy),
]


# ------------------------------------------------------------------
# Public API
# ------------------------------------------------------------------

def resolve_project(
    subject: str,
    body: str,
    projects: Sequence[ProjectRecord],
    index: FuzzyIndex | None = None,
    matchers: Sequence[tuple[str, Matcher]] | None = None,
) -> ProjectMatch:
    """Return exactly one ProjectMatch for the given text."""
    ctx = MatchContext(
        search_text=f"{subject or ''} {body or ''}".lower(),
        projects=projects,
        index=index,
    )
    for name, matcher in (matchers if matchers is not None else MATCHERS):
        match = matcher(ctx)
        if match is not None:
            log.debug("Project matcher %s hit: %s (%s, %.2f)",
                      name, match.project_name, match.method, match.confidence)
            return match
    return ProjectMatch(project_name=None, confidence=0.0, method=METHOD_NONE, evidence=[])
