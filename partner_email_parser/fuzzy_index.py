"""
Fuzzy index – weighted multi-key approximate search over the project
registry, built once per batch and read-only afterwards.

Scoring follows the usual "lower is better" distance convention:

  * per key value:  d = 1 - partial_ratio(value, query) / 100;
                    plain ratio instead when the value is longer than the query
  * a key takes part only if its best value has d <= threshold
  * item score:     product of max(d, EPS) ** weight over taking-part keys

Items where no key takes part are not returned.  Results are sorted by
score ascending; ties keep registry order.
"""

import logging
import math
from dataclasses import dataclass
from typing import Callable, Generic, Iterable, TypeVar

from rapidfuzz import fuzz

from partner_email_parser.constants import (
    FUZZY_ALIAS_WEIGHT,
    FUZZY_MIN_MATCH_CHARS,
    FUZZY_NAME_WEIGHT,
    FUZZY_QUERY_CHARS,
)
from partner_email_parser.models import ProjectRecord

log = logging.getLogger(__name__)

T = TypeVar("T")

_EPS = 0.001


def _key_distance(value: str, query: str) -> float:
    if len(value) <= len(query):
        return 1.0 - fuzz.partial_ratio(value, query) / 100.0
    return 1.0 - fuzz.ratio(value, query) / 100.0


@dataclass(frozen=True)
class SearchKey(Generic[T]):
    """A weighted field extractor: item -> list of strings."""
    name: str
    weight: float
    getter: Callable[[T], Iterable[str]]


@dataclass(frozen=True)
class FuzzyHit(Generic[T]):
    item: T
    score: float
    matched_key: str
    matched_value: str


class FuzzyIndex(Generic[T]):
    """Immutable approximate-string index over a fixed item list."""

    def __init__(
        self,
        items: Iterable[T],
        keys: Iterable[SearchKey[T]],
        threshold: float = 0.4,
        distance: int = FUZZY_QUERY_CHARS,
        min_match_char_length: int = FUZZY_MIN_MATCH_CHARS,
    ):
        self._threshold = threshold
        self._distance = distance
        self._keys = tuple(keys)
        # Pre-lowered key values per item: ((key, (values...)), ...)
        entries = []
        for item in items:
            fields = []
            for key in self._keys:
                values = tuple(
                    v.lower().strip() for v in key.getter(item)
                    if v and len(v.strip()) >= min_match_char_length
                )
                fields.append((key, values))
            entries.append((item, tuple(fields)))
        self._entries = tuple(entries)

    def __len__(self) -> int:
        return len(self._entries)

    def search(self, query: str) -> list[FuzzyHit[T]]:
        """Return hits for *query*, best (lowest score) first."""
        query = (query or "").lower()[: self._distance].strip()
        if not query:
            return []

        hits: list[FuzzyHit[T]] = []
        for item, fields in self._entries:
            total = 1.0
            best_key, best_value, best_d = "", "", math.inf
            took_part = False
            for key, values in fields:
                if not values:
                    continue
                d, value = min(
                    ((_key_distance(v, query), v) for v in values),
                    key=lambda pair: pair[0],
                )
                if d > self._threshold:
                    continue
                took_part = True
                total *= max(d, _EPS) ** key.weight
                if d < best_d:
                    best_key, best_value, best_d = key.name, value, d
            if took_part:
                hits.append(FuzzyHit(item, total, best_key, best_value))

        hits.sort(key=lambda h: h.score)
        return hits


def build_project_index(projects: Iterable[ProjectRecord], threshold: float = 0.4) -> FuzzyIndex[ProjectRecord]:
    """Build the per-batch project index (name weight 0.7, aliases 0.3)."""
    projects = list(projects)
    index = FuzzyIndex(
        projects,
        keys=[
            SearchKey("name", FUZZY_NAME_WEIGHT, lambda p: [p.name]),
            SearchKey("aliases", FUZZY_ALIAS_WEIGHT, lambda p: list(p.aliases)),
        ],
        threshold=threshold,
    )
    log.info("Project fuzzy index built: %d projects (threshold=%.2f)",
             len(projects), threshold)
    return index
