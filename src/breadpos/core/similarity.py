# File: src/breadpos/core/similarity.py
"""Name similarity for matching externally exported item names to the catalog."""

import re
import uuid
from collections import Counter
from dataclasses import dataclass
from typing import Iterable

# Scores at or above this are mapped without asking the operator
AUTO_MATCH_THRESHOLD = 0.8
CONTAINMENT_SCORE = 0.9

_NON_ALNUM = re.compile(r"[^0-9a-z]+")


def normalize_name(name: str) -> str:
    """Case-fold and collapse every run of non-alphanumerics to one space."""
    return _NON_ALNUM.sub(" ", (name or "").casefold()).strip()


def name_similarity(a: str, b: str) -> float:
    """
    Score two item names from 0.0 to 1.0.

    - identical after normalization: 1.0
    - one contains the other: 0.9
    - otherwise: shared characters (multiset, spaces ignored) divided by the
      length of the longer name

    >>> name_similarity("Ube Cheese Pandesal", "ube-cheese pandesal")
    1.0
    >>> name_similarity("Spanish Bread (6pc)", "Spanish Bread")
    0.9
    """
    left, right = normalize_name(a), normalize_name(b)
    if not left or not right:
        return 0.0
    if left == right:
        return 1.0
    if left in right or right in left:
        return CONTAINMENT_SCORE

    left_chars = Counter(left.replace(" ", ""))
    right_chars = Counter(right.replace(" ", ""))
    shared = sum((left_chars & right_chars).values())
    longest = max(sum(left_chars.values()), sum(right_chars.values()))
    return round(shared / longest, 4) if longest else 0.0


@dataclass(frozen=True)
class MatchCandidate:
    """A product, or one of its variants, that an external name can map to."""

    product_id: uuid.UUID
    product_name: str
    variant_index: int | None = None
    variant_name: str | None = None

    @property
    def label(self) -> str:
        if self.variant_name:
            return f"{self.product_name} {self.variant_name}"
        return self.product_name


@dataclass(frozen=True)
class MatchResult:
    candidate: MatchCandidate
    score: float

    @property
    def is_auto(self) -> bool:
        return self.score >= AUTO_MATCH_THRESHOLD


def best_match(name: str, candidates: Iterable[MatchCandidate]) -> MatchResult | None:
    """
    Highest-scoring candidate for ``name``.

    Ties keep the earliest candidate, so callers pass candidates in a stable
    catalog order.
    """
    best: MatchResult | None = None
    for candidate in candidates:
        score = name_similarity(name, candidate.label)
        if best is None or score > best.score:
            best = MatchResult(candidate=candidate, score=score)
    return best
