"""
Text and numeric range filters for n-gram rows.

Every filter of every list must pass (AND semantics everywhere). Numeric filters
carry optional bounds and an ``outside`` flag; text filters carry an explicit
match mode so the regex/literal split is visible instead of being re-derived
from the pattern at match time.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Pattern

from tools.ngram_statistics import NGramRow

logger = logging.getLogger(__name__)

REGEX_HINT_CHARS = frozenset("|*+?[](){}\\")


class TextMatchKind(str, Enum):
    CONTAINS = "contains"
    NOT_CONTAINS = "not_contains"
    STARTS_WITH = "starts_with"
    NOT_STARTS_WITH = "not_starts_with"
    ENDS_WITH = "ends_with"
    NOT_ENDS_WITH = "not_ends_with"


class MatchMode(str, Enum):
    LITERAL = "literal"
    REGEX = "regex"


NEGATED_KINDS = frozenset({
    TextMatchKind.NOT_CONTAINS,
    TextMatchKind.NOT_STARTS_WITH,
    TextMatchKind.NOT_ENDS_WITH,
})


def looks_like_regex(pattern: str) -> bool:
    return any(ch in REGEX_HINT_CHARS for ch in pattern)


def compile_pattern(pattern: str) -> Optional[Pattern[str]]:
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error as exc:
        logger.debug("Pattern %r is not a valid regex (%s), matching literally", pattern, exc)
        return None


# -----------------------------
# Text filters
# -----------------------------

@dataclass
class TextFilter:
    """
    Case-insensitive text predicate.

    In ``REGEX`` mode only the contains/not-contains kinds use the regex; the
    starts/ends kinds always compare the raw pattern as a literal prefix or suffix.
    """

    kind: TextMatchKind
    pattern: str
    mode: MatchMode = MatchMode.LITERAL
    _regex: Optional[Pattern[str]] = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self.kind = TextMatchKind(self.kind)
        self.mode = MatchMode(self.mode)
        if self.mode is MatchMode.REGEX:
            self._regex = compile_pattern(self.pattern)
            if self._regex is None:
                self.mode = MatchMode.LITERAL

    @classmethod
    def from_pattern(cls, kind: TextMatchKind, pattern: str) -> "TextFilter":
        """Regex mode when the pattern carries regex metacharacters and compiles."""
        mode = MatchMode.REGEX if looks_like_regex(pattern) else MatchMode.LITERAL
        return cls(kind=kind, pattern=pattern, mode=mode)

    @classmethod
    def exclude_term(cls, term: str) -> "TextFilter":
        return cls(kind=TextMatchKind.NOT_CONTAINS, pattern=term, mode=MatchMode.LITERAL)

    @property
    def negated(self) -> bool:
        return self.kind in NEGATED_KINDS

    def _positive_match(self, text: str) -> bool:
        if self.kind in (TextMatchKind.CONTAINS, TextMatchKind.NOT_CONTAINS):
            if self._regex is not None:
                return self._regex.search(text) is not None
            return self.pattern.lower() in text.lower()
        if self.kind in (TextMatchKind.STARTS_WITH, TextMatchKind.NOT_STARTS_WITH):
            return text.lower().startswith(self.pattern.lower())
        return text.lower().endswith(self.pattern.lower())

    def matches(self, text: str) -> bool:
        hit = self._positive_match(text)
        return not hit if self.negated else hit


# -----------------------------
# Numeric range filters
# -----------------------------

@dataclass
class RangeFilter:
    """Closed range with optional bounds; ``outside`` passes values NOT in the range."""

    min: Optional[float] = None
    max: Optional[float] = None
    outside: bool = False

    def in_range(self, value: float) -> bool:
        return (self.min is None or value >= self.min) and (self.max is None or value <= self.max)

    def passes(self, value: float) -> bool:
        inside = self.in_range(value)
        return not inside if self.outside else inside


@dataclass
class FilterSpec:
    text: List[TextFilter] = field(default_factory=list)
    frequency: List[RangeFilter] = field(default_factory=list)
    ppm: List[RangeFilter] = field(default_factory=list)
    zscore: List[RangeFilter] = field(default_factory=list)
    percentile: List[RangeFilter] = field(default_factory=list)

    @property
    def has_scalar_filters(self) -> bool:
        return bool(self.text or self.frequency or self.ppm or self.zscore)

    def add_exclude_terms(self, terms: Iterable[str]) -> None:
        self.text.extend(TextFilter.exclude_term(t) for t in terms if t)

    def passes_scalar(self, row: NGramRow) -> bool:
        """Text, frequency, ppm and z-score filters. Percentile filters run separately."""
        return (
            all(f.matches(row.text) for f in self.text)
            and all(f.passes(row.count) for f in self.frequency)
            and all(f.passes(row.ppm) for f in self.ppm)
            and all(f.passes(row.z) for f in self.zscore)
        )


def apply_scalar_filters(rows: Iterable[NGramRow], spec: FilterSpec) -> List[NGramRow]:
    if not spec.has_scalar_filters:
        return list(rows)
    return [row for row in rows if spec.passes_scalar(row)]
