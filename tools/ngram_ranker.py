"""
Top/bottom limiting and final ordering of n-gram rows.

Limits are boundary inclusive: the key of the row at the cutoff rank becomes a
threshold and every row tied with it is kept, so a ``top 2`` can return more
than two rows. Top and bottom selections are concatenated, not de-duplicated.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from tools.ngram_statistics import NGramRow

SORT_ASC = "asc"
SORT_DESC = "desc"
SORT_KEY_COUNT = "count"
SORT_KEY_PPM = "ppm"

# Display modes that show ppm and therefore rank by it unless told otherwise.
RICH_DISPLAY_MODES = frozenset({"ppm", "full"})


@dataclass
class RankLimit:
    """``value`` rows, or ``value`` percent of the population when ``percent`` is set."""

    value: float
    percent: bool = False

    def items_to_take(self, total: int) -> int:
        if self.percent:
            take = max(1, int(math.ceil(total * self.value / 100)))
        else:
            take = int(self.value)
        return max(0, min(take, total))


@dataclass
class LimitSpec:
    top: Optional[RankLimit] = None
    bottom: Optional[RankLimit] = None

    @property
    def active(self) -> bool:
        return self.top is not None or self.bottom is not None


def resolve_use_ppm(sort_key: Optional[str], display_mode: str, rows: Sequence[NGramRow]) -> bool:
    if sort_key == SORT_KEY_PPM:
        return True
    if sort_key is None and display_mode in RICH_DISPLAY_MODES:
        return any(r.ppm > 0 for r in rows)
    return False


def key_function(use_ppm: bool) -> Callable[[NGramRow], float]:
    if use_ppm:
        return lambda r: r.ppm
    return lambda r: r.count


def _select(rows: Sequence[NGramRow], limit: RankLimit, use_ppm: bool, top: bool) -> List[NGramRow]:
    take = limit.items_to_take(len(rows))
    if take <= 0:
        return []
    key = key_function(use_ppm)
    if top:
        ordered = sorted(rows, key=lambda r: (-key(r), r.text))
        boundary = key(ordered[take - 1])
        return [r for r in ordered if key(r) >= boundary]
    ordered = sorted(rows, key=lambda r: (key(r), r.text))
    boundary = key(ordered[take - 1])
    return [r for r in ordered if key(r) <= boundary]


def select_top(rows: Sequence[NGramRow], limit: RankLimit, use_ppm: bool = False) -> List[NGramRow]:
    return _select(rows, limit, use_ppm, top=True)


def select_bottom(rows: Sequence[NGramRow], limit: RankLimit, use_ppm: bool = False) -> List[NGramRow]:
    return _select(rows, limit, use_ppm, top=False)


def apply_limits(rows: Sequence[NGramRow], limits: LimitSpec, use_ppm: bool = False) -> List[NGramRow]:
    if not limits.active:
        return list(rows)
    out: List[NGramRow] = []
    if limits.top is not None:
        out.extend(select_top(rows, limits.top, use_ppm))
    if limits.bottom is not None:
        out.extend(select_bottom(rows, limits.bottom, use_ppm))
    return out


def final_sort(rows: Sequence[NGramRow], direction: str = SORT_ASC, use_ppm: bool = False) -> List[NGramRow]:
    """Sort by the ranking key in ``direction``; ties always by ascending text."""
    key = key_function(use_ppm)
    if direction == SORT_DESC:
        return sorted(rows, key=lambda r: (-key(r), r.text))
    return sorted(rows, key=lambda r: (key(r), r.text))
