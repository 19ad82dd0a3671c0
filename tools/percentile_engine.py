"""
Tie-grouped percentile ranks and percentile range filtering.

Items with equal counts form one group and share a single percentile taken at
the group's middle position, so a percentile filter can only keep or drop whole
groups. Filter bounds are snapped to the nearest group percentile before being
compared; see ``percentile_passes`` for the exact rule.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from tools.ngram_filters import RangeFilter
from tools.ngram_statistics import NGramRow

# Max distance between a bound and its nearest group percentile for the bound
# to be loosened onto that group.
SNAP_DISTANCE_THRESHOLD = 5.0

SINGLE_ITEM_PERCENTILE = 50.0


@dataclass
class PercentileIndex:
    """Percentile of each count plus the sorted set of distinct group percentiles."""

    by_count: Dict[int, float] = field(default_factory=dict)
    boundaries: List[float] = field(default_factory=list)

    def percentile_of(self, count: int) -> float:
        return self.by_count.get(count, 0.0)


def build_percentile_index(counts: Sequence[int]) -> PercentileIndex:
    ordered = sorted(counts)
    total = len(ordered)
    index = PercentileIndex()
    if total == 0:
        return index
    if total == 1:
        index.by_count[ordered[0]] = SINGLE_ITEM_PERCENTILE
        index.boundaries.append(SINGLE_ITEM_PERCENTILE)
        return index

    processed = 0
    i = 0
    while i < total:
        value = ordered[i]
        j = i
        while j < total and ordered[j] == value:
            j += 1
        group_size = j - i
        middle = processed + group_size // 2
        pct = middle / (total - 1) * 100
        index.by_count[value] = pct
        index.boundaries.append(pct)
        processed += group_size
        i = j
    return index


def nearest_boundary(boundaries: Sequence[float], target: float) -> float:
    """Closest boundary to ``target``; the lower one wins a tie."""
    best = boundaries[0]
    best_dist = abs(best - target)
    for b in boundaries[1:]:
        dist = abs(b - target)
        if dist < best_dist:
            best, best_dist = b, dist
    return best


def _fails_min(value: float, bound: float, boundaries: Sequence[float]) -> bool:
    nb = nearest_boundary(boundaries, bound)
    dist = abs(nb - bound)
    return (value < nb and bound > nb) or (
        value < bound and (nb >= bound or dist > SNAP_DISTANCE_THRESHOLD)
    )


def _fails_max(value: float, bound: float, boundaries: Sequence[float]) -> bool:
    nb = nearest_boundary(boundaries, bound)
    dist = abs(nb - bound)
    return (value > nb and bound < nb) or (
        value > bound and (nb <= bound or dist > SNAP_DISTANCE_THRESHOLD)
    )


def percentile_passes(value: float, flt: RangeFilter, boundaries: Optional[Sequence[float]]) -> bool:
    """
    Evaluate one percentile filter.

    With a boundary set each bound is compared through its nearest boundary, and
    a value just below a min (or above a max) still passes when that bound sits
    within SNAP_DISTANCE_THRESHOLD above (below) its nearest boundary. Without
    boundaries the bounds are compared directly. ``outside`` inverts the result.
    """
    if boundaries:
        fails = (flt.min is not None and _fails_min(value, flt.min, boundaries)) or (
            flt.max is not None and _fails_max(value, flt.max, boundaries)
        )
    else:
        fails = (flt.min is not None and value < flt.min) or (flt.max is not None and value > flt.max)
    inside = not fails
    return not inside if flt.outside else inside


def assign_percentiles(rows: List[NGramRow]) -> PercentileIndex:
    """Rank ``rows`` among themselves and store each row's percentile on it."""
    index = build_percentile_index([r.count for r in rows])
    for row in rows:
        row.percentile = index.percentile_of(row.count)
    return index


def apply_percentile_filters(
    rows: List[NGramRow],
    filters: Sequence[RangeFilter],
    index: Optional[PercentileIndex] = None,
) -> List[NGramRow]:
    if not rows:
        return []
    if index is None:
        index = assign_percentiles(rows)
    if not filters:
        return list(rows)
    return [
        row for row in rows
        if all(percentile_passes(index.percentile_of(row.count), f, index.boundaries) for f in filters)
    ]
