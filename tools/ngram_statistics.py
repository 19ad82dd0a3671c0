"""
PPM, z-score and distribution statistics for n-gram populations.

A population is every n-gram of one size (or the merged cross-size set). PPM is
normalized against the number of n-gram positions of that population, z-scores
use the population standard deviation (divide by N), and both degrade to 0
instead of raising on empty or flat populations.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence

from tools.ngram_counter import NGramEntry, NGramTable

PPM_SCALE = 1_000_000
P90_RANK = 0.9


# -----------------------------
# Rows
# -----------------------------

@dataclass
class NGramRow:
    """One reported n-gram. ``n`` is 0 for rows of a merged population."""

    text: str
    n: int
    count: int
    ppm: float = 0.0
    z: float = 0.0
    percentile: float = 0.0


# -----------------------------
# Scalar statistics
# -----------------------------

def compute_ppm(count: int, total_positions: int) -> float:
    return count / max(1, total_positions) * PPM_SCALE


@dataclass(frozen=True)
class PopulationMoments:
    mean: float = 0.0
    stddev: float = 0.0


def population_moments(values: Sequence[float]) -> PopulationMoments:
    if not values:
        return PopulationMoments()
    n = len(values)
    mean = float(sum(values)) / n
    var = float(sum((v - mean) ** 2 for v in values)) / n
    return PopulationMoments(mean=mean, stddev=math.sqrt(var))


def z_score(value: float, moments: PopulationMoments) -> float:
    if moments.stddev == 0:
        return 0.0
    return (value - moments.mean) / moments.stddev


class NGramPopulation:
    """
    Statistics view over the entries of one n-gram size.

    Mean and standard deviation are only computed the first time a z-score is
    requested and are cached afterwards.
    """

    def __init__(self, n: int, entries: Iterable[NGramEntry], total_positions: int):
        self.n = n
        self.entries: List[NGramEntry] = list(entries)
        self.total_positions = total_positions
        self._moments: Optional[PopulationMoments] = None

    @classmethod
    def from_table(cls, table: NGramTable) -> "NGramPopulation":
        return cls(table.n, table.entries.values(), table.total_positions)

    @property
    def moments(self) -> PopulationMoments:
        if self._moments is None:
            self._moments = population_moments([e.count for e in self.entries])
        return self._moments

    def ppm(self, count: int) -> float:
        return compute_ppm(count, self.total_positions)

    def z(self, count: int) -> float:
        return z_score(count, self.moments)

    def rows(self) -> List[NGramRow]:
        return [
            NGramRow(text=e.text, n=self.n, count=e.count, ppm=self.ppm(e.count), z=self.z(e.count))
            for e in self.entries
        ]


# -----------------------------
# Distribution summaries
# -----------------------------

@dataclass
class DistributionSummary:
    count: int = 0
    min: float = 0.0
    max: float = 0.0
    avg: float = 0.0
    median: float = 0.0
    p90: float = 0.0


def summarize_distribution(values: Iterable[float]) -> DistributionSummary:
    """
    Summarize a list of values.

    ``median`` averages the two middle elements for even lengths; ``p90`` is the
    nearest-rank element at ``floor(len * 0.9)`` (no interpolation).
    """
    vals = sorted(float(v) for v in values)
    if not vals:
        return DistributionSummary()
    n = len(vals)
    mid = n // 2
    if n % 2 == 1:
        median = vals[mid]
    else:
        median = (vals[mid - 1] + vals[mid]) / 2
    p90_idx = min(int(math.floor(n * P90_RANK)), n - 1)
    return DistributionSummary(
        count=n,
        min=vals[0],
        max=vals[-1],
        avg=sum(vals) / n,
        median=median,
        p90=vals[p90_idx],
    )


@dataclass
class PopulationReport:
    """Pre-filter figures of a population, consumed by the statistics banner."""

    n: int
    unique_count: int = 0
    total_positions: int = 0
    frequencies: List[int] = field(default_factory=list)
    ppms: List[float] = field(default_factory=list)

    def frequency_summary(self) -> DistributionSummary:
        return summarize_distribution(self.frequencies)

    def ppm_summary(self) -> DistributionSummary:
        return summarize_distribution(self.ppms)


def build_population_report(n: int, counts: Iterable[int], total_positions: int) -> PopulationReport:
    frequencies = sorted(counts)
    return PopulationReport(
        n=n,
        unique_count=len(frequencies),
        total_positions=total_positions,
        frequencies=frequencies,
        ppms=[compute_ppm(c, total_positions) for c in frequencies],
    )
