"""Union of per-size results into one case-insensitive, frequency-summed collection."""

from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Sequence, Set

from tools.ngram_counter import ngram_key
from tools.ngram_statistics import (
    NGramRow,
    PopulationReport,
    build_population_report,
    compute_ppm,
    population_moments,
    z_score,
)
from tools.percentile_engine import assign_percentiles

logger = logging.getLogger(__name__)

MERGED_SIZE = 0

# Merged rows keep ppm/z/percentile of the size they were first seen in; only
# the count is summed.
POLICY_FIRST_SEEN = "first_seen"
# Merged rows get ppm against the grand total and z/percentile over the merged rows.
POLICY_RECOMPUTE = "recompute"

MERGE_POLICIES = (POLICY_FIRST_SEEN, POLICY_RECOMPUTE)


def merge_rows(
    rows_by_size: Mapping[int, Sequence[NGramRow]],
    grand_total: int,
    policy: str = POLICY_FIRST_SEEN,
) -> List[NGramRow]:
    """
    Merge result rows across sizes, visiting sizes in ascending order.

    Counts of the same text from different sizes are summed. Within one size a
    text is taken once: the ranker keeps top and bottom rows that overlap, and
    those repeats must not inflate the merged count.

    Args:
        rows_by_size: Final rows per n-gram size
        grand_total: Sum of all per-size position totals
        policy: POLICY_FIRST_SEEN or POLICY_RECOMPUTE

    Returns:
        Merged rows in first-seen order (unsorted)
    """
    merged: Dict[str, NGramRow] = {}
    for n in sorted(rows_by_size):
        seen_in_size: Set[str] = set()
        for row in rows_by_size[n]:
            key = ngram_key(row.text)
            # top+bottom overlap can repeat a row within one size
            if key in seen_in_size:
                continue
            seen_in_size.add(key)
            current = merged.get(key)
            if current is None:
                merged[key] = NGramRow(
                    text=row.text,
                    n=MERGED_SIZE,
                    count=row.count,
                    ppm=row.ppm,
                    z=row.z,
                    percentile=row.percentile,
                )
            else:
                current.count += row.count

    rows = list(merged.values())
    if policy == POLICY_RECOMPUTE:
        moments = population_moments([r.count for r in rows])
        for r in rows:
            r.ppm = compute_ppm(r.count, grand_total)
            r.z = z_score(r.count, moments)
        assign_percentiles(rows)
    logger.debug("Merged %d sizes into %d rows (policy=%s)", len(rows_by_size), len(rows), policy)
    return rows


def merged_population_report(rows: Sequence[NGramRow], grand_total: int) -> PopulationReport:
    """Banner figures for a merged population; ppm always uses the grand total."""
    return build_population_report(MERGED_SIZE, [r.count for r in rows], grand_total)


def grand_total_positions(totals: Mapping[int, int]) -> int:
    return sum(totals.values())
