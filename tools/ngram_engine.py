"""
N-gram query engine: tokenize, count, filter, rank and merge in one batch pass.

``run_query`` is the single entry point used by the CLI and the HTTP router. It
never raises for degenerate input (empty text, sizes larger than any line,
everything filtered out); those produce empty result lists.
"""

from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from logging_utils import Phase, PhaseLogger
from tools.ngram_counter import count_ngrams, normalize_sizes
from tools.ngram_filters import FilterSpec, RangeFilter, apply_scalar_filters
from tools.ngram_merger import (
    MERGE_POLICIES,
    MERGED_SIZE,
    POLICY_FIRST_SEEN,
    grand_total_positions,
    merge_rows,
    merged_population_report,
)
from tools.ngram_ranker import (
    SORT_ASC,
    SORT_DESC,
    SORT_KEY_COUNT,
    SORT_KEY_PPM,
    LimitSpec,
    RankLimit,
    apply_limits,
    final_sort,
    resolve_use_ppm,
)
from tools.ngram_statistics import (
    NGramPopulation,
    NGramRow,
    PopulationReport,
    build_population_report,
)
from tools.ngram_tokenizer import tokenize_text
from tools.percentile_engine import apply_percentile_filters, assign_percentiles

logger = logging.getLogger(__name__)

DISPLAY_MINIMAL = "minimal"
DISPLAY_PLAIN = "plain"
DISPLAY_PPM = "ppm"
DISPLAY_FULL = "full"
DISPLAY_MODES = [DISPLAY_MINIMAL, DISPLAY_PLAIN, DISPLAY_PPM, DISPLAY_FULL]

MERGE_PER_SIZE = "per_size"
MERGE_MERGED = "merged"
MERGE_BOTH = "both"
MERGE_MODES = [MERGE_PER_SIZE, MERGE_MERGED, MERGE_BOTH]

DEFAULT_SIZES = (1, 2, 3)


# -----------------------------
# Query specification
# -----------------------------

@dataclass
class QuerySpec:
    sizes: List[int] = field(default_factory=lambda: list(DEFAULT_SIZES))
    filters: FilterSpec = field(default_factory=FilterSpec)

    # Ordering (sort_key None = not requested explicitly)
    sort_direction: str = SORT_ASC
    sort_key: Optional[str] = None

    limits: LimitSpec = field(default_factory=LimitSpec)

    # Output shaping
    display_mode: str = DISPLAY_PLAIN
    merge_mode: str = MERGE_PER_SIZE
    show_stats: bool = False
    stats_only: bool = False
    merged_policy: str = POLICY_FIRST_SEEN

    @property
    def wants_per_size(self) -> bool:
        return self.merge_mode in (MERGE_PER_SIZE, MERGE_BOTH)

    @property
    def wants_merged(self) -> bool:
        return self.merge_mode in (MERGE_MERGED, MERGE_BOTH)


# -----------------------------
# Normalization & validation
# -----------------------------

def _coerce_choice(name: str, val: Optional[str], allowed: List[str], default: Optional[str], warnings: List[str]) -> Optional[str]:
    if val is None:
        return default
    v = str(val).lower().replace("-", "_")
    if v not in allowed:
        warnings.append(f"{name}: invalid '{val}', using '{default}'.")
        return default
    return v


def _normalize_limit(name: str, limit: Optional[RankLimit], warnings: List[str]) -> Optional[RankLimit]:
    if limit is None:
        return None
    value = float(limit.value)
    if math.isnan(value):
        warnings.append(f"{name}: NaN limit ignored.")
        return None
    if value < 0:
        warnings.append(f"{name}: {limit.value} < 0, clamped to 0.")
        value = 0.0
    if limit.percent and value > 100:
        warnings.append(f"{name}: {limit.value}% > 100%, clamped to 100%.")
        value = 100.0
    return RankLimit(value=value, percent=limit.percent)


def _normalize_ranges(name: str, filters: List[RangeFilter], warnings: List[str]) -> List[RangeFilter]:
    kept: List[RangeFilter] = []
    for f in filters:
        if (f.min is not None and math.isnan(f.min)) or (f.max is not None and math.isnan(f.max)):
            warnings.append(f"{name}: filter with NaN bound ignored.")
            continue
        kept.append(f)
    return kept


def normalize_and_validate_query(query: QuerySpec, max_size: Optional[int] = None) -> Tuple[QuerySpec, List[str]]:
    """
    Normalize a query in place and collect warnings for what was changed.

    The given QuerySpec is updated and returned, so callers that render the
    report later (format_report) see the same sizes and modes the engine used.
    Pass a copy to keep the original untouched.

    Returns:
        (query, warnings)
    """
    w: List[str] = []

    sizes: List[int] = []
    for n in query.sizes:
        if int(n) < 1:
            w.append(f"sizes: {n} < 1, dropped.")
        elif max_size is not None and int(n) > max_size:
            w.append(f"sizes: {n} > {max_size}, dropped.")
        else:
            sizes.append(int(n))
    query.sizes = normalize_sizes(sizes)
    if not query.sizes:
        w.append("sizes: no valid n-gram size requested, results will be empty.")

    query.sort_direction = _coerce_choice("sort_direction", query.sort_direction, [SORT_ASC, SORT_DESC], SORT_ASC, w)
    query.sort_key = _coerce_choice("sort_key", query.sort_key, [SORT_KEY_COUNT, SORT_KEY_PPM], None, w)
    query.display_mode = _coerce_choice("display_mode", query.display_mode, DISPLAY_MODES, DISPLAY_PLAIN, w)
    query.merge_mode = _coerce_choice("merge_mode", query.merge_mode, MERGE_MODES, MERGE_PER_SIZE, w)
    query.merged_policy = _coerce_choice("merged_policy", query.merged_policy, list(MERGE_POLICIES), POLICY_FIRST_SEEN, w)

    query.limits = LimitSpec(
        top=_normalize_limit("top", query.limits.top, w),
        bottom=_normalize_limit("bottom", query.limits.bottom, w),
    )

    flt = query.filters
    flt.frequency = _normalize_ranges("frequency", flt.frequency, w)
    flt.ppm = _normalize_ranges("ppm", flt.ppm, w)
    flt.zscore = _normalize_ranges("zscore", flt.zscore, w)
    flt.percentile = _normalize_ranges("percentile", flt.percentile, w)

    return query, w


# -----------------------------
# Results
# -----------------------------

@dataclass
class SizeResult:
    """Ordered rows of one population plus its pre-filter report. ``n`` is 0 for merged."""

    n: int
    rows: List[NGramRow] = field(default_factory=list)
    population: Optional[PopulationReport] = None
    use_ppm: bool = False


@dataclass
class NGramReport:
    total_chars: int = 0
    total_lines: int = 0
    total_words: int = 0
    results: Dict[int, SizeResult] = field(default_factory=dict)
    merged: Optional[SizeResult] = None
    merge_mode: str = MERGE_PER_SIZE
    warnings: List[str] = field(default_factory=list)

    def rows_for(self, n: int) -> List[NGramRow]:
        result = self.results.get(n)
        return result.rows if result else []

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "input": {
                "total_chars": self.total_chars,
                "total_lines": self.total_lines,
                "total_words": self.total_words,
            },
            "warnings": list(self.warnings),
        }
        if self.merge_mode in (MERGE_PER_SIZE, MERGE_BOTH):
            out["sizes"] = {str(n): asdict(r) for n, r in self.results.items()}
        if self.merged is not None:
            out["merged"] = asdict(self.merged)
        return out


# -----------------------------
# Evaluation
# -----------------------------

def evaluate_population(population: NGramPopulation, query: QuerySpec, plog: PhaseLogger) -> SizeResult:
    """Filter, rank and sort one size population."""
    n = population.n
    rows = population.rows()

    with plog.phase(Phase.FILTER, sub_label=f"n={n}"):
        kept = apply_scalar_filters(rows, query.filters)
        index = assign_percentiles(kept)
        kept = apply_percentile_filters(kept, query.filters.percentile, index)
        plog.log_filter_counts(n, len(rows), len(kept))

    with plog.phase(Phase.RANK, sub_label=f"n={n}"):
        use_ppm = resolve_use_ppm(query.sort_key, query.display_mode, kept)
        limited = apply_limits(kept, query.limits, use_ppm)
        ordered = final_sort(limited, query.sort_direction, use_ppm)
        plog.debug(f"n={n}: ranked by {'ppm' if use_ppm else 'count'}, {len(limited)} rows after limits")

    return SizeResult(
        n=n,
        rows=ordered,
        population=build_population_report(n, [e.count for e in population.entries], population.total_positions),
        use_ppm=use_ppm,
    )


def run_query(
    text: str,
    query: Optional[QuerySpec] = None,
    phase_logger: Optional[PhaseLogger] = None,
    max_size: Optional[int] = None,
) -> NGramReport:
    """
    Run a full n-gram query over ``text``.

    Args:
        text: Raw input (the whole document)
        query: Query specification; defaults to sizes 1..3, no filters, ascending by count.
            It is normalized in place (see normalize_and_validate_query)
        phase_logger: Optional progress logger (silent when omitted)
        max_size: Largest n-gram size accepted; larger sizes are dropped with a warning

    Returns:
        NGramReport with per-size rows, optional merged rows and input counters
    """
    query, warnings = normalize_and_validate_query(query or QuerySpec(), max_size=max_size)
    plog = phase_logger or PhaseLogger(run_id="ngram")
    for msg in warnings:
        logger.debug("Query normalization: %s", msg)

    with plog.phase(Phase.TOKENIZE):
        tokenized = tokenize_text(text)
        plog.log_input_counters(tokenized.total_chars, tokenized.total_lines, tokenized.total_words)

    with plog.phase(Phase.AGGREGATE):
        tables = count_ngrams(tokenized, query.sizes)
        for n, table in tables.items():
            plog.log_population(n, len(table), table.total_positions)

    report = NGramReport(
        total_chars=tokenized.total_chars,
        total_lines=tokenized.total_lines,
        total_words=tokenized.total_words,
        merge_mode=query.merge_mode,
        warnings=warnings,
    )

    for n, table in tables.items():
        report.results[n] = evaluate_population(NGramPopulation.from_table(table), query, plog)

    if query.wants_merged:
        with plog.phase(Phase.MERGE):
            grand_total = grand_total_positions({n: t.total_positions for n, t in tables.items()})
            merged = merge_rows({n: report.rows_for(n) for n in report.results}, grand_total, query.merged_policy)
            use_ppm = resolve_use_ppm(query.sort_key, query.display_mode, merged)
            report.merged = SizeResult(
                n=MERGED_SIZE,
                rows=final_sort(merged, query.sort_direction, use_ppm),
                population=merged_population_report(merged, grand_total),
                use_ppm=use_ppm,
            )
            plog.info(f"merged {len(tables)} sizes into {len(merged)} rows")

    logger.debug(
        "Query done: sizes=%s rows=%s merged=%s",
        query.sizes,
        {n: len(r.rows) for n, r in report.results.items()},
        len(report.merged.rows) if report.merged else None,
    )
    return report
