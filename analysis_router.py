"""
FastAPI router for the n-gram analyzer
======================================

Provides HTTP API endpoints for:
- N-gram frequency analysis: per-size and merged counts with ppm, z-score and
  percentile statistics, text/range filters and top/bottom limits
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional, Literal

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, Field, model_validator

from config import config
from logging_utils import Phase, create_phase_logger
from tools.ngram_engine import QuerySpec, run_query
from tools.ngram_filters import FilterSpec, MatchMode, RangeFilter, TextFilter, TextMatchKind
from tools.ngram_ranker import LimitSpec, RankLimit
from tools.ngram_report_format import format_report

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/analysis", tags=["analysis"])


# ============================================================================
# REQUEST MODELS
# ============================================================================

class RangeFilterRequest(BaseModel):
    """Inclusive numeric range; either bound may be omitted"""

    min: Optional[float] = Field(default=None, description="Lower bound (inclusive)")
    max: Optional[float] = Field(default=None, description="Upper bound (inclusive)")
    outside: bool = Field(default=False, description="Keep values outside [min, max] instead")

    @model_validator(mode="after")
    def check_bounds(self):
        if self.min is not None and self.max is not None and self.min > self.max:
            raise ValueError("min must be <= max")
        return self

    def to_filter(self) -> RangeFilter:
        return RangeFilter(min=self.min, max=self.max, outside=self.outside)


class TextFilterRequest(BaseModel):
    """Text filter over the n-gram text (case-insensitive)"""

    kind: Literal[
        "contains", "not_contains", "starts_with", "not_starts_with", "ends_with", "not_ends_with"
    ] = Field(..., description="Match kind")
    pattern: str = Field(..., min_length=1, description="Literal text or regular expression")
    mode: Optional[Literal["literal", "regex"]] = Field(
        default=None,
        description="Match mode; when omitted, regex metacharacters in the pattern enable regex mode",
    )

    def to_filter(self) -> TextFilter:
        kind = TextMatchKind(self.kind)
        if self.mode is None:
            return TextFilter.from_pattern(kind, self.pattern)
        return TextFilter(kind=kind, pattern=self.pattern, mode=MatchMode(self.mode))


class LimitRequest(BaseModel):
    """Row limit: N rows, or N percent of the filtered population"""

    value: float = Field(..., ge=0, description="Number of rows (or percent when percent=true)")
    percent: bool = Field(default=False, description="Interpret value as a percentage")

    def to_limit(self) -> RankLimit:
        value = self.value if self.percent else int(self.value)
        return RankLimit(value=value, percent=self.percent)


class NGramQueryRequest(BaseModel):
    """Request model for the n-gram analysis endpoint"""

    # Input (required)
    text: str = Field(..., description="Text to analyze (lines are processed independently)")

    # Counting
    sizes: Optional[List[int]] = Field(
        default=None,
        description="N-gram sizes to count (default: 1..NGRAM_DEFAULT_MAX_N)",
    )
    min_count: Optional[int] = Field(
        default=None,
        ge=1,
        description="Only report n-grams seen at least this many times (default: NGRAM_DEFAULT_MIN_COUNT)",
    )

    # Filters
    text_filters: List[TextFilterRequest] = Field(default_factory=list, description="Text filters (ANDed)")
    frequency: List[RangeFilterRequest] = Field(default_factory=list, description="Frequency range filters")
    ppm: List[RangeFilterRequest] = Field(default_factory=list, description="PPM range filters")
    zscore: List[RangeFilterRequest] = Field(default_factory=list, description="Z-score range filters")
    percentile: List[RangeFilterRequest] = Field(default_factory=list, description="Percentile range filters")
    exclude_terms: List[str] = Field(
        default_factory=list,
        description="Drop n-grams containing any of these terms (literal match)",
    )

    # Ranking
    sort_direction: Literal["asc", "desc"] = Field(default="asc", description="Final sort direction")
    sort_key: Optional[Literal["count", "ppm"]] = Field(
        default=None,
        description="Ranking key (default: count, or ppm for the ppm/full display modes)",
    )
    top: Optional[LimitRequest] = Field(default=None, description="Keep the top rows (ties included)")
    bottom: Optional[LimitRequest] = Field(default=None, description="Keep the bottom rows (ties included)")

    # Output shaping
    display_mode: Literal["minimal", "plain", "ppm", "full"] = Field(default="plain", description="Row layout")
    merge_mode: Literal["per_size", "merged", "both"] = Field(default="per_size", description="Result grouping")
    merged_policy: Literal["first_seen", "recompute"] = Field(
        default="first_seen",
        description="How merged rows get their ppm/z/percentile values",
    )
    show_stats: bool = Field(default=False, description="Include the statistics banner in rendered lines")
    include_lines: bool = Field(default=False, description="Also return the plain-text rendering")


class NGramQueryResponse(BaseModel):
    """Response model for the n-gram analysis endpoint"""

    input: Dict[str, int] = Field(..., description="Character, line and word counters")
    sizes: Optional[Dict[str, Any]] = Field(None, description="Per-size results keyed by n")
    merged: Optional[Dict[str, Any]] = Field(None, description="Merged results")
    warnings: List[str] = Field(default_factory=list, description="Query normalization warnings")
    lines: Optional[List[str]] = Field(None, description="Plain-text rendering (when include_lines=true)")
    processing_time_ms: float = Field(..., description="Processing time in milliseconds")


def build_query(request: NGramQueryRequest) -> QuerySpec:
    """Translate an API request into an engine query."""
    filters = FilterSpec(
        text=[f.to_filter() for f in request.text_filters],
        frequency=[f.to_filter() for f in request.frequency],
        ppm=[f.to_filter() for f in request.ppm],
        zscore=[f.to_filter() for f in request.zscore],
        percentile=[f.to_filter() for f in request.percentile],
    )
    filters.add_exclude_terms(t for t in request.exclude_terms if t.strip())
    min_count = request.min_count if request.min_count is not None else config.DEFAULT_MIN_COUNT
    if min_count > 1:
        filters.frequency.insert(0, RangeFilter(min=min_count))

    return QuerySpec(
        sizes=list(request.sizes) if request.sizes is not None else config.default_sizes,
        filters=filters,
        sort_direction=request.sort_direction,
        sort_key=request.sort_key,
        limits=LimitSpec(
            top=request.top.to_limit() if request.top else None,
            bottom=request.bottom.to_limit() if request.bottom else None,
        ),
        display_mode=request.display_mode,
        merge_mode=request.merge_mode,
        show_stats=request.show_stats,
        merged_policy=request.merged_policy,
    )


# ============================================================================
# ENDPOINTS
# ============================================================================

@router.post(
    "/ngrams",
    response_model=NGramQueryResponse,
    summary="Analyze N-gram Frequencies",
    description=(
        "Counts word n-grams line by line and reports each with its frequency, "
        "parts-per-million, z-score and percentile. Supports text and range filters, "
        "top/bottom limits and merging of several sizes into one list."
    )
)
async def analyze_ngrams_endpoint(request: NGramQueryRequest) -> NGramQueryResponse:
    """
    Run an n-gram query over the request text.

    Degenerate input (empty text, sizes longer than any line, everything
    filtered out) returns empty result lists rather than an error.
    """
    if len(request.text) > config.MAX_TEXT_CHARS:
        raise HTTPException(
            status_code=413,
            detail=f"Text exceeds {config.MAX_TEXT_CHARS} characters"
        )

    try:
        start_time = time.time()

        query = build_query(request)
        phase_logger = create_phase_logger("api", verbose=config.API_VERBOSE)
        report = run_query(request.text, query, phase_logger=phase_logger, max_size=config.MAX_NGRAM_SIZE)
        with phase_logger.phase(Phase.REPORT):
            payload = report.to_dict()
            lines = format_report(report, query) if request.include_lines else None
        phase_logger.log_timing_summary()

        processing_time_ms = (time.time() - start_time) * 1000

        return NGramQueryResponse(
            input=payload["input"],
            sizes=payload.get("sizes"),
            merged=payload.get("merged"),
            warnings=payload["warnings"],
            lines=lines,
            processing_time_ms=processing_time_ms,
        )

    except Exception as e:
        logger.error(f"N-gram analysis failed: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Analysis failed: {str(e)}"
        )


@router.get(
    "/health",
    summary="Health Check",
    description="Verify that the analysis endpoints are operational"
)
async def health_check():
    """Health check endpoint for analysis router"""
    return {
        "status": "healthy",
        "endpoints": [
            "/analysis/ngrams"
        ]
    }
