"""Plain-text rendering of n-gram reports (section headers, rows, statistics banner)."""

from __future__ import annotations

from typing import List

from tools.ngram_engine import (
    DISPLAY_FULL,
    DISPLAY_MINIMAL,
    DISPLAY_PPM,
    NGramReport,
    QuerySpec,
    SizeResult,
)
from tools.ngram_statistics import DistributionSummary, NGramRow


def _num(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.2f}"


def format_summary(label: str, summary: DistributionSummary) -> str:
    return (
        f"# {label}: min={_num(summary.min)} max={_num(summary.max)} "
        f"avg={_num(summary.avg)} median={_num(summary.median)} p90={_num(summary.p90)}"
    )


def format_row(row: NGramRow, display_mode: str) -> str:
    if display_mode == DISPLAY_MINIMAL:
        return row.text
    if display_mode == DISPLAY_PPM:
        return f"{row.count}: {row.text} ({row.ppm:.2f} ppm)"
    if display_mode == DISPLAY_FULL:
        return (
            f"{row.count:>6}  {row.ppm:>12.2f} ppm  z={row.z:>+7.3f}  "
            f"p{row.percentile:>5.1f}  {row.text}"
        )
    return f"{row.count}: {row.text}"


def section_title(result: SizeResult) -> str:
    if result.n == 0:
        return "## merged n-grams"
    return f"## {result.n}-grams"


def format_banner(result: SizeResult) -> List[str]:
    pop = result.population
    if pop is None:
        return []
    return [
        f"# unique: {pop.unique_count}, positions: {pop.total_positions}, shown: {len(result.rows)}",
        format_summary("frequency", pop.frequency_summary()),
        format_summary("ppm", pop.ppm_summary()),
    ]


def format_section(result: SizeResult, query: QuerySpec) -> List[str]:
    lines = ["", section_title(result), ""]
    if query.show_stats or query.stats_only:
        lines.extend(format_banner(result))
        if query.stats_only:
            return lines
        lines.append("")
    lines.extend(format_row(row, query.display_mode) for row in result.rows)
    return lines


def format_report(report: NGramReport, query: QuerySpec) -> List[str]:
    """Render ``report`` to output lines (no trailing newlines)."""
    lines: List[str] = []
    if query.show_stats or query.stats_only:
        lines.append(
            f"# input: {report.total_chars} chars, {report.total_lines} lines, {report.total_words} words"
        )
    if query.wants_per_size:
        for n in sorted(report.results):
            lines.extend(format_section(report.results[n], query))
    if query.wants_merged and report.merged is not None:
        lines.extend(format_section(report.merged, query))
    return lines
