#!/usr/bin/env python
"""
Command line front end for the n-gram analyzer.

Classic usage reads stdin and prints every n-gram of sizes 1..3 in ascending
frequency order:

    ngram-count < notes.txt
    ngram-count 4 2 --file notes.txt            # sizes 1..4, count >= 2
    ngram-count -n 2 --top 10% --by ppm --display full --stats < notes.txt

Range filters use ``MIN:MAX`` with either side optional; a single value means
exactly that value and a leading ``!`` selects values outside the range. Attach
negative bounds with ``=`` so they are not read as options: ``--z=-1:1``.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Iterable, List, Optional

import json_utils as json
from config import config
from logging_utils import Phase, create_phase_logger
from tools.ngram_engine import DISPLAY_MODES, MERGE_MODES, QuerySpec, run_query
from tools.ngram_filters import FilterSpec, RangeFilter, TextFilter, TextMatchKind
from tools.ngram_merger import MERGE_POLICIES
from tools.ngram_ranker import SORT_ASC, SORT_DESC, SORT_KEY_COUNT, SORT_KEY_PPM, LimitSpec, RankLimit
from tools.ngram_report_format import format_report

logger = logging.getLogger(__name__)

OUTSIDE_PREFIX = "!"
RANGE_SEPARATOR = ":"
COMMENT_PREFIX = "#"


class FilterSyntaxError(ValueError):
    """A filter or limit expression could not be parsed."""


class ExcludeFileError(OSError):
    """An exclude file could not be read."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Cannot read exclude file {path}: {reason}")
        self.path = path


# -----------------------------
# Mini-grammar
# -----------------------------

def _parse_number(raw: str, expr: str) -> Optional[float]:
    raw = raw.strip()
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError:
        raise FilterSyntaxError(f"'{raw}' is not a number in range '{expr}'") from None


def parse_range(expr: str) -> RangeFilter:
    """Parse ``[!]MIN:MAX`` / ``[!]MIN:`` / ``[!]:MAX`` / ``[!]VALUE`` into a RangeFilter."""
    body = expr.strip()
    outside = body.startswith(OUTSIDE_PREFIX)
    if outside:
        body = body[len(OUTSIDE_PREFIX):].strip()
    if not body:
        raise FilterSyntaxError(f"empty range '{expr}'")
    if RANGE_SEPARATOR in body:
        lo_raw, _, hi_raw = body.partition(RANGE_SEPARATOR)
        if RANGE_SEPARATOR in hi_raw:
            raise FilterSyntaxError(f"too many '{RANGE_SEPARATOR}' in range '{expr}'")
        lo = _parse_number(lo_raw, expr)
        hi = _parse_number(hi_raw, expr)
    else:
        lo = hi = _parse_number(body, expr)
    if lo is not None and hi is not None and lo > hi:
        raise FilterSyntaxError(f"min > max in range '{expr}'")
    return RangeFilter(min=lo, max=hi, outside=outside)


def parse_limit(expr: str) -> RankLimit:
    """Parse ``N`` (rows) or ``N%`` (percent of the population)."""
    body = expr.strip()
    percent = body.endswith("%")
    if percent:
        body = body[:-1].strip()
    try:
        value = float(body) if percent else int(body)
    except ValueError:
        raise FilterSyntaxError(f"invalid limit '{expr}' (expected N or N%)") from None
    if value < 0:
        raise FilterSyntaxError(f"negative limit '{expr}'")
    return RankLimit(value=value, percent=percent)


def _argparse_type(fn):
    def convert(raw: str):
        try:
            return fn(raw)
        except FilterSyntaxError as exc:
            raise argparse.ArgumentTypeError(str(exc))
    convert.__name__ = fn.__name__
    return convert


# -----------------------------
# Exclude files
# -----------------------------

def parse_exclude_terms(lines: Iterable[str]) -> List[str]:
    terms: List[str] = []
    for line in lines:
        term = line.strip()
        if not term or term.startswith(COMMENT_PREFIX):
            continue
        terms.append(term)
    return terms


def load_exclude_terms(paths: Iterable[str], max_terms: Optional[int] = None) -> List[str]:
    terms: List[str] = []
    for path in paths:
        try:
            text = Path(path).read_text(encoding="utf-8", errors="ignore")
        except OSError as exc:
            raise ExcludeFileError(path, exc.strerror or str(exc)) from exc
        terms.extend(parse_exclude_terms(text.splitlines()))
    if max_terms is not None and len(terms) > max_terms:
        logger.warning("Exclude files hold %d terms, keeping the first %d", len(terms), max_terms)
        terms = terms[:max_terms]
    return terms


# -----------------------------
# CLI
# -----------------------------

TEXT_FILTER_OPTIONS = [
    ("--contains", TextMatchKind.CONTAINS),
    ("--not-contains", TextMatchKind.NOT_CONTAINS),
    ("--starts-with", TextMatchKind.STARTS_WITH),
    ("--not-starts-with", TextMatchKind.NOT_STARTS_WITH),
    ("--ends-with", TextMatchKind.ENDS_WITH),
    ("--not-ends-with", TextMatchKind.NOT_ENDS_WITH),
]


def _lenient_int(raw: str) -> Optional[int]:
    """Positional counts fall back to their defaults when not numeric."""
    try:
        return int(raw)
    except ValueError:
        return None


def build_cli_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="ngram-count",
        description=(
            "Count word n-grams per line and report them with frequency, ppm, z-score and "
            "percentile filters. Reads stdin unless --file or --text is given."
        ),
    )
    p.add_argument("max_n", nargs="?", type=_lenient_int, default=None,
                   help=f"Count sizes 1..MAX_N (default: {config.DEFAULT_MAX_N}). Ignored when -n is used.")
    p.add_argument("min_count", nargs="?", type=_lenient_int, default=None,
                   help="Only report n-grams seen at least this many times.")

    # Input
    p.add_argument("--file", type=str, default="", help="Input text file (utf-8).")
    p.add_argument("--text", type=str, default="", help="Raw text given directly (overrides --file).")
    p.add_argument("-n", "--size", dest="sizes", action="append", type=int, default=None,
                   help="N-gram size to count (repeatable).")
    p.add_argument("--min-count", dest="min_count_opt", type=int, default=None,
                   help="Same as the MIN_COUNT positional.")

    # Filters
    for flag, kind in TEXT_FILTER_OPTIONS:
        p.add_argument(flag, dest=kind.value, action="append", default=[], metavar="PATTERN",
                       help=f"Text filter ({kind.value.replace('_', ' ')}); regex metacharacters enable regex mode.")
    rng = _argparse_type(parse_range)
    p.add_argument("--freq", action="append", type=rng, default=[], metavar="RANGE", help="Frequency range filter.")
    p.add_argument("--ppm", action="append", type=rng, default=[], metavar="RANGE", help="PPM range filter.")
    p.add_argument("--z", action="append", type=rng, default=[], metavar="RANGE", help="Z-score range filter.")
    p.add_argument("--pct", action="append", type=rng, default=[], metavar="RANGE", help="Percentile range filter.")
    p.add_argument("--exclude-file", action="append", default=[], metavar="PATH",
                   help="File with one term per line; n-grams containing any term are dropped.")

    # Ranking
    lim = _argparse_type(parse_limit)
    p.add_argument("--top", type=lim, default=None, metavar="LIMIT", help="Keep the top N (or N%%) rows, ties included.")
    p.add_argument("--bottom", type=lim, default=None, metavar="LIMIT", help="Keep the bottom N (or N%%) rows, ties included.")
    p.add_argument("--sort", choices=[SORT_ASC, SORT_DESC], default=SORT_ASC, help="Final sort direction.")
    p.add_argument("--by", choices=[SORT_KEY_COUNT, SORT_KEY_PPM], default=None,
                   help="Ranking key (default: count, or ppm in the ppm/full display modes).")

    # Output
    p.add_argument("--display", choices=DISPLAY_MODES, default="plain", help="Row layout.")
    p.add_argument("--merge", choices=[m.replace("_", "-") for m in MERGE_MODES], default="per-size",
                   help="Report per size, merged across sizes, or both.")
    p.add_argument("--merged-policy", choices=list(MERGE_POLICIES), default=MERGE_POLICIES[0],
                   help="How merged rows get their ppm/z values.")
    p.add_argument("--stats", action="store_true", help="Print the statistics banner.")
    p.add_argument("--stats-only", action="store_true", help="Print only the statistics banner.")
    p.add_argument("--json", action="store_true", help="Print the report as JSON.")
    p.add_argument("--json-out", type=str, default="", help="Write the JSON report to this path.")
    p.add_argument("-v", "--verbose", action="count", default=0, help="Progress logs (-vv adds timings).")
    return p


def build_query_from_args(args: argparse.Namespace, exclude_terms: Iterable[str] = ()) -> QuerySpec:
    if args.sizes:
        sizes = list(args.sizes)
    else:
        max_n = args.max_n if args.max_n and args.max_n > 0 else config.DEFAULT_MAX_N
        sizes = list(range(1, max_n + 1))

    filters = FilterSpec(
        frequency=list(args.freq),
        ppm=list(args.ppm),
        zscore=list(args.z),
        percentile=list(args.pct),
    )
    for _, kind in TEXT_FILTER_OPTIONS:
        for pattern in getattr(args, kind.value):
            filters.text.append(TextFilter.from_pattern(kind, pattern))
    filters.add_exclude_terms(exclude_terms)

    min_count = args.min_count_opt if args.min_count_opt is not None else args.min_count
    if min_count is None:
        min_count = config.DEFAULT_MIN_COUNT
    if min_count > 1:
        filters.frequency.insert(0, RangeFilter(min=min_count))

    return QuerySpec(
        sizes=sizes,
        filters=filters,
        sort_direction=args.sort,
        sort_key=args.by,
        limits=LimitSpec(top=args.top, bottom=args.bottom),
        display_mode=args.display,
        merge_mode=args.merge.replace("-", "_"),
        show_stats=args.stats,
        stats_only=args.stats_only,
        merged_policy=args.merged_policy,
    )


def read_input(args: argparse.Namespace) -> str:
    if args.text:
        return args.text
    if args.file:
        return Path(args.file).read_text(encoding="utf-8", errors="ignore")
    return sys.stdin.read()


def _log_level(verbosity: int) -> int:
    if verbosity >= 2:
        return logging.DEBUG
    if verbosity == 1:
        return logging.INFO
    level = getattr(logging, str(config.LOG_LEVEL).upper(), None)
    return level if isinstance(level, int) else logging.INFO


def _configure_logging(verbosity: int) -> None:
    level = _log_level(verbosity)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_cli_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    if args.file and not args.text and not Path(args.file).exists():
        print(f"Error: File not found: {args.file}", file=sys.stderr)
        return 1

    try:
        exclude_terms = load_exclude_terms(args.exclude_file, max_terms=config.MAX_EXCLUDE_TERMS)
    except ExcludeFileError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    query = build_query_from_args(args, exclude_terms)
    text = read_input(args)
    phase_logger = create_phase_logger("cli", verbose=args.verbose >= 1, extra_verbose=args.verbose >= 2)
    report = run_query(text, query, phase_logger=phase_logger, max_size=config.MAX_NGRAM_SIZE)

    if report.warnings:
        sys.stderr.write("Query warnings:\n")
        for msg in report.warnings:
            sys.stderr.write(f"  - {msg}\n")

    with phase_logger.phase(Phase.REPORT):
        if args.json_out:
            with open(args.json_out, "w", encoding="utf-8") as f:
                json.dump(report, f, indent=2)
        if args.json:
            print(json.dumps(report, indent=2))
        elif not args.json_out:
            for line in format_report(report, query):
                print(line)
    phase_logger.log_timing_summary()
    return 0


if __name__ == "__main__":
    sys.exit(main())
