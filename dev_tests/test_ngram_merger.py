"""
Tests for tools/ngram_merger.py - Cross-size merging of result rows.
"""

import pytest
from tools.ngram_merger import (
    MERGED_SIZE,
    POLICY_FIRST_SEEN,
    POLICY_RECOMPUTE,
    grand_total_positions,
    merge_rows,
    merged_population_report,
)
from tools.ngram_statistics import NGramRow


def _by_text(rows):
    return {r.text: r for r in rows}


class TestMergeRows:
    """Tests for merge_rows() function."""

    def test_exact_text_key(self):
        """
        Given: "foo" (size 1, count 3) and "foo bar" (size 2, count 2)
        When: Sizes {1, 2} are merged
        Then: They stay separate entries with their own counts
        """
        rows_by_size = {
            1: [NGramRow("foo", 1, 3), NGramRow("bar", 1, 2)],
            2: [NGramRow("foo bar", 2, 2)],
        }
        merged = _by_text(merge_rows(rows_by_size, grand_total=7))
        assert merged["foo"].count == 3
        assert merged["foo bar"].count == 2
        assert all(r.n == MERGED_SIZE for r in merged.values())

    def test_counts_sum_case_insensitively(self):
        rows_by_size = {
            2: [NGramRow("The Cat", 2, 2, ppm=200.0, z=0.5, percentile=80.0)],
            1: [NGramRow("the cat", 1, 4, ppm=100.0, z=1.0, percentile=90.0)],
        }
        merged = merge_rows(rows_by_size, grand_total=10)
        assert len(merged) == 1
        assert merged[0].count == 6

    def test_first_seen_keeps_smallest_size_statistics(self):
        """
        Given: The same text in sizes 2 and 1 (inserted out of order)
        When: Merged with the first-seen policy
        Then: ppm/z/percentile and casing come from size 1
        """
        rows_by_size = {
            2: [NGramRow("The Cat", 2, 2, ppm=200.0, z=0.5, percentile=80.0)],
            1: [NGramRow("the cat", 1, 4, ppm=100.0, z=1.0, percentile=90.0)],
        }
        row = merge_rows(rows_by_size, grand_total=10, policy=POLICY_FIRST_SEEN)[0]
        assert row.text == "the cat"
        assert (row.ppm, row.z, row.percentile) == (100.0, 1.0, 90.0)

    def test_recompute_policy(self):
        rows_by_size = {
            1: [NGramRow("a", 1, 3, ppm=1.0), NGramRow("b", 1, 1, ppm=1.0)],
            2: [NGramRow("a b", 2, 1, ppm=1.0)],
        }
        merged = _by_text(merge_rows(rows_by_size, grand_total=5, policy=POLICY_RECOMPUTE))
        assert merged["a"].ppm == pytest.approx(3 / 5 * 1_000_000)
        assert merged["a"].z > 0 > merged["b"].z
        assert merged["a"].percentile == pytest.approx(100.0)
        assert merged["b"].percentile == merged["a b"].percentile

    def test_duplicate_row_within_a_size_counts_once(self):
        row = NGramRow("x", 1, 2)
        merged = merge_rows({1: [row, row]}, grand_total=2)
        assert merged[0].count == 2

    def test_input_rows_are_not_mutated(self):
        row = NGramRow("x", 1, 2)
        merge_rows({1: [row], 2: [NGramRow("x", 2, 5)]}, grand_total=7)
        assert row.count == 2
        assert row.n == 1

    def test_empty(self):
        assert merge_rows({}, grand_total=0) == []
        assert merge_rows({1: [], 2: []}, grand_total=0) == []


class TestMergedPopulation:

    def test_grand_total(self):
        assert grand_total_positions({1: 6, 2: 4, 3: 2}) == 12

    def test_report_uses_grand_total(self):
        rows = [NGramRow("a", 0, 2), NGramRow("b", 0, 1)]
        report = merged_population_report(rows, grand_total=4)
        assert report.n == MERGED_SIZE
        assert report.total_positions == 4
        assert report.ppms == pytest.approx([250_000, 500_000])
