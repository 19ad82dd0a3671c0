"""
Tests for tools/ngram_report_format.py - Plain-text rendering.
"""

from tools.ngram_engine import MERGE_BOTH, QuerySpec, run_query
from tools.ngram_report_format import format_report, format_row, format_summary
from tools.ngram_statistics import NGramRow, summarize_distribution


class TestFormatRow:

    def test_plain(self):
        assert format_row(NGramRow("the cat", 2, 2, ppm=500000.0), "plain") == "2: the cat"

    def test_minimal(self):
        assert format_row(NGramRow("the cat", 2, 2), "minimal") == "the cat"

    def test_ppm(self):
        assert format_row(NGramRow("the cat", 2, 2, ppm=1234.5), "ppm") == "2: the cat (1234.50 ppm)"

    def test_full_has_all_columns(self):
        line = format_row(NGramRow("the cat", 2, 2, ppm=500000.0, z=1.41421, percentile=100.0), "full")
        assert line.endswith("the cat")
        assert "500000.00 ppm" in line
        assert "z= +1.414" in line
        assert "p100.0" in line


class TestFormatSummary:

    def test_integers_print_without_decimals(self):
        line = format_summary("frequency", summarize_distribution([1, 2, 2, 5]))
        assert line == "# frequency: min=1 max=5 avg=2.50 median=2 p90=5"


class TestFormatReport:
    """Tests for format_report() function."""

    def test_sections_in_size_order(self, cat_text):
        query = QuerySpec(sizes=[2, 1])
        lines = format_report(run_query(cat_text, query), query)
        headers = [line for line in lines if line.startswith("## ")]
        assert headers == ["## 1-grams", "## 2-grams"]

    def test_merged_section(self, cat_text):
        query = QuerySpec(sizes=[1, 2], merge_mode=MERGE_BOTH)
        lines = format_report(run_query(cat_text, query), query)
        assert lines.count("## merged n-grams") == 1
        assert lines.index("## merged n-grams") > lines.index("## 2-grams")

    def test_stats_banner(self, cat_text):
        query = QuerySpec(sizes=[2], show_stats=True)
        lines = format_report(run_query(cat_text, query), query)
        assert lines[0] == f"# input: {len(cat_text)} chars, 3 lines, 6 words"
        assert "# unique: 3, positions: 4, shown: 3" in lines
        assert "# frequency: min=1 max=2 avg=1.33 median=1 p90=2" in lines
        assert lines[-1] == "2: the cat"

    def test_no_stats_no_banner(self, cat_text):
        query = QuerySpec(sizes=[2])
        lines = format_report(run_query(cat_text, query), query)
        assert not any(line.startswith("#") and not line.startswith("##") for line in lines)

    def test_empty_result_keeps_header(self):
        query = QuerySpec(sizes=[3])
        assert format_report(run_query("", query), query) == ["", "## 3-grams", ""]
