"""
Tests for tools/ngram_filters.py - Text and numeric range filters.
"""

import pytest
from tools.ngram_filters import (
    FilterSpec,
    MatchMode,
    RangeFilter,
    TextFilter,
    TextMatchKind,
    apply_scalar_filters,
    looks_like_regex,
)
from tools.ngram_statistics import NGramRow


def _row(text, count=1, ppm=0.0, z=0.0):
    return NGramRow(text=text, n=len(text.split()), count=count, ppm=ppm, z=z)


class TestLooksLikeRegex:

    @pytest.mark.parametrize("pattern", ["a|b", "ca*", "x+", "y?", "[ab]", "(a)", "a{2}", "\\w"])
    def test_metacharacters(self, pattern):
        assert looks_like_regex(pattern) is True

    @pytest.mark.parametrize("pattern", ["cat", "the cat", "state-of", "a.b", "^the", "end$"])
    def test_plain_patterns(self, pattern):
        assert looks_like_regex(pattern) is False


class TestTextFilter:
    """Tests for TextFilter matching."""

    def test_contains_is_case_insensitive(self):
        flt = TextFilter(TextMatchKind.CONTAINS, "CAT")
        assert flt.matches("the cat sat")
        assert not flt.matches("the dog")

    def test_negated_kinds_invert(self):
        assert TextFilter(TextMatchKind.NOT_CONTAINS, "cat").matches("the dog")
        assert not TextFilter(TextMatchKind.NOT_STARTS_WITH, "the").matches("The dog")
        assert TextFilter(TextMatchKind.NOT_ENDS_WITH, "dog").matches("dog house")

    def test_starts_and_ends_with(self):
        assert TextFilter(TextMatchKind.STARTS_WITH, "the").matches("The cat")
        assert TextFilter(TextMatchKind.ENDS_WITH, "CAT").matches("the cat")
        assert not TextFilter(TextMatchKind.ENDS_WITH, "the").matches("the cat")

    def test_from_pattern_detects_regex(self):
        flt = TextFilter.from_pattern(TextMatchKind.CONTAINS, "c[au]t")
        assert flt.mode is MatchMode.REGEX
        assert flt.matches("the cut")
        assert flt.matches("THE CAT")
        assert not flt.matches("the cot")

    def test_invalid_regex_downgrades_to_literal(self):
        """
        Given: A pattern with regex metacharacters that does not compile
        When: The filter is built
        Then: It falls back to literal matching instead of raising
        """
        flt = TextFilter.from_pattern(TextMatchKind.CONTAINS, "a(b")
        assert flt.mode is MatchMode.LITERAL
        assert flt.matches("xa(by")
        assert not flt.matches("ab")

    def test_starts_with_ignores_regex_mode(self):
        """
        Given: A starts-with filter whose pattern compiles as a regex
        When: It is matched
        Then: The raw pattern is compared as a literal prefix
        """
        flt = TextFilter.from_pattern(TextMatchKind.STARTS_WITH, "th+e")
        assert flt.mode is MatchMode.REGEX
        assert not flt.matches("the cat")
        assert flt.matches("th+e cat")

    def test_ends_with_ignores_regex_mode(self):
        flt = TextFilter(TextMatchKind.ENDS_WITH, "(cat|dog)", MatchMode.REGEX)
        assert not flt.matches("the cat")
        assert flt.matches("x (cat|dog)")

    def test_not_contains_regex(self):
        flt = TextFilter.from_pattern(TextMatchKind.NOT_CONTAINS, "^the")
        # no metacharacter from the hint set: literal "^the"
        assert flt.mode is MatchMode.LITERAL
        assert flt.matches("the cat")
        flt = TextFilter.from_pattern(TextMatchKind.NOT_CONTAINS, "(^the)")
        assert not flt.matches("the cat")
        assert flt.matches("cat the")

    def test_explicit_literal_mode_keeps_metacharacters(self):
        flt = TextFilter(TextMatchKind.CONTAINS, "a|b", MatchMode.LITERAL)
        assert not flt.matches("a")
        assert flt.matches("x a|b")

    def test_exclude_term_is_literal_not_contains(self):
        flt = TextFilter.exclude_term("c++")
        assert flt.kind is TextMatchKind.NOT_CONTAINS
        assert flt.mode is MatchMode.LITERAL
        assert not flt.matches("I like C++ a lot")
        assert flt.matches("I like c")


class TestRangeFilter:
    """Tests for RangeFilter."""

    def test_bounds_are_inclusive(self):
        flt = RangeFilter(min=2, max=4)
        assert [flt.passes(v) for v in (1, 2, 3, 4, 5)] == [False, True, True, True, False]

    def test_open_bounds(self):
        assert RangeFilter(min=3).passes(1000)
        assert RangeFilter(max=3).passes(-1000)
        assert RangeFilter().passes(0)

    def test_outside_is_exact_complement(self):
        """
        Given: A range and its outside twin
        When: Both are applied to the same values
        Then: Every value passes exactly one of them
        """
        inside = RangeFilter(min=2, max=4)
        outside = RangeFilter(min=2, max=4, outside=True)
        for v in range(-2, 8):
            assert inside.passes(v) != outside.passes(v)


class TestFilterSpec:
    """Tests for FilterSpec and apply_scalar_filters()."""

    @pytest.fixture
    def rows(self):
        return [
            _row("the cat", count=5, ppm=500.0, z=1.5),
            _row("cat sat", count=2, ppm=200.0, z=-0.2),
            _row("the dog", count=1, ppm=100.0, z=-1.0),
        ]

    def test_no_filters_keeps_everything(self, rows):
        assert apply_scalar_filters(rows, FilterSpec()) == rows

    def test_filters_within_a_list_are_anded(self, rows):
        spec = FilterSpec(frequency=[RangeFilter(min=2), RangeFilter(max=4)])
        assert [r.text for r in apply_scalar_filters(rows, spec)] == ["cat sat"]

    def test_filters_across_lists_are_anded(self, rows):
        spec = FilterSpec(
            text=[TextFilter(TextMatchKind.CONTAINS, "cat")],
            zscore=[RangeFilter(max=0)],
        )
        assert [r.text for r in apply_scalar_filters(rows, spec)] == ["cat sat"]

    def test_ppm_filter(self, rows):
        spec = FilterSpec(ppm=[RangeFilter(min=150, max=600)])
        assert [r.text for r in apply_scalar_filters(rows, spec)] == ["the cat", "cat sat"]

    def test_permissive_filter_changes_nothing(self, rows):
        spec = FilterSpec(frequency=[RangeFilter()], ppm=[RangeFilter()], zscore=[RangeFilter()])
        assert apply_scalar_filters(rows, spec) == rows

    def test_add_exclude_terms_skips_empty(self, rows):
        spec = FilterSpec()
        spec.add_exclude_terms(["DOG", ""])
        assert len(spec.text) == 1
        assert [r.text for r in apply_scalar_filters(rows, spec)] == ["the cat", "cat sat"]

    def test_percentile_filters_are_not_scalar(self, rows):
        spec = FilterSpec(percentile=[RangeFilter(min=99)])
        assert not spec.has_scalar_filters
        assert apply_scalar_filters(rows, spec) == rows
