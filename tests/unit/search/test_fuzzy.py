"""Unit tests for fuzzy matching / typo correction."""

import pytest

from acuref_search.search.fuzzy import (
    MAX_FUZZY_DISTANCE,
    edit_distance,
    find_fuzzy_matches,
    get_max_edit_distance,
)


@pytest.mark.unit
class TestEditDistance:
    """Tests for edit_distance function."""

    def test_identical_strings(self):
        assert edit_distance("hegu", "hegu") == 0

    def test_empty_strings(self):
        assert edit_distance("", "") == 0
        assert edit_distance("abc", "") == 3
        assert edit_distance("", "abc") == 3

    def test_single_edits(self):
        assert edit_distance("cat", "cats") == 1
        assert edit_distance("cats", "cat") == 1
        assert edit_distance("cat", "bat") == 1

    def test_multiple_edits(self):
        assert edit_distance("kitten", "sitting") == 3

    def test_adjacent_transposition_costs_one(self):
        assert edit_distance("li4", "l4i") == 1
        assert edit_distance("fengchi", "fnegchi") == 1

    def test_non_adjacent_swap_costs_more(self):
        assert edit_distance("li4", "i4l") == 2

    def test_case_sensitive(self):
        assert edit_distance("Hegu", "hegu") == 1

    def test_early_exit_above_max_distance(self):
        assert edit_distance("abcdef", "uvwxyz", max_distance=1) == 2

    def test_early_exit_on_length_difference(self):
        assert edit_distance("li", "lieque", max_distance=2) == 3


@pytest.mark.unit
class TestGetMaxEditDistance:
    """Tolerance 0.2 of the term length, rounded half up."""

    def test_very_short_terms_no_fuzzy(self):
        assert get_max_edit_distance(1) == 0
        assert get_max_edit_distance(2) == 0

    def test_short_terms_one_edit(self):
        assert get_max_edit_distance(3) == 1
        assert get_max_edit_distance(7) == 1

    def test_longer_terms(self):
        assert get_max_edit_distance(8) == 2
        assert get_max_edit_distance(12) == 2
        assert get_max_edit_distance(13) == 3

    def test_custom_tolerance(self):
        assert get_max_edit_distance(10, tolerance=0.5) == 5

    def test_zero_tolerance_or_length(self):
        assert get_max_edit_distance(10, tolerance=0.0) == 0
        assert get_max_edit_distance(0) == 0

    def test_capped_for_long_terms(self):
        assert get_max_edit_distance(40, tolerance=1.0) == MAX_FUZZY_DISTANCE
        assert get_max_edit_distance(40) == MAX_FUZZY_DISTANCE
        assert get_max_edit_distance(13) == 3

    def test_custom_cap(self):
        assert get_max_edit_distance(10, tolerance=0.5, max_fuzzy=2) == 2


@pytest.mark.unit
class TestFindFuzzyMatches:
    def test_sorted_by_distance_then_term(self):
        matches = find_fuzzy_matches("hegy", ["hegu", "heg", "xyz", "hegy"])
        assert matches == [("hegy", 0), ("heg", 1), ("hegu", 1)]

    def test_transposed_identifier(self):
        # dropping the "4" also leaves "li" one edit away
        assert find_fuzzy_matches("l4i", ["li4", "li", "gb20"]) == [("li", 1), ("li4", 1)]

    def test_beyond_tolerance_is_rejected(self):
        assert find_fuzzy_matches("i4l", ["li4"]) == []

    def test_explicit_max_distance(self):
        assert find_fuzzy_matches("i4l", ["li4"], max_distance=2) == [("li4", 2)]

    def test_short_terms_match_exactly_only(self):
        assert find_fuzzy_matches("li", ["li", "lu", "l"]) == [("li", 0)]

    def test_empty_query(self):
        assert find_fuzzy_matches("", ["li4"]) == []

    def test_long_term_with_full_tolerance_stays_bounded(self):
        query = "acupressure" * 4
        vocabulary = ["li4", "gb20", "acupressure", query[:-6] + "x" * 6, query[:-7] + "x" * 7]

        matches = find_fuzzy_matches(query, vocabulary, tolerance=1.0)

        assert matches == [(query[:-6] + "x" * 6, 6)]
