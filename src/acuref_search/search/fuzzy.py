"""Fuzzy matching for typo-tolerant search.

This module provides edit distance calculation and fuzzy term matching
for handling typos in search queries.

Tolerance is expressed as a fraction of the query term's length, rounded
half up, so the default of 0.2 gives:
- No fuzzy matching for 1-2 character terms
- Max edit distance of 1 for 3-7 character terms
- Max edit distance of 2 for 8-12 character terms

However large the tolerance, no term is allowed more than
``MAX_FUZZY_DISTANCE`` edits.
"""

from __future__ import annotations

from collections.abc import Iterable
import math


DEFAULT_FUZZY_TOLERANCE = 0.2
MAX_FUZZY_DISTANCE = 6


def edit_distance(s1: str, s2: str, max_distance: int | None = None) -> int:
    """Calculate the optimal string alignment distance between two strings.

    Insertions, deletions, substitutions and transpositions of two adjacent
    characters each cost one edit, so ``"l4i"`` is one edit away from
    ``"li4"``.

    Args:
        s1: First string.
        s2: Second string.
        max_distance: If provided, return max_distance+1 early when
            distance is guaranteed to exceed this threshold.

    Returns:
        The minimum number of edits needed to change s1 into s2.
        If max_distance is set and exceeded, returns max_distance+1.

    Examples:
        >>> edit_distance("kitten", "sitting")
        3
        >>> edit_distance("li4", "l4i")
        1
        >>> edit_distance("", "abc")
        3
    """
    if not s1:
        return len(s2)
    if not s2:
        return len(s1)

    if len(s1) > len(s2):
        s1, s2 = s2, s1

    m, n = len(s1), len(s2)

    if max_distance is not None and n - m > max_distance:
        return max_distance + 1

    # Transpositions look two rows back, so three rows are kept
    before_prev: list[int] = []
    prev_row = list(range(m + 1))

    for j in range(1, n + 1):
        curr_row = [j] + [0] * m
        row_min = j
        for i in range(1, m + 1):
            cost = 0 if s1[i - 1] == s2[j - 1] else 1
            value = min(
                prev_row[i] + 1,  # deletion
                curr_row[i - 1] + 1,  # insertion
                prev_row[i - 1] + cost,  # substitution
            )
            if i > 1 and j > 1 and s1[i - 1] == s2[j - 2] and s1[i - 2] == s2[j - 1]:
                value = min(value, before_prev[i - 2] + 1)  # transposition
            curr_row[i] = value
            row_min = min(row_min, value)

        if max_distance is not None and row_min > max_distance:
            return max_distance + 1

        before_prev, prev_row = prev_row, curr_row

    return prev_row[m]


def get_max_edit_distance(
    term_length: int,
    tolerance: float = DEFAULT_FUZZY_TOLERANCE,
    max_fuzzy: int = MAX_FUZZY_DISTANCE,
) -> int:
    """Get the maximum allowed edit distance for a term of the given length.

    Args:
        term_length: Length of the search term.
        tolerance: Allowed edits as a fraction of the term length.
        max_fuzzy: Upper bound on the result.

    Returns:
        ``tolerance * term_length`` rounded half up, clamped to
        ``[0, max_fuzzy]``.
    """
    if term_length <= 0 or tolerance <= 0:
        return 0
    return max(0, min(math.floor(tolerance * term_length + 0.5), max_fuzzy))


def find_fuzzy_matches(
    query_term: str,
    vocabulary: Iterable[str],
    max_distance: int | None = None,
    *,
    tolerance: float = DEFAULT_FUZZY_TOLERANCE,
) -> list[tuple[str, int]]:
    """Find terms in vocabulary that fuzzy-match the query term.

    Args:
        query_term: The normalized term to match (may contain typo).
        vocabulary: Normalized terms to match against.
        max_distance: Maximum edit distance allowed. If None, derived from
            ``tolerance`` and the term length.
        tolerance: Fraction of the term length used when max_distance is None.

    Returns:
        List of (matching_term, edit_distance) tuples, sorted by
        edit distance (closest matches first), then alphabetically.
        Exact matches have distance 0.
    """
    if not query_term:
        return []

    if max_distance is None:
        max_distance = get_max_edit_distance(len(query_term), tolerance)

    matches: list[tuple[str, int]] = []
    for term in vocabulary:
        if abs(len(query_term) - len(term)) > max_distance:
            continue
        if max_distance == 0:
            if term == query_term:
                matches.append((term, 0))
            continue
        distance = edit_distance(query_term, term, max_distance)
        if distance <= max_distance:
            matches.append((term, distance))

    matches.sort(key=lambda x: (x[1], x[0]))
    return matches
