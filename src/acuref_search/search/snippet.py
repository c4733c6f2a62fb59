"""Snippet extraction for result previews.

The window opens a fixed number of characters before the earliest query
term found in the text and runs up to the length cap. Ellipsis markers count
toward the cap, so a snippet never exceeds ``max_chars``.
"""

from __future__ import annotations

from collections.abc import Sequence


ELLIPSIS = "..."
DEFAULT_MAX_CHARS = 150
DEFAULT_CONTEXT_CHARS = 50


def find_earliest_match(text: str, terms: Sequence[str]) -> int:
    """Return the lowest offset at which any term occurs, or -1.

    Matching is case-insensitive; empty terms are skipped.
    """
    text_lower = text.lower()
    best = -1
    for term in terms:
        if not term:
            continue
        pos = text_lower.find(term.lower())
        if pos != -1 and (best == -1 or pos < best):
            best = pos
    return best


def extract_snippet(
    text: str,
    terms: Sequence[str],
    max_chars: int = DEFAULT_MAX_CHARS,
    context_chars: int = DEFAULT_CONTEXT_CHARS,
) -> str:
    """Return a bounded excerpt of ``text`` around the earliest matching term.

    Args:
        text: Source field text.
        terms: Normalized query terms.
        max_chars: Hard cap on the returned length, markers included.
        context_chars: Characters kept before the match.

    Returns:
        ``""`` for empty text; otherwise the window, prefixed with ``...``
        when it does not start at offset 0 and suffixed with ``...`` when it
        stops before the end. Without a match the window starts at 0.
    """
    if not text or max_chars <= 0:
        return ""
    if max_chars <= 2 * len(ELLIPSIS):
        return text[:max_chars]

    match = find_earliest_match(text, terms)
    start = max(0, match - context_chars) if match > 0 else 0

    lead = ELLIPSIS if start > 0 else ""
    room = max_chars - len(lead)
    if len(text) - start <= room:
        return lead + text[start:]
    room -= len(ELLIPSIS)
    return lead + text[start : start + room] + ELLIPSIS
