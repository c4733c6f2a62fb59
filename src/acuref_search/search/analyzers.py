"""Analyzer utilities shared by index builds and queries.

A field value is turned into a stream of normalized terms: runs of letters
and digits become tokens, everything else separates them, and every token
is lowercased. The same pipeline runs at build time and at query time so
term comparison stays well-defined.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
import re
from typing import Any, Protocol


@dataclass
class Token:
    """Represents a token emitted by analyzers."""

    text: str
    position: int
    start_char: int
    end_char: int


class Tokenizer(Protocol):
    """Protocol implemented by tokenizers."""

    def __call__(self, text: str) -> Iterator[Token]:  # pragma: no cover - interface definition
        ...


class TokenFilter(Protocol):
    """Protocol implemented by token filters."""

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:  # pragma: no cover - interface definition
        ...


class RegexTokenizer:
    """Regex-based tokenizer; the default pattern keeps alphanumeric runs only."""

    def __init__(self, pattern: str = r"[^\W_]+", flags: int = re.UNICODE) -> None:
        self.pattern = re.compile(pattern, flags)

    def __call__(self, text: str) -> Iterator[Token]:
        for position, match in enumerate(self.pattern.finditer(text)):
            yield Token(
                text=match.group(0),
                position=position,
                start_char=match.start(),
                end_char=match.end(),
            )


class LowercaseFilter:
    """Filter that lowercases token text."""

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            if not token.text.islower():
                token.text = token.text.lower()
            yield token


class AnalyzerPipeline:
    """Composable analyzer pipeline (tokenizer + filters).

    Unlike a list-returning analyzer the pipeline stays lazy, so callers that
    only need the first few terms never tokenize the rest of the text.
    """

    def __init__(self, tokenizer: Tokenizer, filters: Iterable[TokenFilter] | None = None) -> None:
        self.tokenizer = tokenizer
        self.filters = list(filters or [])

    def __call__(self, text: str) -> Iterator[Token]:
        stream: Iterable[Token] = self.tokenizer(text)
        for token_filter in self.filters:
            stream = token_filter(stream)
        for token in stream:
            if token.text:
                yield token


DEFAULT_ANALYZER = AnalyzerPipeline(RegexTokenizer(), [LowercaseFilter()])


def iter_field_text(value: Any) -> Iterator[str]:
    """Yield the text pieces held by a searchable field value.

    ``None`` yields nothing, strings yield themselves, lists/tuples yield
    each element, and any other scalar is rendered with ``str()``.
    """
    if value is None:
        return
    if isinstance(value, str):
        yield value
        return
    if isinstance(value, (list, tuple, set, frozenset)):
        for item in value:
            yield from iter_field_text(item)
        return
    yield str(value)


def tokenize(value: Any, analyzer: AnalyzerPipeline = DEFAULT_ANALYZER) -> Iterator[str]:
    """Return a lazy stream of normalized terms for a string or list of strings."""
    for text in iter_field_text(value):
        for token in analyzer(text):
            yield token.text


def query_terms(text: str, analyzer: AnalyzerPipeline = DEFAULT_ANALYZER) -> tuple[str, ...]:
    """Return the distinct query terms in first-seen order."""
    seen: dict[str, None] = {}
    for term in tokenize(text, analyzer):
        seen.setdefault(term, None)
    return tuple(seen)
