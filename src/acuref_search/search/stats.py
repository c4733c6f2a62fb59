"""Statistical helpers for BM25 style scoring.

The functions here stay independent of the index layout so they can be
unit tested on their own. Tuning lives in ``BM25Params``; the defaults are
textbook BM25 and each index passes the parameters suited to its fields.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
import math


@dataclass(frozen=True)
class FieldLengthStats:
    """Aggregated term statistics for a field."""

    field: str
    total_terms: int
    document_count: int

    @property
    def average_length(self) -> float:
        if self.document_count == 0:
            return 0.0
        return self.total_terms / self.document_count


@dataclass(frozen=True)
class BM25Params:
    """Term-frequency saturation and length normalisation settings.

    ``max_length_ratio`` caps a record's field length relative to the field
    average before normalisation; ``None`` leaves it uncapped.
    """

    k1: float = 1.2
    b: float = 0.75
    max_length_ratio: float | None = None

    def __post_init__(self) -> None:
        if self.k1 < 0:
            raise ValueError(f"k1 must be non-negative, got {self.k1}")
        if not 0.0 <= self.b <= 1.0:
            raise ValueError(f"b must be between 0 and 1, got {self.b}")
        if self.max_length_ratio is not None and self.max_length_ratio <= 0:
            raise ValueError(f"max_length_ratio must be positive, got {self.max_length_ratio}")


DEFAULT_BM25 = BM25Params()


def compute_field_length_stats(field_lengths: Mapping[str, Mapping[str, int]]) -> dict[str, FieldLengthStats]:
    """Return aggregate stats for each field given per-record lengths."""

    stats: dict[str, FieldLengthStats] = {}
    for field_name, lengths in field_lengths.items():
        stats[field_name] = FieldLengthStats(
            field=field_name,
            total_terms=sum(max(length, 0) for length in lengths.values()),
            document_count=len(lengths),
        )
    return stats


def calculate_idf(doc_freq: int, total_docs: int, *, floor: float = 1e-6) -> float:
    """Return inverse document frequency with small-sample smoothing.

    The IDF is floored so scores never go negative; a term present in every
    record of a tiny catalog still contributes a small positive weight.
    """

    if total_docs <= 0:
        return 0.0
    df = max(0, min(doc_freq, total_docs))
    ratio = max((total_docs - df + 0.5) / (df + 0.5), floor)
    return max(math.log(ratio + floor) + 1.0, floor)


def bm25(tf: int, doc_length: int, avg_doc_length: float, params: BM25Params = DEFAULT_BM25) -> float:
    """Compute the BM25 term weight without IDF."""

    if tf <= 0:
        return 0.0
    length_ratio = doc_length / max(avg_doc_length, 1e-9)
    if params.max_length_ratio is not None:
        length_ratio = min(length_ratio, params.max_length_ratio)
    denominator = tf + params.k1 * (1 - params.b + params.b * length_ratio)
    return (tf * (params.k1 + 1)) / denominator
