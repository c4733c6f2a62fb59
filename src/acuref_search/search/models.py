"""Search data models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Posting:
    """Occurrences of one term in one field of one record."""

    doc_id: str
    frequency: int = 1


@dataclass(frozen=True)
class RawHit:
    """Unnormalized score for a record, only comparable within one index."""

    doc_id: str
    score: float
