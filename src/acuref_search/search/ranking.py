"""Merge per-type raw hits into one ranked result list.

Raw scores depend on each type's field boosts and term statistics, so they
are rescaled per type before interleaving: every hit is divided by the best
score its own index produced for this query. Each type's best match scores
1.0 and ordering is not skewed toward types with heavier field boosts.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from types import MappingProxyType

from acuref_search.domain.records import BaseRecord, EntityType
from acuref_search.domain.search import SearchResult
from acuref_search.search.dispatcher import TypedHits
from acuref_search.search.entities import EntityProfile, get_profile
from acuref_search.search.models import RawHit
from acuref_search.search.registry import RegistrySnapshot


def normalize_scores(hits: Sequence[RawHit]) -> list[float]:
    """Scale scores into (0, 1] by the maximum score in ``hits``."""
    if not hits:
        return []
    top = max(hit.score for hit in hits)
    if top <= 0:
        return [0.0 for _ in hits]
    return [hit.score / top for hit in hits]


def project_result(
    record: BaseRecord,
    score: float,
    profile: EntityProfile | None = None,
    *,
    snippet: str | None = None,
) -> SearchResult:
    """Build the unified result shape for one record."""
    profile = profile or get_profile(record.entity_type)
    data: Mapping = MappingProxyType(record.stored)
    return SearchResult(
        type=record.entity_type,
        id=record.id,
        title=profile.title(record.id, data),
        subtitle=profile.subtitle(data),
        snippet=snippet,
        score=score,
        data=data,
    )


def merge_results(
    snapshot: RegistrySnapshot,
    typed_hits: Iterable[TypedHits],
    profiles: Mapping[EntityType, EntityProfile] | None = None,
) -> list[SearchResult]:
    """Normalize, project and sort hits from every type.

    Sorting is by descending normalized score; ties keep input order (types in
    dispatch order, then each index's own ranking), so identical inputs always
    produce identical output.
    """
    merged: list[SearchResult] = []
    for typed in typed_hits:
        index = snapshot.get(typed.entity_type)
        if index is None:
            continue
        profile = (profiles or {}).get(typed.entity_type) or get_profile(typed.entity_type)
        for hit, score in zip(typed.hits, normalize_scores(typed.hits)):
            record = index.get_record(hit.doc_id)
            if record is None:
                continue
            merged.append(project_result(record, score, profile))
    merged.sort(key=lambda result: result.score, reverse=True)
    return merged
