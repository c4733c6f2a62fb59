"""Route a query to the per-type indices it concerns."""

from __future__ import annotations

from dataclasses import dataclass
import logging

from acuref_search.domain.records import EntityType
from acuref_search.search.models import RawHit
from acuref_search.search.registry import RegistrySnapshot
from acuref_search.search.type_index import QueryOptions


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TypedHits:
    """Raw hits from one entity type's index, still on that index's scale."""

    entity_type: EntityType
    hits: tuple[RawHit, ...]


def dispatch_query(
    snapshot: RegistrySnapshot,
    query: str,
    *,
    entity_type: EntityType | None = None,
    options: QueryOptions | None = None,
) -> list[TypedHits]:
    """Run ``query`` against every index (or just ``entity_type``) of one snapshot.

    Results come back in ``EntityType`` declaration order; types whose index is
    absent or has no hits are omitted.
    """
    targets = [entity_type] if entity_type is not None else list(EntityType)
    collected: list[TypedHits] = []
    for target in targets:
        index = snapshot.get(target)
        if index is None:
            continue
        hits = index.query(query, options)
        if hits:
            collected.append(TypedHits(entity_type=target, hits=tuple(hits)))
    logger.debug(
        "Dispatched query %r to %d indices: %s",
        query,
        len(targets),
        {typed.entity_type.value: len(typed.hits) for typed in collected},
    )
    return collected
