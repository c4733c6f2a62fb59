"""Post-ranking structural filters.

Filters never touch index internals; they look at a result's ``type`` and
stored ``data`` only. A filter that does not apply to a result's type lets
the result through, and all active filters must pass (logical AND).
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
import logging
from typing import Any

from acuref_search.domain.records import EntityType
from acuref_search.domain.search import SearchFilters, SearchResult
from acuref_search.search.analyzers import iter_field_text
from acuref_search.search.entities import ENTITY_PROFILES, EntityProfile


logger = logging.getLogger(__name__)

FILTER_NAMES = ("taxonomy", "category")


@dataclass(frozen=True)
class FieldFilter:
    """Keep results whose stored field equals (or, for lists, contains) ``value``."""

    name: str
    value: str
    fields_by_type: Mapping[EntityType, str]

    def applies_to(self, entity_type: EntityType) -> bool:
        return entity_type in self.fields_by_type

    def matches(self, result: SearchResult) -> bool:
        field_name = self.fields_by_type.get(result.type)
        if field_name is None:
            return True
        wanted = self.value.casefold()
        stored: Any = result.data.get(field_name)
        return any(piece.casefold() == wanted for piece in iter_field_text(stored))


def build_filters(
    filters: SearchFilters | None,
    profiles: Mapping[EntityType, EntityProfile] = ENTITY_PROFILES,
) -> list[FieldFilter]:
    """Translate request filters into per-type field predicates."""
    if filters is None:
        return []
    active: list[FieldFilter] = []
    for name in FILTER_NAMES:
        value = getattr(filters, name)
        if value is None:
            continue
        fields_by_type = {
            entity_type: profile.filter_fields[name]
            for entity_type, profile in profiles.items()
            if name in profile.filter_fields
        }
        active.append(FieldFilter(name=name, value=value, fields_by_type=fields_by_type))
    return active


def apply_filters(results: Iterable[SearchResult], filters: Iterable[FieldFilter]) -> list[SearchResult]:
    """Return the results every filter accepts, preserving order."""
    active = list(filters)
    if not active:
        return list(results)
    kept = [result for result in results if all(f.matches(result) for f in active)]
    logger.debug("Filters %s kept %d results", [f.name for f in active], len(kept))
    return kept
