"""Autocomplete suggestions gathered from several per-type indices."""

from __future__ import annotations

from collections.abc import Mapping
import logging

from acuref_search.domain.records import EntityType
from acuref_search.search.entities import ENTITY_PROFILES, EntityProfile
from acuref_search.search.registry import RegistrySnapshot


logger = logging.getLogger(__name__)

DEFAULT_SUGGEST_LIMIT = 10


def auto_suggest(
    snapshot: RegistrySnapshot,
    query: str,
    limit: int = DEFAULT_SUGGEST_LIMIT,
    profiles: Mapping[EntityType, EntityProfile] = ENTITY_PROFILES,
) -> list[str]:
    """Return up to ``limit`` distinct completions for a partial query.

    Only types whose profile names suggest fields take part (points and
    indications). Suggestions keep the order in which they were first found,
    walking types in dispatch order; they are not ranked by score.
    """
    if not query.strip() or limit <= 0:
        return []

    suggestions: dict[str, None] = {}
    for entity_type, profile in profiles.items():
        if not profile.suggest_fields:
            continue
        index = snapshot.get(entity_type)
        if index is None:
            continue
        for suggestion in index.complete(query, profile.suggest_fields, limit):
            suggestions.setdefault(suggestion, None)
        if len(suggestions) >= limit:
            break

    result = list(suggestions)[:limit]
    logger.debug("Suggestions for %r: %d", query, len(result))
    return result
