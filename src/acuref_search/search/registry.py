"""Registry holding one ``TypeIndex`` per entity type.

Rebuilds never touch a live index. Every replacement index is built off to
the side and the registry then swaps in a new immutable mapping with a single
assignment, so a reader holding a snapshot sees either the previous
generation or the new one, never a mix. If any build fails nothing is
swapped and the previous generation keeps serving queries.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
import logging
from types import MappingProxyType
from typing import Any

from pydantic import ValidationError

from acuref_search.domain.records import INDEXABLE_RECORD_ADAPTER, BaseRecord, EntityType
from acuref_search.search.entities import get_profile, make_record
from acuref_search.search.type_index import TypeIndex


logger = logging.getLogger(__name__)

IndexFactory = Callable[[EntityType], TypeIndex]
RecordsByType = Mapping[EntityType | str, Iterable[BaseRecord | Mapping[str, Any]]]


class IndexBuildError(RuntimeError):
    """Raised when a replacement index cannot be built.

    The registry keeps the previous generation when this is raised.
    """

    def __init__(self, entity_type: EntityType | str | None, message: str) -> None:
        super().__init__(message)
        self.entity_type = entity_type


@dataclass(frozen=True)
class RegistrySnapshot:
    """One consistent generation of every per-type index."""

    generation: int
    indices: Mapping[EntityType, TypeIndex]

    @property
    def is_ready(self) -> bool:
        return self.generation > 0

    def get(self, entity_type: EntityType) -> TypeIndex | None:
        return self.indices.get(entity_type)

    def record_counts(self) -> dict[str, int]:
        return {entity_type.value: len(index) for entity_type, index in self.indices.items()}


_EMPTY_SNAPSHOT = RegistrySnapshot(generation=0, indices=MappingProxyType({}))


def default_index_factory(entity_type: EntityType) -> TypeIndex:
    return TypeIndex(entity_type, get_profile(entity_type).schema)


def coerce_record(entity_type: EntityType, record: BaseRecord | Mapping[str, Any]) -> BaseRecord:
    """Accept a shaped record, a dumped record or a raw store mapping.

    A mapping with both ``type`` and ``searchable`` keys is a dumped record
    (``model_dump()``) and is validated as one; anything else is a store row.
    """
    if isinstance(record, BaseRecord):
        return record
    if isinstance(record, Mapping):
        if "type" in record and "searchable" in record:
            return INDEXABLE_RECORD_ADAPTER.validate_python(record)
        return make_record(entity_type, record)
    msg = f"Unsupported {entity_type.value} record: {type(record).__name__}"
    raise TypeError(msg)


class IndexRegistry:
    """Owns the per-type indices; all mutation goes through ``rebuild_all``."""

    def __init__(self, index_factory: IndexFactory | None = None) -> None:
        self._index_factory = index_factory or default_index_factory
        self._snapshot = _EMPTY_SNAPSHOT

    @property
    def generation(self) -> int:
        return self._snapshot.generation

    def snapshot(self) -> RegistrySnapshot:
        """Return the current generation; callers should read it once per query."""
        return self._snapshot

    def get(self, entity_type: EntityType) -> TypeIndex | None:
        return self._snapshot.get(entity_type)

    def build_index(self, entity_type: EntityType, records: Iterable[BaseRecord | Mapping[str, Any]]) -> TypeIndex:
        """Build a detached index for one type without touching the registry."""
        index = self._index_factory(entity_type)
        try:
            return index.build(coerce_record(entity_type, record) for record in records)
        except (TypeError, ValueError, KeyError, ValidationError) as exc:
            msg = f"Failed to build {entity_type.value} index: {exc}"
            raise IndexBuildError(entity_type, msg) from exc

    def rebuild_all(self, records_by_type: RecordsByType) -> RegistrySnapshot:
        """Build every entity type's index off to the side, then swap once.

        Types absent from ``records_by_type`` are rebuilt empty.

        Raises:
            IndexBuildError: an entity type is unknown or a build failed; the
                previous generation is left untouched.
        """
        supplied: dict[EntityType, Iterable[BaseRecord | Mapping[str, Any]]] = {}
        for key, records in records_by_type.items():
            try:
                entity_type = EntityType(key)
            except ValueError as exc:
                raise IndexBuildError(None, f"Unknown entity type: {key!r}") from exc
            supplied[entity_type] = records

        staged: dict[EntityType, TypeIndex] = {}
        for entity_type in EntityType:
            staged[entity_type] = self.build_index(entity_type, supplied.get(entity_type, ()))

        snapshot = RegistrySnapshot(generation=self._snapshot.generation + 1, indices=MappingProxyType(staged))
        self._snapshot = snapshot
        logger.info("Index generation %d ready: %s", snapshot.generation, snapshot.record_counts())
        return snapshot
