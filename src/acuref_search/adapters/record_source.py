"""Record sources feeding the search engine.

The engine does not own the catalog; it asks a record source for the
current full set of records of every entity type whenever it (re)indexes.
Sources shape raw store rows into ``IndexableRecord`` variants so the engine
never sees store-specific key names.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
import logging
from pathlib import Path
from typing import Any

import anyio
import orjson
from pydantic import ValidationError

from acuref_search.domain.records import BaseRecord, EntityType
from acuref_search.search.entities import make_record


logger = logging.getLogger(__name__)

# Collection names used by the reference store's JSON export
SNAPSHOT_KEYS: Mapping[str, EntityType] = {
    "points": EntityType.POINT,
    "indications": EntityType.INDICATION,
    "techniques": EntityType.TECHNIQUE,
    "herbs": EntityType.HERB,
    "dietItems": EntityType.DIET,
}


class RecordSourceError(RuntimeError):
    """Raised when a source cannot produce records."""


def shape_records(
    raw_by_type: Mapping[EntityType, Iterable[Mapping[str, Any]]],
) -> dict[EntityType, list[BaseRecord]]:
    """Shape raw rows into records for every entity type (missing types are empty)."""
    shaped: dict[EntityType, list[BaseRecord]] = {}
    for entity_type in EntityType:
        records: list[BaseRecord] = []
        for row in raw_by_type.get(entity_type, ()):
            if not isinstance(row, Mapping):
                msg = f"Malformed {entity_type.value} row: expected an object, got {type(row).__name__}"
                raise RecordSourceError(msg)
            try:
                records.append(make_record(entity_type, row))
            except ValidationError as exc:
                msg = f"Malformed {entity_type.value} row: {exc}"
                raise RecordSourceError(msg) from exc
        shaped[entity_type] = records
    return shaped


class AbstractRecordSource(ABC):
    """Supplies the current full set of records for each entity type."""

    @abstractmethod
    async def load_records(self) -> dict[EntityType, list[BaseRecord]]:
        """Return every record, keyed by entity type.

        Raises:
            RecordSourceError: when the backing store cannot be read.
        """
        raise NotImplementedError


class InMemoryRecordSource(AbstractRecordSource):
    """Serve rows held in memory, e.g. seed data or test fixtures."""

    def __init__(self, raw_by_type: Mapping[EntityType | str, Iterable[Mapping[str, Any]]] | None = None) -> None:
        self._rows: dict[EntityType, list[Mapping[str, Any]]] = {}
        for key, rows in (raw_by_type or {}).items():
            self.replace(EntityType(key), rows)

    def replace(self, entity_type: EntityType, rows: Iterable[Mapping[str, Any]]) -> None:
        """Swap the rows for one type; picked up on the next ``load_records``."""
        self._rows[entity_type] = list(rows)

    async def load_records(self) -> dict[EntityType, list[BaseRecord]]:
        return shape_records(self._rows)


class JsonSnapshotRecordSource(AbstractRecordSource):
    """Read the reference store's JSON export.

    The export is one object with ``points``, ``indications``,
    ``techniques``, ``herbs`` and ``dietItems`` arrays; missing arrays mean
    no records of that type. Entity type values (``"diet"``) are accepted as
    keys too.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    async def load_records(self) -> dict[EntityType, list[BaseRecord]]:
        try:
            async with await anyio.open_file(self.path, "rb") as fp:
                content = await fp.read()
            payload = orjson.loads(content)
        except (OSError, orjson.JSONDecodeError) as err:
            msg = f"Failed to read record snapshot {self.path}: {err}"
            raise RecordSourceError(msg) from err

        if not isinstance(payload, dict):
            msg = f"Record snapshot {self.path} must contain a JSON object"
            raise RecordSourceError(msg)

        raw_by_type: dict[EntityType, list[Mapping[str, Any]]] = {}
        for key, rows in payload.items():
            entity_type = SNAPSHOT_KEYS.get(key) or _entity_type_or_none(key)
            if entity_type is None:
                logger.debug("Ignoring snapshot collection %r", key)
                continue
            if not isinstance(rows, list):
                msg = f"Snapshot collection {key!r} must be a list"
                raise RecordSourceError(msg)
            raw_by_type[entity_type] = rows

        records = shape_records(raw_by_type)
        logger.info(
            "Loaded record snapshot %s: %s",
            self.path,
            {entity_type.value: len(rows) for entity_type, rows in records.items()},
        )
        return records


def _entity_type_or_none(key: str) -> EntityType | None:
    try:
        return EntityType(key)
    except ValueError:
        return None
