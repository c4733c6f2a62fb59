"""Adapters connecting the engine to record stores."""

from acuref_search.adapters.record_source import (
    AbstractRecordSource,
    InMemoryRecordSource,
    JsonSnapshotRecordSource,
    RecordSourceError,
)


__all__ = [
    "AbstractRecordSource",
    "InMemoryRecordSource",
    "JsonSnapshotRecordSource",
    "RecordSourceError",
]
