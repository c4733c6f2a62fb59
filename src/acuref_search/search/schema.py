"""
Schema definition for per-type indices.

Each entity type declares its fields once:
- TextField: searchable text run through the shared analyzer, weighted by boost
- StoredField: returned verbatim in results but never searched

Each field can have:
- stored: Whether the raw value is kept for result projection
- indexed: Whether the field is searchable
- boost: Field-level multiplier applied to raw term-match scores
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class FieldType(str, Enum):
    """Types of fields supported in the schema."""

    TEXT = "text"
    STORED = "stored"


@dataclass(frozen=True)
class SchemaField(ABC):
    """Base class for all schema fields."""

    name: str
    stored: bool = True
    indexed: bool = True
    boost: float = 1.0

    @property
    @abstractmethod
    def field_type(self) -> FieldType:
        """Return the field type."""

    def to_dict(self) -> dict[str, Any]:
        """Serialize field definition to dict."""
        return {
            "name": self.name,
            "type": self.field_type.value,
            "stored": self.stored,
            "indexed": self.indexed,
            "boost": self.boost,
        }


@dataclass(frozen=True)
class TextField(SchemaField):
    """
    Analyzed text field for full-text search.

    Values may be a string or a list of strings; lists are tokenized element
    by element. Use for identifiers, names, labels and free-text notes.

    Args:
        name: Field name (e.g., "name_en", "location")
        stored: Keep raw value for result projection (default: True)
        boost: Field weight in scoring (default: 1.0, must be positive)
    """

    def __post_init__(self) -> None:
        if self.boost <= 0:
            msg = f"Field '{self.name}' boost must be positive, got {self.boost}"
            raise ValueError(msg)

    @property
    def field_type(self) -> FieldType:
        return FieldType.TEXT


@dataclass(frozen=True)
class StoredField(SchemaField):
    """
    Stored-only field (not indexed).

    Stored fields travel with the record into results but are not searchable.
    Use for dosage notes, cautions, equipment lists and similar display data.

    Args:
        name: Field name (e.g., "dosage", "cautions")
    """

    stored: bool = field(default=True, init=False)
    indexed: bool = field(default=False, init=False)
    boost: float = field(default=0.0, init=False)

    @property
    def field_type(self) -> FieldType:
        return FieldType.STORED


@dataclass
class Schema:
    """
    Schema definition for one entity type's index.

    Example:
        schema = Schema(
            name="herb",
            fields=[
                TextField("id"),
                TextField("name", boost=2.0),
                TextField("name_chinese", boost=1.5),
                StoredField("dosage"),
            ],
        )
    """

    fields: list[SchemaField]
    unique_field: str = "id"
    name: str = "default"

    def __post_init__(self) -> None:
        """Validate schema after initialization."""
        self._field_map: dict[str, SchemaField] = {f.name: f for f in self.fields}

        if len(self._field_map) != len(self.fields):
            msg = f"Schema '{self.name}' declares duplicate field names"
            raise ValueError(msg)
        if self.unique_field not in self._field_map:
            msg = f"Unique field '{self.unique_field}' not found in schema"
            raise ValueError(msg)

    def __getitem__(self, name: str) -> SchemaField:
        """Get field by name."""
        return self._field_map[name]

    def __contains__(self, name: str) -> bool:
        """Check if field exists."""
        return name in self._field_map

    def __iter__(self) -> Iterator[SchemaField]:
        """Iterate over fields."""
        return iter(self.fields)

    def __len__(self) -> int:
        """Return number of fields."""
        return len(self.fields)

    @property
    def text_fields(self) -> list[TextField]:
        """Return all searchable text fields."""
        return [f for f in self.fields if isinstance(f, TextField) and f.indexed]

    @property
    def stored_field_names(self) -> list[str]:
        """Return names of fields returned in results."""
        return [f.name for f in self.fields if f.stored]

    def get_boost(self, field_name: str) -> float:
        """Get boost factor for a field."""
        if field_name in self._field_map:
            return self._field_map[field_name].boost
        return 1.0

    def to_dict(self) -> dict[str, Any]:
        """Serialize schema to dict."""
        return {
            "name": self.name,
            "unique_field": self.unique_field,
            "fields": [f.to_dict() for f in self.fields],
        }
