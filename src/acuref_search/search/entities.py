"""Per-type schemas and result projections.

Every entity type owns a fixed schema (field boosts are set here and never
change at runtime) plus the handful of stored fields used to build a
result's title, subtitle and snippet. Filter applicability lives here too so
the filter pipeline never needs to know what a point or a herb looks like.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
import re
from types import MappingProxyType
from typing import Any

from acuref_search.domain.records import INDEXABLE_RECORD_ADAPTER, BaseRecord, EntityType
from acuref_search.search.analyzers import iter_field_text
from acuref_search.search.schema import Schema, StoredField, TextField


_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def to_snake_case(key: str) -> str:
    """Convert store keys such as ``nameEn`` to ``name_en``."""
    return _CAMEL_BOUNDARY.sub("_", key).lower()


def _text(value: Any) -> str:
    return ", ".join(piece for piece in iter_field_text(value) if piece)


def _point_title(record_id: str, data: Mapping[str, Any]) -> str:
    name = _text(data.get("name_en"))
    return f"{record_id} — {name}" if name else record_id


def _title_from(field_name: str) -> Callable[[str, Mapping[str, Any]], str]:
    def title(record_id: str, data: Mapping[str, Any]) -> str:
        return _text(data.get(field_name)) or record_id

    return title


@dataclass(frozen=True)
class EntityProfile:
    """Everything the engine knows about one entity type."""

    entity_type: EntityType
    schema: Schema
    title: Callable[[str, Mapping[str, Any]], str]
    subtitle_fields: tuple[str, ...] = ()
    snippet_field: str | None = None
    suggest_fields: tuple[str, ...] = ()
    filter_fields: Mapping[str, str] = field(default_factory=dict)
    """Filter name (``taxonomy``/``category``) -> stored field it checks."""

    def subtitle(self, data: Mapping[str, Any]) -> str | None:
        for name in self.subtitle_fields:
            value = _text(data.get(name))
            if value:
                return value
        return None

    def snippet_source(self, data: Mapping[str, Any]) -> str:
        if self.snippet_field is None:
            return ""
        return _text(data.get(self.snippet_field))


def _schema(entity_type: EntityType, *fields: TextField | StoredField) -> Schema:
    return Schema(name=entity_type.value, unique_field="id", fields=list(fields))


POINT_PROFILE = EntityProfile(
    entity_type=EntityType.POINT,
    schema=_schema(
        EntityType.POINT,
        TextField("id", boost=3.0),
        TextField("name_en", boost=2.0),
        TextField("name_pinyin", boost=2.0),
        TextField("name_characters", stored=False),
        TextField("location"),
        TextField("indications", boost=1.5),
        TextField("notes"),
        TextField("meridian_id"),
        StoredField("contraindications"),
        StoredField("acupressure_depth"),
        StoredField("category"),
    ),
    title=_point_title,
    subtitle_fields=("name_pinyin", "meridian_id"),
    snippet_field="location",
    suggest_fields=("id", "name_en", "name_pinyin"),
    filter_fields=MappingProxyType({"taxonomy": "meridian_id", "category": "category"}),
)

INDICATION_PROFILE = EntityProfile(
    entity_type=EntityType.INDICATION,
    schema=_schema(
        EntityType.INDICATION,
        TextField("id"),
        TextField("label", boost=2.0),
        TextField("synonyms", boost=1.5),
        TextField("category"),
    ),
    title=_title_from("label"),
    subtitle_fields=("category",),
    snippet_field="synonyms",
    suggest_fields=("label", "synonyms"),
    filter_fields=MappingProxyType({"category": "category"}),
)

TECHNIQUE_PROFILE = EntityProfile(
    entity_type=EntityType.TECHNIQUE,
    schema=_schema(
        EntityType.TECHNIQUE,
        TextField("id"),
        TextField("name", boost=2.0),
        TextField("description"),
        TextField("modality_id", boost=1.5),
        StoredField("cautions"),
        StoredField("duration"),
        StoredField("equipment"),
    ),
    title=_title_from("name"),
    subtitle_fields=("modality_id",),
    snippet_field="description",
    filter_fields=MappingProxyType({"taxonomy": "modality_id"}),
)

HERB_PROFILE = EntityProfile(
    entity_type=EntityType.HERB,
    schema=_schema(
        EntityType.HERB,
        TextField("id"),
        TextField("name", boost=2.0),
        TextField("name_chinese", boost=1.5),
        TextField("properties"),
        TextField("meridians"),
        StoredField("cautions"),
        StoredField("dosage"),
    ),
    title=_title_from("name"),
    subtitle_fields=("name_chinese",),
    snippet_field="properties",
    filter_fields=MappingProxyType({"taxonomy": "meridians"}),
)

DIET_PROFILE = EntityProfile(
    entity_type=EntityType.DIET,
    schema=_schema(
        EntityType.DIET,
        TextField("id"),
        TextField("name", boost=2.0),
        TextField("guidance"),
        TextField("properties"),
        TextField("category"),
    ),
    title=_title_from("name"),
    subtitle_fields=("category",),
    snippet_field="guidance",
    filter_fields=MappingProxyType({"category": "category"}),
)

ENTITY_PROFILES: Mapping[EntityType, EntityProfile] = MappingProxyType(
    {
        profile.entity_type: profile
        for profile in (POINT_PROFILE, INDICATION_PROFILE, TECHNIQUE_PROFILE, HERB_PROFILE, DIET_PROFILE)
    }
)


def get_profile(entity_type: EntityType | str) -> EntityProfile:
    """Return the profile for an entity type, accepting the enum or its value."""
    return ENTITY_PROFILES[EntityType(entity_type)]


def _searchable_value(value: Any) -> str | list[str] | None:
    if value is None or isinstance(value, str):
        return value
    return list(iter_field_text(value))


def make_record(entity_type: EntityType | str, raw: Mapping[str, Any]) -> BaseRecord:
    """Shape a raw store mapping into the record variant for ``entity_type``.

    Keys may use the store's camelCase or snake_case. Searchable fields that
    are missing become ``None`` (indexed as empty text); fields outside the
    schema are dropped.

    Raises:
        pydantic.ValidationError: when ``id`` is missing or empty.
    """
    profile = get_profile(entity_type)
    normalized = {to_snake_case(key): value for key, value in raw.items()}
    record_id = normalized.get("id")
    if record_id is not None and not isinstance(record_id, str):
        record_id = str(record_id)
        normalized["id"] = record_id

    searchable = {f.name: _searchable_value(normalized.get(f.name)) for f in profile.schema.text_fields}
    stored = {
        name: normalized[name] for name in profile.schema.stored_field_names if normalized.get(name) is not None
    }
    return INDEXABLE_RECORD_ADAPTER.validate_python(
        {"type": profile.entity_type.value, "id": record_id, "searchable": searchable, "stored": stored}
    )
