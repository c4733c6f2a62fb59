"""Domain models for indexable catalog records.

Each entity type gets its own frozen variant so downstream code can branch on
the ``type`` discriminator instead of inspecting arbitrary objects. Records
carry only what indexing needs: a stable ``id``, the searchable field values,
and the stored values returned verbatim in results.
"""

from collections.abc import Mapping
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class EntityType(str, Enum):
    """Record types served by the federated index, in dispatch order."""

    POINT = "point"
    INDICATION = "indication"
    TECHNIQUE = "technique"
    HERB = "herb"
    DIET = "diet"


SearchableValue = Union[str, list[str], None]


class BaseRecord(BaseModel):
    """Fields shared by every record variant.

    ``id`` is unique within its type only; a point and an indication may
    share an id without colliding.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    searchable: Mapping[str, SearchableValue] = Field(default_factory=dict)
    stored: Mapping[str, Any] = Field(default_factory=dict)

    @property
    def entity_type(self) -> EntityType:
        return EntityType(self.type)  # type: ignore[attr-defined]


class PointRecord(BaseRecord):
    type: Literal["point"] = "point"


class IndicationRecord(BaseRecord):
    type: Literal["indication"] = "indication"


class TechniqueRecord(BaseRecord):
    type: Literal["technique"] = "technique"


class HerbRecord(BaseRecord):
    type: Literal["herb"] = "herb"


class DietRecord(BaseRecord):
    type: Literal["diet"] = "diet"


IndexableRecord = Annotated[
    Union[PointRecord, IndicationRecord, TechniqueRecord, HerbRecord, DietRecord],
    Field(discriminator="type"),
]

# Validates shaped payloads (with a ``type`` key) into the matching variant
INDEXABLE_RECORD_ADAPTER: TypeAdapter[IndexableRecord] = TypeAdapter(IndexableRecord)
