"""Domain models for search requests and responses.

Value objects are immutable (frozen=True) and carry no index internals.
"""

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from acuref_search.domain.records import EntityType


class SearchFilters(BaseModel):
    """Structural filters applied after ranking.

    ``type`` narrows which indices are queried at all; ``taxonomy`` and
    ``category`` remove results whose stored values disagree. Empty strings
    are treated as "not set".
    """

    model_config = ConfigDict(frozen=True)

    type: EntityType | None = None
    taxonomy: str | None = Field(default=None, validation_alias=AliasChoices("taxonomy", "meridian"))
    category: str | None = None

    @field_validator("type", "taxonomy", "category", mode="before")
    @classmethod
    def _blank_is_unset(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class SearchResult(BaseModel):
    """Value object for a single federated search result.

    ``score`` is normalized per entity type, so it is comparable across all
    results of one response. ``data`` is a read-only view of the record's
    stored fields.
    """

    model_config = ConfigDict(frozen=True)

    type: EntityType
    id: str
    title: str
    subtitle: str | None = None
    snippet: str | None = None
    score: float = Field(ge=0.0)
    data: Any
