"""Domain value objects for the federated catalog search."""

from acuref_search.domain.records import (
    BaseRecord,
    DietRecord,
    EntityType,
    HerbRecord,
    IndexableRecord,
    IndicationRecord,
    PointRecord,
    TechniqueRecord,
)
from acuref_search.domain.search import SearchFilters, SearchResult


__all__ = [
    "BaseRecord",
    "DietRecord",
    "EntityType",
    "HerbRecord",
    "IndexableRecord",
    "IndicationRecord",
    "PointRecord",
    "SearchFilters",
    "SearchResult",
    "TechniqueRecord",
]
