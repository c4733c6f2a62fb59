"""Federated search engine for acupuncture and TCM reference content."""

from acuref_search.domain import EntityType, SearchFilters, SearchResult
from acuref_search.engine import FederatedSearchEngine
from acuref_search.search.registry import IndexBuildError, IndexRegistry


__all__ = [
    "EntityType",
    "FederatedSearchEngine",
    "IndexBuildError",
    "IndexRegistry",
    "SearchFilters",
    "SearchResult",
]
