"""Federated search over the acupuncture reference catalog.

``FederatedSearchEngine`` is the only public entry point: it owns an
``IndexRegistry`` and exposes ``index_data``, ``search``, ``auto_suggest``
and ``refresh``. A search reads one registry snapshot and runs
dispatch -> merge/rank -> filter -> truncate -> snippet against it, so an
``index_data`` call that lands between two searches never shows either of
them a mix of generations.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Mapping
import logging
from typing import TYPE_CHECKING, Any

from acuref_search.config import Settings
from acuref_search.domain.records import EntityType
from acuref_search.domain.search import SearchFilters, SearchResult
from acuref_search.observability import (
    INDEX_BUILD_FAILURES,
    INDEX_GENERATION,
    INDEX_RECORD_COUNT,
    SEARCH_LATENCY,
    SEARCH_RESULTS,
    create_span,
    track_latency,
)
from acuref_search.search.analyzers import query_terms
from acuref_search.search.dispatcher import dispatch_query
from acuref_search.search.entities import ENTITY_PROFILES
from acuref_search.search.filters import apply_filters, build_filters
from acuref_search.search.ranking import merge_results
from acuref_search.search.registry import IndexBuildError, IndexRegistry, RecordsByType, RegistrySnapshot
from acuref_search.search.snippet import extract_snippet
from acuref_search.search.suggest import auto_suggest
from acuref_search.search.type_index import CombineWith, QueryOptions


if TYPE_CHECKING:
    from acuref_search.adapters.record_source import AbstractRecordSource


logger = logging.getLogger(__name__)


class FederatedSearchEngine:
    """Search points, indications, techniques, herbs and diet items at once."""

    def __init__(self, registry: IndexRegistry | None = None, settings: Settings | None = None) -> None:
        self.settings = settings or Settings()
        self._registry = registry or IndexRegistry()

    @property
    def generation(self) -> int:
        return self._registry.generation

    def index_data(self, records_by_type: RecordsByType) -> None:
        """Replace all five per-type indices with ones built from ``records_by_type``.

        Raises:
            IndexBuildError: a replacement index failed to build. The previous
                generation stays live.
        """
        with create_span("search.index_data") as span:
            try:
                snapshot = self._registry.rebuild_all(records_by_type)
            except IndexBuildError as exc:
                entity_type = exc.entity_type.value if isinstance(exc.entity_type, EntityType) else "unknown"
                INDEX_BUILD_FAILURES.labels(entity_type=entity_type).inc()
                logger.error(
                    "Index rebuild rejected, keeping generation %d: %s",
                    self._registry.generation,
                    exc,
                    exc_info=True,
                )
                raise
            counts = snapshot.record_counts()
            span.set_attribute("search.generation", snapshot.generation)
            for entity_type, count in counts.items():
                INDEX_RECORD_COUNT.labels(entity_type=entity_type).set(count)
                span.set_attribute(f"search.records.{entity_type}", count)
            INDEX_GENERATION.labels().set(snapshot.generation)

    async def refresh(self, source: AbstractRecordSource) -> None:
        """Load records from ``source`` and rebuild.

        Searches issued while the source is loading are answered from the
        current generation.
        """
        records_by_type = await source.load_records()
        self.index_data(records_by_type)

    def search(
        self,
        query: str,
        filters: SearchFilters | Mapping[str, Any] | None = None,
        *,
        combine_with: CombineWith | None = None,
    ) -> list[SearchResult]:
        """Return results across all entity types, best first.

        Blank queries and an engine that has not been indexed yet return an
        empty list. Scores are normalized per type; at most
        ``settings.search_max_results`` results are returned.
        """
        if not query or not query.strip():
            return []

        request_filters = self._coerce_filters(filters)
        scope = request_filters.type.value if request_filters.type else "all"
        snapshot = self._registry.snapshot()
        if not snapshot.is_ready:
            logger.debug("Search before first index build, returning no results")
            return []

        with create_span("search.query", attributes={"search.scope": scope}) as span, track_latency(
            SEARCH_LATENCY, scope=scope
        ):
            results = self._search_snapshot(snapshot, query, request_filters, combine_with)
            span.set_attribute("search.generation", snapshot.generation)
            span.set_attribute("search.result_count", len(results))

        for entity_type, count in Counter(result.type.value for result in results).items():
            SEARCH_RESULTS.labels(entity_type=entity_type).inc(count)
        logger.debug("Search %r returned %d results (generation %d)", query, len(results), snapshot.generation)
        return results

    def auto_suggest(self, query: str, limit: int | None = None) -> list[str]:
        """Return up to ``limit`` distinct completions for a partial query."""
        if not query or not query.strip():
            return []
        limit = self.settings.suggest_limit if limit is None else limit
        with create_span("search.auto_suggest"):
            return auto_suggest(self._registry.snapshot(), query, limit, ENTITY_PROFILES)

    def stats(self) -> dict[str, Any]:
        snapshot = self._registry.snapshot()
        return {"generation": snapshot.generation, "records": snapshot.record_counts()}

    def _query_options(self, combine_with: CombineWith | None) -> QueryOptions:
        return QueryOptions(
            prefix=self.settings.search_prefix_enabled,
            fuzzy=self.settings.search_fuzzy_enabled,
            fuzzy_tolerance=self.settings.search_fuzzy_tolerance,
            combine_with=combine_with or self.settings.search_combine_with,
        )

    def _search_snapshot(
        self,
        snapshot: RegistrySnapshot,
        query: str,
        filters: SearchFilters,
        combine_with: CombineWith | None,
    ) -> list[SearchResult]:
        typed_hits = dispatch_query(
            snapshot,
            query,
            entity_type=filters.type,
            options=self._query_options(combine_with),
        )
        ranked = merge_results(snapshot, typed_hits, ENTITY_PROFILES)
        kept = apply_filters(ranked, build_filters(filters, ENTITY_PROFILES))
        kept = kept[: self.settings.search_max_results]

        terms = query_terms(query)
        return [self._with_snippet(result, terms) for result in kept]

    def _with_snippet(self, result: SearchResult, terms: tuple[str, ...]) -> SearchResult:
        source = ENTITY_PROFILES[result.type].snippet_source(result.data)
        snippet = extract_snippet(
            source,
            terms,
            max_chars=self.settings.snippet_length,
            context_chars=self.settings.snippet_context_chars,
        )
        return result.model_copy(update={"snippet": snippet or None})

    @staticmethod
    def _coerce_filters(filters: SearchFilters | Mapping[str, Any] | None) -> SearchFilters:
        if filters is None:
            return SearchFilters()
        if isinstance(filters, SearchFilters):
            return filters
        return SearchFilters.model_validate(dict(filters))
