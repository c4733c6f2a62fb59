"""Observability helpers: structured logging, metrics and tracing."""

from acuref_search.observability.logging import JsonFormatter, configure_logging, current_trace_ids
from acuref_search.observability.metrics import (
    INDEX_BUILD_FAILURES,
    INDEX_GENERATION,
    INDEX_RECORD_COUNT,
    SEARCH_LATENCY,
    SEARCH_RESULTS,
    get_metrics,
    get_metrics_content_type,
    track_latency,
)
from acuref_search.observability.tracing import create_span, get_tracer, init_tracing, reset_tracer


__all__ = [
    "INDEX_BUILD_FAILURES",
    "INDEX_GENERATION",
    "INDEX_RECORD_COUNT",
    "SEARCH_LATENCY",
    "SEARCH_RESULTS",
    "JsonFormatter",
    "configure_logging",
    "create_span",
    "current_trace_ids",
    "get_metrics",
    "get_metrics_content_type",
    "get_tracer",
    "init_tracing",
    "reset_tracer",
    "track_latency",
]
