"""Prometheus metrics for search and indexing, mirrored to OpenTelemetry."""

from __future__ import annotations

from contextlib import contextmanager
import time
from typing import TYPE_CHECKING, Any

from opentelemetry import metrics as otel_metrics
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest


if TYPE_CHECKING:
    from collections.abc import Generator


_METER_NAME = "acuref_search"


def _label_key(labels: dict[str, str]) -> tuple[tuple[str, str], ...]:
    return tuple(sorted(labels.items()))


class _BoundMetric:
    def __init__(self, wrapper: MetricBridge, labels: dict[str, str]) -> None:
        self._wrapper = wrapper
        self._labels = labels

    def inc(self, amount: float = 1.0) -> None:
        self._wrapper.inc(self._labels, amount)

    def observe(self, value: float) -> None:
        self._wrapper.observe(self._labels, value)

    def set(self, value: float) -> None:
        self._wrapper.set(self._labels, value)


class MetricBridge:
    """Record to a Prometheus collector and the global OTel meter together.

    The OTel instrument is created lazily from whatever meter provider is
    installed when the metric is first used, so importing this module has no
    provider side effects.
    """

    def __init__(
        self,
        prom_metric: Counter | Histogram | Gauge,
        *,
        otel_name: str,
        otel_description: str,
        otel_kind: str,
    ) -> None:
        self._prom_metric = prom_metric
        self._otel_name = otel_name
        self._otel_description = otel_description
        self._otel_kind = otel_kind
        self._otel_instrument: Any = None
        self._last_values: dict[tuple[tuple[str, str], ...], float] = {}

    def labels(self, **labels: str) -> _BoundMetric:
        return _BoundMetric(self, labels)

    def _ensure_otel_instrument(self) -> Any:
        if self._otel_instrument is not None:
            return self._otel_instrument
        meter = otel_metrics.get_meter(_METER_NAME)
        if self._otel_kind == "counter":
            self._otel_instrument = meter.create_counter(self._otel_name, description=self._otel_description)
        elif self._otel_kind == "histogram":
            self._otel_instrument = meter.create_histogram(self._otel_name, description=self._otel_description)
        elif self._otel_kind == "gauge":
            self._otel_instrument = meter.create_up_down_counter(self._otel_name, description=self._otel_description)
        else:
            raise ValueError(f"Unknown metric kind: {self._otel_kind}")
        return self._otel_instrument

    def _prom(self, labels: dict[str, str]) -> Any:
        return self._prom_metric.labels(**labels) if labels else self._prom_metric

    def inc(self, labels: dict[str, str], amount: float) -> None:
        self._prom(labels).inc(amount)
        self._ensure_otel_instrument().add(amount, labels)

    def observe(self, labels: dict[str, str], value: float) -> None:
        self._prom(labels).observe(value)
        self._ensure_otel_instrument().record(value, labels)

    def set(self, labels: dict[str, str], value: float) -> None:
        self._prom(labels).set(value)
        key = _label_key(labels)
        delta = value - self._last_values.get(key, 0.0)
        if delta:
            self._ensure_otel_instrument().add(delta, labels)
        self._last_values[key] = value


_SEARCH_LATENCY_PROM = Histogram(
    "search_latency_seconds",
    "Search query latency",
    ["scope"],
    buckets=(0.0005, 0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1),
)

_SEARCH_RESULTS_PROM = Counter(
    "search_results_total",
    "Results returned by search, per entity type",
    ["entity_type"],
)

_INDEX_RECORD_COUNT_PROM = Gauge(
    "index_record_count",
    "Records in the live index",
    ["entity_type"],
)

_INDEX_BUILD_FAILURES_PROM = Counter(
    "index_build_failures_total",
    "Index rebuilds rejected because a replacement index failed to build",
    ["entity_type"],
)

_INDEX_GENERATION_PROM = Gauge(
    "index_generation",
    "Generation number of the live index registry",
)

SEARCH_LATENCY = MetricBridge(
    _SEARCH_LATENCY_PROM,
    otel_name="search_latency_seconds",
    otel_description="Search query latency",
    otel_kind="histogram",
)

SEARCH_RESULTS = MetricBridge(
    _SEARCH_RESULTS_PROM,
    otel_name="search_results_total",
    otel_description="Results returned by search, per entity type",
    otel_kind="counter",
)

INDEX_RECORD_COUNT = MetricBridge(
    _INDEX_RECORD_COUNT_PROM,
    otel_name="index_record_count",
    otel_description="Records in the live index",
    otel_kind="gauge",
)

INDEX_BUILD_FAILURES = MetricBridge(
    _INDEX_BUILD_FAILURES_PROM,
    otel_name="index_build_failures_total",
    otel_description="Index rebuilds rejected because a replacement index failed to build",
    otel_kind="counter",
)

INDEX_GENERATION = MetricBridge(
    _INDEX_GENERATION_PROM,
    otel_name="index_generation",
    otel_description="Generation number of the live index registry",
    otel_kind="gauge",
)


@contextmanager
def track_latency(histogram: MetricBridge, **labels: str) -> Generator[None, None, None]:
    """Context manager to track operation latency."""
    start = time.perf_counter()
    try:
        yield
    finally:
        histogram.labels(**labels).observe(time.perf_counter() - start)


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest()


def get_metrics_content_type() -> str:
    """Get content type for metrics endpoint."""
    return CONTENT_TYPE_LATEST
