"""Prometheus metrics for search and reindex."""

from __future__ import annotations

from contextlib import contextmanager
import time
from typing import TYPE_CHECKING

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest


if TYPE_CHECKING:
    from collections.abc import Generator


SEARCH_LATENCY = Histogram(
    "search_bridge_search_latency_seconds",
    "End-to-end search latency (index select plus hydration)",
    ["kind"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

SEARCH_REQUESTS = Counter(
    "search_bridge_search_requests_total",
    "Search requests by outcome",
    ["kind", "status"],
)

REINDEX_OUTCOMES = Counter(
    "search_bridge_reindex_outcomes_total",
    "Per-kind reindex outcomes",
    ["kind", "outcome"],
)

INDEXED_OBJECTS = Counter(
    "search_bridge_indexed_objects_total",
    "Objects submitted for indexing",
    ["kind"],
)


@contextmanager
def track_latency(histogram: Histogram, **labels: str) -> Generator[None, None, None]:
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
