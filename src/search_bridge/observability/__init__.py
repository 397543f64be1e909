"""Observability module for trace-correlated logging, tracing, and metrics."""

from search_bridge.observability.context import bind_partition, get_trace_context, set_trace_context, trace_context
from search_bridge.observability.logging import JsonFormatter, configure_logging, strip_credentials
from search_bridge.observability.metrics import (
    INDEXED_OBJECTS,
    REINDEX_OUTCOMES,
    SEARCH_LATENCY,
    SEARCH_REQUESTS,
    get_metrics,
    get_metrics_content_type,
    track_latency,
)
from search_bridge.observability.tracing import client_span, create_span, get_tracer, init_tracing


__all__ = [
    "INDEXED_OBJECTS",
    "REINDEX_OUTCOMES",
    "SEARCH_LATENCY",
    "SEARCH_REQUESTS",
    "JsonFormatter",
    "bind_partition",
    "client_span",
    "configure_logging",
    "create_span",
    "get_metrics",
    "get_metrics_content_type",
    "get_trace_context",
    "get_tracer",
    "init_tracing",
    "set_trace_context",
    "strip_credentials",
    "trace_context",
    "track_latency",
]
