"""OpenTelemetry spans around searches, rebuilds and outbound index/store calls."""

from __future__ import annotations

from contextlib import contextmanager
import logging
from typing import TYPE_CHECKING, Any

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.trace import SpanKind, Status, StatusCode

from search_bridge.observability.context import get_trace_context, update_span_id


if TYPE_CHECKING:
    from collections.abc import Generator

    from opentelemetry.trace import Span, Tracer

logger = logging.getLogger(__name__)

SERVICE_NAME = "search-bridge"

_tracer_holder: dict[str, Tracer | None] = {"tracer": None}


def init_tracing(
    service_name: str = SERVICE_NAME,
    resource_attributes: dict[str, str] | None = None,
) -> TracerProvider:
    """Install an SDK tracer provider; spans stay in-process unless a processor is added."""
    resource = Resource.create({"service.name": service_name, **(resource_attributes or {})})
    provider = TracerProvider(resource=resource)
    trace.set_tracer_provider(provider)
    _tracer_holder["tracer"] = trace.get_tracer(__name__)
    logger.info("Tracing initialized for service: %s", service_name)
    return provider


def get_tracer() -> Tracer:
    # Without init_tracing the global (no-op) provider is used
    if _tracer_holder["tracer"] is None:
        _tracer_holder["tracer"] = trace.get_tracer(__name__)
    return _tracer_holder["tracer"]  # type: ignore[return-value]


def _context_attributes() -> dict[str, str]:
    ctx = get_trace_context()
    attributes = {}
    if partition := ctx.get("partition"):
        attributes["search.partition"] = partition
    if kind := ctx.get("kind"):
        attributes["search.kind"] = kind
    return attributes


@contextmanager
def create_span(
    name: str,
    kind: SpanKind = SpanKind.INTERNAL,
    attributes: dict[str, Any] | None = None,
) -> Generator[Span, None, None]:
    """Open a span tagged with the bound partition and search kind; errors mark it failed."""
    with get_tracer().start_as_current_span(name, kind=kind) as span:
        for key, value in {**_context_attributes(), **(attributes or {})}.items():
            span.set_attribute(key, value)

        ctx = span.get_span_context()
        if ctx.is_valid:
            update_span_id(format(ctx.span_id, "016x"))

        try:
            yield span
        except Exception as exc:
            span.set_status(Status(StatusCode.ERROR, str(exc)))
            span.record_exception(exc)
            raise


@contextmanager
def client_span(system: str, method: str, url: str) -> Generator[Span, None, None]:
    """Span for one outbound HTTP request to the index or the document store."""
    attributes = {"peer.service": system, "http.method": method, "http.url": url}
    with create_span(f"{system} {method}", kind=SpanKind.CLIENT, attributes=attributes) as span:
        yield span
