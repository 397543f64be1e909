"""Per-task correlation state (trace ids, partition, search kind) shared by logs and spans."""

from __future__ import annotations

from contextvars import ContextVar
from uuid import uuid4


trace_context: ContextVar[dict | None] = ContextVar("trace_context", default=None)


def generate_trace_id() -> str:
    return uuid4().hex


def generate_span_id() -> str:
    return uuid4().hex[:16]


def get_trace_context() -> dict:
    """Current correlation state; a fresh trace id is minted when none is bound."""
    ctx = trace_context.get()
    if ctx is None or not ctx.get("trace_id"):
        ctx = {"trace_id": generate_trace_id(), "span_id": generate_span_id()}
        trace_context.set(ctx)
    return ctx


def set_trace_context(trace_id: str, span_id: str, **extra: object) -> None:
    trace_context.set({"trace_id": trace_id, "span_id": span_id, **extra})


def update_span_id(span_id: str) -> None:
    ctx = trace_context.get() or {}
    trace_context.set({**ctx, "span_id": span_id})


def bind_partition(partition: str, kind: str | None = None) -> None:
    """Tag following log lines and spans with the partition (and kind) being searched or rebuilt."""
    ctx = {**get_trace_context(), "partition": partition}
    if kind is None:
        ctx.pop("kind", None)
    else:
        ctx["kind"] = kind
    trace_context.set(ctx)
