"""Tracing utilities for the checkout flow."""

from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from opentelemetry import trace
from opentelemetry.trace import Span, StatusCode, Tracer


def get_tracer(name: str = "checkout_explorer") -> Tracer:
    """
    Get an OpenTelemetry tracer.

    Without an SDK tracer provider installed this returns the API's no-op tracer.
    """
    return trace.get_tracer(name)


@contextmanager
def flow_span(
    stage_name: str,
    checkout_id: str | None = None,
    **attributes: Any,
) -> Generator[Span, None, None]:
    """
    Context manager for tracing one checkout flow stage.

    Args:
        stage_name: Name of the stage (token, order-create, ...).
        checkout_id: Checkout being converted.
        **attributes: Additional span attributes.

    Yields:
        The span object.

    Example:
        with flow_span("order-create", checkout_id=checkout_id):
            order_id = await converter.convert(credentials, checkout_id)
    """
    tracer = get_tracer("checkout_explorer.flow")

    span_attrs: dict[str, Any] = {"flow.stage": stage_name}
    if checkout_id:
        span_attrs["checkout.id"] = checkout_id
    span_attrs.update({k: v for k, v in attributes.items() if v is not None})

    with tracer.start_as_current_span(f"checkout_flow.{stage_name}") as span:
        span.set_attributes(span_attrs)
        try:
            yield span
        except Exception as e:
            span.record_exception(e)
            span.set_status(StatusCode.ERROR)
            raise


def add_span_attribute(key: str, value: Any) -> None:
    """Add an attribute to the current span."""
    trace.get_current_span().set_attribute(key, value)


def get_current_trace_id() -> str | None:
    """
    Get the current trace ID.

    Returns:
        Trace ID as hex string, or None if not in a trace.
    """
    ctx = trace.get_current_span().get_span_context()
    if ctx.is_valid:
        return format(ctx.trace_id, "032x")
    return None


def get_current_span_id() -> str | None:
    """
    Get the current span ID.

    Returns:
        Span ID as hex string, or None if not in a span.
    """
    ctx = trace.get_current_span().get_span_context()
    if ctx.is_valid:
        return format(ctx.span_id, "016x")
    return None
