"""Observability module for tracing, metrics, and logging."""

from checkout_explorer.observability.logging import (
    CheckoutContextFilter,
    StructuredLogFormatter,
    checkout_context,
    configure_logging,
    get_current_checkout_id,
    get_logger,
)
from checkout_explorer.observability.metrics import (
    MetricsRegistry,
    get_metrics_registry,
    record_flow_run,
    record_request,
    record_stage,
    record_token_fallback,
)
from checkout_explorer.observability.telemetry import (
    TelemetryConfig,
    init_telemetry,
    parse_store_path,
    shutdown_telemetry,
)
from checkout_explorer.observability.tracing import (
    add_span_attribute,
    flow_span,
    get_current_span_id,
    get_current_trace_id,
    get_tracer,
)

__all__ = [
    # Telemetry
    "TelemetryConfig",
    "init_telemetry",
    "shutdown_telemetry",
    "parse_store_path",
    # Tracing
    "get_tracer",
    "flow_span",
    "add_span_attribute",
    "get_current_trace_id",
    "get_current_span_id",
    # Metrics
    "MetricsRegistry",
    "get_metrics_registry",
    "record_flow_run",
    "record_stage",
    "record_token_fallback",
    "record_request",
    # Logging
    "CheckoutContextFilter",
    "StructuredLogFormatter",
    "checkout_context",
    "configure_logging",
    "get_current_checkout_id",
    "get_logger",
]
