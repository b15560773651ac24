"""OpenTelemetry metric definitions and recording."""

import logging

from opentelemetry import metrics

logger = logging.getLogger(__name__)

# Global metrics registry
_metrics_registry: "MetricsRegistry | None" = None


class MetricsRegistry:
    """
    Registry for OpenTelemetry metrics.

    Provides pre-defined metrics for the checkout explorer:
    - Flow runs by terminal outcome
    - Per-stage duration
    - Token fallback count
    - BigCommerce request count
    """

    def __init__(self, meter_name: str = "checkout_explorer") -> None:
        meter = metrics.get_meter(meter_name)

        self.flow_runs_total = meter.create_counter(
            name="checkout_flow_runs_total",
            description="Checkout-to-order flow runs by terminal outcome",
            unit="1",
        )
        self.stage_duration = meter.create_histogram(
            name="checkout_flow_stage_duration_seconds",
            description="Duration of each checkout flow stage in seconds",
            unit="s",
        )
        self.token_fallback_total = meter.create_counter(
            name="checkout_token_fallback_total",
            description="Session tokens synthesized locally instead of issued by the API",
            unit="1",
        )
        self.requests_total = meter.create_counter(
            name="bigcommerce_requests_total",
            description="Requests made to the BigCommerce API",
            unit="1",
        )
        logger.debug("Metrics registry initialized")

    def record_flow_run(self, outcome: str, failed_stage: str | None = None) -> None:
        """
        Record a finished flow.

        Args:
            outcome: completed or failed.
            failed_stage: Stage name when the flow failed.
        """
        labels = {"outcome": outcome}
        if failed_stage:
            labels["stage"] = failed_stage
        self.flow_runs_total.add(1, labels)

    def record_stage(self, stage: str, duration_seconds: float, outcome: str) -> None:
        """Record one stage's duration and outcome (success, fallback, error)."""
        self.stage_duration.record(duration_seconds, {"stage": stage, "outcome": outcome})

    def record_token_fallback(self, reason: str) -> None:
        """Record a locally synthesized token. ``reason`` is upstream_error, unavailable or malformed."""
        self.token_fallback_total.add(1, {"reason": reason})

    def record_request(self, operation: str, status: int | str) -> None:
        """Record one BigCommerce API call."""
        self.requests_total.add(1, {"operation": operation, "status": str(status)})


def get_metrics_registry() -> MetricsRegistry:
    """
    Get the global metrics registry.

    Creates one if it doesn't exist.
    """
    global _metrics_registry
    if _metrics_registry is None:
        _metrics_registry = MetricsRegistry()
    return _metrics_registry


# Convenience functions that use the global registry


def record_flow_run(outcome: str, failed_stage: str | None = None) -> None:
    """Record a finished flow."""
    get_metrics_registry().record_flow_run(outcome, failed_stage)


def record_stage(stage: str, duration_seconds: float, outcome: str) -> None:
    """Record stage duration."""
    get_metrics_registry().record_stage(stage, duration_seconds, outcome)


def record_token_fallback(reason: str) -> None:
    """Record a synthesized token."""
    get_metrics_registry().record_token_fallback(reason)


def record_request(operation: str, status: int | str) -> None:
    """Record a BigCommerce API call."""
    get_metrics_registry().record_request(operation, status)
