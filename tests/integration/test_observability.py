"""Integration tests for observability features."""

import json
import logging

import pytest

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
from checkout_explorer.observability.telemetry import TelemetryConfig, parse_store_path
from checkout_explorer.observability.tracing import (
    add_span_attribute,
    flow_span,
    get_current_trace_id,
    get_tracer,
)


def _record(msg: str = "Test message", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="test",
        level=logging.INFO,
        pathname="test.py",
        lineno=10,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestTelemetryConfig:
    """Tests for telemetry configuration."""

    def test_default_config(self):
        """Test default telemetry configuration."""
        config = TelemetryConfig()

        assert config.service_name == "checkout-explorer"
        assert config.enable_tracing is True
        assert config.enable_metrics is True
        assert config.trace_sample_rate == 1.0

    def test_custom_config(self):
        """Test custom telemetry configuration."""
        config = TelemetryConfig(
            service_name="custom-service",
            environment="production",
            otlp_endpoint="http://collector:4317",
            trace_sample_rate=0.5,
        )

        assert config.environment == "production"
        assert config.otlp_endpoint == "http://collector:4317"
        assert config.trace_sample_rate == 0.5


class TestTracing:
    """Tests for tracing utilities."""

    def test_get_tracer(self):
        """Test getting a tracer."""
        assert get_tracer("test_module") is not None

    def test_flow_span_context_manager(self):
        """Test flow_span yields a span."""
        with flow_span("token", checkout_id="chk-1", order_id=None) as span:
            assert span is not None

    def test_flow_span_reraises(self):
        """Test flow_span records and re-raises exceptions."""
        with pytest.raises(ValueError):
            with flow_span("order-create", checkout_id="chk-1"):
                raise ValueError("Test error")

    def test_add_span_attribute_no_span(self):
        """Test add_span_attribute when no span is active."""
        add_span_attribute("key", "value")

    def test_get_trace_id_no_span(self):
        """Without an active span there is no trace ID."""
        assert get_current_trace_id() is None


class TestMetrics:
    """Tests for metrics recording."""

    def test_get_metrics_registry(self):
        """Test the registry is created once."""
        assert get_metrics_registry() is get_metrics_registry()

    def test_record_helpers(self):
        """Test recording helpers do not raise without an SDK meter provider."""
        record_flow_run("completed")
        record_flow_run("failed", failed_stage="order-create")
        record_stage("token", 0.05, "fallback")
        record_token_fallback("upstream_error")
        record_request("create_order", 201)

    def test_registry_initialization(self):
        registry = MetricsRegistry("test_registry")
        registry.record_stage("order-update", 0.2, "success")


class TestStructuredLogging:
    """Tests for structured logging."""

    def test_configure_logging(self):
        """Test logging configuration."""
        configure_logging(level="DEBUG", json_format=True, module_levels={"httpx": "ERROR"})

        assert logging.getLogger().level == logging.DEBUG
        assert logging.getLogger("httpx").level == logging.ERROR
        assert isinstance(logging.getLogger().handlers[0].formatter, StructuredLogFormatter)

        configure_logging(level="INFO", json_format=False)

    def test_structured_log_formatter(self):
        """Test structured log formatter."""
        data = json.loads(StructuredLogFormatter().format(_record()))

        assert data["message"] == "Test message"
        assert data["level"] == "INFO"
        assert data["logger"] == "test"
        assert data["location"].endswith(":10")
        assert "extra" not in data

    def test_formatter_includes_extra_fields(self):
        """Correlation IDs go top level; other ``extra=`` fields under ``extra``."""
        record = _record(checkout_id="chk-1", stage="token", event="fallback_used")

        data = json.loads(StructuredLogFormatter().format(record))

        assert data["checkout_id"] == "chk-1"
        assert data["extra"] == {"stage": "token", "event": "fallback_used"}

    def test_checkout_context(self):
        """Records logged inside a flow pick up its checkout ID."""
        record = _record()
        with checkout_context("chk-2"):
            assert get_current_checkout_id() == "chk-2"
            CheckoutContextFilter().filter(record)
        assert get_current_checkout_id() is None
        assert record.checkout_id == "chk-2"

    def test_context_filter_keeps_explicit_id(self):
        record = _record(checkout_id="explicit")
        with checkout_context("ambient"):
            CheckoutContextFilter().filter(record)
        assert record.checkout_id == "explicit"

    def test_get_logger(self):
        """Test get_logger returns proper logger."""
        assert get_logger("my.module").name == "my.module"


class TestStorePathParsing:
    """Tests for tagging outgoing BigCommerce spans."""

    def test_v2_order_url(self):
        assert parse_store_path("https://api.bigcommerce.com/stores/abc123/v2/orders/42") == {
            "store_hash": "abc123",
            "version": "v2",
            "resource": "/orders/42",
        }

    def test_store_root(self):
        parts = parse_store_path("https://api.bigcommerce.com/stores/abc123/v3")
        assert parts["resource"] == "/"

    def test_other_hosts(self):
        assert parse_store_path("https://collector.example.com/v1/traces") is None
