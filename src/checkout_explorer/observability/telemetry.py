"""OpenTelemetry SDK setup for the explorer service.

Traces go to an OTLP collector, metrics are exposed for Prometheus scraping
on ``/metrics``, and outgoing BigCommerce calls made through httpx get client
spans tagged with the store they target. FastAPI server spans are added per
app in ``create_app``.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any

from opentelemetry import metrics, trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.exporter.prometheus import PrometheusMetricReader
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk.trace.sampling import TraceIdRatioBased
from opentelemetry.trace import Span

logger = logging.getLogger(__name__)

_STORE_PATH = re.compile(r"/stores/(?P<store_hash>[^/]+)/(?P<version>v\d)(?P<resource>/[^?]*)?")

_telemetry_initialized = False


@dataclass
class TelemetryConfig:
    """Configuration for OpenTelemetry."""

    service_name: str = "checkout-explorer"
    service_version: str = "0.1.0"
    environment: str = "development"

    # OTLP gRPC collector
    otlp_endpoint: str = "http://localhost:4317"
    otlp_insecure: bool = True

    enable_tracing: bool = True
    enable_metrics: bool = True

    trace_sample_rate: float = 1.0

    resource_attributes: dict[str, str] = field(default_factory=dict)

    def resource(self) -> Resource:
        return Resource.create({
            "service.name": self.service_name,
            "service.version": self.service_version,
            "deployment.environment": self.environment,
            **self.resource_attributes,
        })


def parse_store_path(url: Any) -> dict[str, str] | None:
    """
    Split a BigCommerce store API URL into store hash, API version and resource path.

    >>> parse_store_path("https://api.bigcommerce.com/stores/abc123/v2/orders/42")
    {'store_hash': 'abc123', 'version': 'v2', 'resource': '/orders/42'}
    """
    match = _STORE_PATH.search(str(url))
    if match is None:
        return None
    parts = match.groupdict()
    parts["resource"] = parts["resource"] or "/"
    return parts


def _tag_store_span(span: Span, url: Any) -> None:
    if not span.is_recording():
        return
    parts = parse_store_path(url)
    if parts:
        span.set_attribute("bigcommerce.store_hash", parts["store_hash"])
        span.set_attribute("bigcommerce.api_version", parts["version"])
        span.set_attribute("bigcommerce.resource", parts["resource"])


def _request_hook(span: Span, request: Any) -> None:
    _tag_store_span(span, request.url)


async def _async_request_hook(span: Span, request: Any) -> None:
    _tag_store_span(span, request.url)


def _init_tracing(config: TelemetryConfig, resource: Resource) -> None:
    tracer_provider = TracerProvider(
        resource=resource,
        sampler=TraceIdRatioBased(config.trace_sample_rate),
    )
    tracer_provider.add_span_processor(
        BatchSpanProcessor(
            OTLPSpanExporter(endpoint=config.otlp_endpoint, insecure=config.otlp_insecure)
        )
    )
    trace.set_tracer_provider(tracer_provider)
    logger.info("Tracing initialized with endpoint: %s", config.otlp_endpoint)


def _init_metrics(resource: Resource) -> None:
    metrics.set_meter_provider(
        MeterProvider(resource=resource, metric_readers=[PrometheusMetricReader()])
    )
    logger.info("Metrics initialized with Prometheus exporter")


def init_telemetry(config: TelemetryConfig | None = None) -> bool:
    """
    Initialize OpenTelemetry SDK.

    Returns:
        True if initialization was successful (or had already happened), False otherwise.
    """
    global _telemetry_initialized

    if _telemetry_initialized:
        logger.debug("Telemetry already initialized")
        return True

    config = config or TelemetryConfig()

    try:
        resource = config.resource()
        if config.enable_tracing:
            _init_tracing(config, resource)
        if config.enable_metrics:
            _init_metrics(resource)
        HTTPXClientInstrumentor().instrument(
            request_hook=_request_hook,
            async_request_hook=_async_request_hook,
        )
    except Exception:
        logger.exception("Failed to initialize OpenTelemetry")
        return False

    _telemetry_initialized = True
    logger.info("OpenTelemetry initialized successfully")
    return True


def shutdown_telemetry() -> None:
    """Flush and shut down the SDK providers."""
    global _telemetry_initialized

    if not _telemetry_initialized:
        return

    for provider in (trace.get_tracer_provider(), metrics.get_meter_provider()):
        if isinstance(provider, (TracerProvider, MeterProvider)):
            provider.shutdown()

    HTTPXClientInstrumentor().uninstrument()
    _telemetry_initialized = False
    logger.info("Telemetry shutdown complete")
