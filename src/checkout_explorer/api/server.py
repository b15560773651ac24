"""FastAPI application server for the checkout explorer."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.responses import JSONResponse, Response

from checkout_explorer.api.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware
from checkout_explorer.api.routes import health_router, router
from checkout_explorer.config import get_settings
from checkout_explorer.exceptions import CheckoutExplorerError
from checkout_explorer.integrations.bigcommerce import create_gateway
from checkout_explorer.observability.logging import configure_logging
from checkout_explorer.observability.telemetry import (
    TelemetryConfig,
    init_telemetry,
    shutdown_telemetry,
)

logger = logging.getLogger(__name__)

# Validation error types that mean "value absent" rather than "value wrong"
_MISSING_ERROR_TYPES = {"missing", "string_too_short"}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Application lifespan manager.

    Initializes and shuts down:
    - Structured logging
    - OpenTelemetry (tracing + metrics)
    - The BigCommerce gateway (real or simulated)
    """
    settings = get_settings()

    configure_logging(level=settings.log_level, json_format=settings.log_json)

    logger.info("Starting Checkout Explorer...")

    if settings.service_environment == "production":
        if settings.gateway_mode == "simulated":
            logger.warning(
                "Production: GATEWAY_MODE is simulated; no BigCommerce calls will be made."
            )
        if "*" in settings.cors_origins:
            logger.warning(
                "Production: CORS_ORIGINS allows all origins (*). Restrict to your front-end domains."
            )

    if settings.enable_tracing or settings.enable_metrics:
        telemetry_config = TelemetryConfig(
            service_name=settings.service_name,
            service_version=settings.api_version,
            environment=settings.service_environment,
            otlp_endpoint=settings.otlp_endpoint,
            enable_tracing=settings.enable_tracing,
            enable_metrics=settings.enable_metrics,
        )
        if init_telemetry(telemetry_config):
            logger.info("OpenTelemetry initialized")

    # Tests may install their own gateway before startup
    if getattr(app.state, "gateway", None) is None:
        app.state.gateway = create_gateway(settings)
    logger.info("Gateway ready: %s", app.state.gateway.name)

    yield

    logger.info("Shutting down Checkout Explorer...")
    await app.state.gateway.close()
    app.state.gateway = None

    shutdown_telemetry()
    logger.info("Shutdown complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        description=(
            "BigCommerce checkout explorer. "
            "Inspects checkouts and converts them into orders paid by an external provider."
        ),
        lifespan=lifespan,
    )
    app.state.gateway = None

    @app.exception_handler(CheckoutExplorerError)
    async def checkout_explorer_error_handler(request: Request, exc: CheckoutExplorerError):
        content = {"error": exc.message}
        if exc.details is not None:
            content["details"] = exc.details
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        if all(error["type"] in _MISSING_ERROR_TYPES for error in errors):
            message = "Missing required parameters"
        else:
            message = "Invalid request parameters"
        details = [
            {"field": ".".join(str(part) for part in error["loc"][1:]), "message": error["msg"]}
            for error in errors
        ]
        return JSONResponse(status_code=400, content={"error": message, "details": details})

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestLoggingMiddleware)

    app.include_router(router)
    app.include_router(health_router)

    if settings.enable_tracing:
        FastAPIInstrumentor.instrument_app(app, excluded_urls="health,metrics")

    if settings.enable_metrics:

        @app.get("/metrics", include_in_schema=False)
        async def metrics():
            """Prometheus metrics endpoint."""
            return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "checkout_explorer.api.server:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
