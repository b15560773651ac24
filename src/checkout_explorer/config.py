"""Configuration management using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # BigCommerce
    bigcommerce_api_url: str = Field(
        default="https://api.bigcommerce.com",
        description="BigCommerce API root (store paths are appended)",
    )
    gateway_mode: Literal["real", "simulated"] = Field(
        default="simulated",
        description="real = call BigCommerce, simulated = local demo responses",
    )

    # Flow
    stage_timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Timeout applied to each remote stage of the checkout flow",
    )
    store_base_url: str = Field(
        default="https://yourstore.example.com",
        description="Storefront URL used to build order confirmation links",
    )
    order_details_required: bool = Field(
        default=True,
        description="Abort the flow when order details cannot be fetched",
    )

    # External payment form defaults
    default_payment_method: str = Field(default="ExternalPayment")
    default_payment_provider_id: str = Field(default="transaction_123456789")
    default_status_id: int = Field(
        default=11,
        description="Default order status after payment (11 = Awaiting Fulfillment)",
    )

    # API Settings
    api_title: str = Field(
        default="Checkout Explorer",
        description="API title",
    )
    api_version: str = Field(
        default="0.1.0",
        description="API version",
    )
    cors_origins: list[str] = Field(
        default=["*"],
        description="Allowed CORS origins",
    )

    # Observability - OpenTelemetry
    otlp_endpoint: str = Field(
        default="http://localhost:4317",
        description="OTLP gRPC endpoint for traces",
    )
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
    )
    log_json: bool = Field(
        default=True,
        description="Enable JSON structured logging",
    )
    enable_tracing: bool = Field(
        default=True,
        description="Enable OpenTelemetry tracing",
    )
    enable_metrics: bool = Field(
        default=True,
        description="Enable Prometheus metrics",
    )
    service_name: str = Field(
        default="checkout-explorer",
        description="Service name for telemetry",
    )
    service_environment: str = Field(
        default="development",
        description="Deployment environment (development, staging, production)",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
