"""BigCommerce integration: real and simulated gateways."""

from checkout_explorer.config import Settings
from checkout_explorer.integrations.base import CheckoutGateway
from checkout_explorer.integrations.bigcommerce.connector import BigCommerceGateway
from checkout_explorer.integrations.bigcommerce.mapping import (
    OrderStatusCode,
    get_status_name,
    list_statuses,
)
from checkout_explorer.integrations.bigcommerce.simulated import SimulatedGateway


def create_gateway(settings: Settings) -> CheckoutGateway:
    """Pick the gateway named by ``settings.gateway_mode``."""
    if settings.gateway_mode == "real":
        return BigCommerceGateway(
            api_url=settings.bigcommerce_api_url,
            timeout=settings.stage_timeout_seconds,
        )
    return SimulatedGateway()


__all__ = [
    "BigCommerceGateway",
    "SimulatedGateway",
    "OrderStatusCode",
    "create_gateway",
    "get_status_name",
    "list_statuses",
]
