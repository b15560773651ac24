"""Platform integrations for checkout data."""

from checkout_explorer.integrations.base import CheckoutGateway

__all__ = ["CheckoutGateway"]
