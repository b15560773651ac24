"""Gateway interface for the BigCommerce calls the explorer makes."""

from abc import ABC, abstractmethod
from typing import Any

from checkout_explorer.models.order import StoreCredentials


class CheckoutGateway(ABC):
    """
    Abstract base class for checkout/order gateways.

    Credentials travel with every call; implementations keep no per-store state,
    so one gateway can serve concurrent flows for different stores.

    Errors:
        UpstreamError: non-2xx response (status and body attached).
        UpstreamUnavailableError: timeout or transport failure.
        MalformedResponseError: 2xx response whose body is not JSON.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Gateway name for logs (e.g., 'bigcommerce', 'simulated')."""
        ...

    @abstractmethod
    async def validate_credentials(self, credentials: StoreCredentials) -> bool:
        """Return True if the store accepts the credentials."""
        ...

    @abstractmethod
    async def get_checkout(self, credentials: StoreCredentials, checkout_id: str) -> dict[str, Any]:
        """Fetch the raw checkout payload."""
        ...

    @abstractmethod
    async def create_checkout_token(self, credentials: StoreCredentials, checkout_id: str) -> Any:
        """Ask the store for a checkout session token. Returns the raw response body."""
        ...

    @abstractmethod
    async def create_order(self, credentials: StoreCredentials, checkout_id: str) -> dict[str, Any]:
        """Convert a checkout into an order. Returns the raw response body."""
        ...

    @abstractmethod
    async def get_order(self, credentials: StoreCredentials, order_id: str) -> dict[str, Any]:
        """Fetch order details."""
        ...

    @abstractmethod
    async def update_order(
        self,
        credentials: StoreCredentials,
        order_id: str,
        order_data: dict[str, Any],
    ) -> dict[str, Any]:
        """Apply fields to an order. Returns the updated order body."""
        ...

    async def close(self) -> None:
        """Release any held resources."""
        return None
