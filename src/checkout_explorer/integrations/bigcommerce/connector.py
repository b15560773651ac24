"""BigCommerce REST API gateway for checkouts and orders."""

import logging
from typing import Any

import httpx

from checkout_explorer.exceptions import (
    MalformedResponseError,
    UpstreamError,
    UpstreamUnavailableError,
)
from checkout_explorer.integrations.base import CheckoutGateway
from checkout_explorer.models.order import StoreCredentials
from checkout_explorer.observability.metrics import record_request

logger = logging.getLogger(__name__)


class BigCommerceGateway(CheckoutGateway):
    """
    BigCommerce REST API gateway.

    Uses the V3 API for checkouts (token, order conversion) and the V2 API
    for order details and updates.

    Authentication uses the X-Auth-Token header. The token is sent per request,
    so the shared HTTP client holds no store-specific state.
    """

    def __init__(
        self,
        api_url: str = "https://api.bigcommerce.com",
        timeout: float = 20.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the BigCommerce gateway.

        Args:
            api_url: API root, without the /stores/{hash} suffix.
            timeout: Per-request timeout in seconds.
            transport: Optional httpx transport (tests use httpx.MockTransport).
        """
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def name(self) -> str:
        return "bigcommerce"

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                headers={
                    "Content-Type": "application/json",
                    "Accept": "application/json",
                },
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def store_url(self, store_hash: str, version: str = "v3") -> str:
        return f"{self.api_url}/stores/{store_hash}/{version}"

    async def _request(
        self,
        method: str,
        credentials: StoreCredentials,
        path: str,
        *,
        operation: str,
        version: str = "v3",
        **kwargs: Any,
    ) -> Any:
        """Make an API request and return the decoded JSON body."""
        url = f"{self.store_url(credentials.store_hash, version)}{path}"
        try:
            response = await self.client.request(
                method,
                url,
                headers={"X-Auth-Token": credentials.access_token},
                **kwargs,
            )
        except httpx.TimeoutException as e:
            record_request(operation, "timeout")
            raise UpstreamUnavailableError(
                f"BigCommerce request timed out after {self.timeout}s ({operation})",
                timed_out=True,
            ) from e
        except httpx.TransportError as e:
            record_request(operation, "unreachable")
            raise UpstreamUnavailableError(
                f"BigCommerce unreachable ({operation}): {e}",
            ) from e

        record_request(operation, response.status_code)

        if not response.is_success:
            logger.warning(
                "BigCommerce %s failed: %s %s",
                operation,
                response.status_code,
                response.reason_phrase,
                extra={"operation": operation, "status_code": response.status_code},
            )
            raise UpstreamError(
                f"API Error: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
                body=self._error_body(response),
            )

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponseError(
                f"BigCommerce {operation} response was not valid JSON",
                response.text,
            ) from e

    @staticmethod
    def _error_body(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return response.text or None

    async def validate_credentials(self, credentials: StoreCredentials) -> bool:
        """Check the credentials against the catalog summary endpoint."""
        try:
            await self._request(
                "GET", credentials, "/catalog/summary", operation="validate_credentials"
            )
        except UpstreamUnavailableError:
            raise
        except UpstreamError as e:
            logger.info("Credential check failed for store %s: %s", credentials.store_hash, e.message)
            return False
        return True

    async def get_checkout(self, credentials: StoreCredentials, checkout_id: str) -> dict[str, Any]:
        """Fetch checkout by ID."""
        return await self._request(
            "GET", credentials, f"/checkouts/{checkout_id}", operation="get_checkout"
        )

    async def create_checkout_token(self, credentials: StoreCredentials, checkout_id: str) -> Any:
        """Mint a checkout session token. The API requires an empty JSON body."""
        return await self._request(
            "POST",
            credentials,
            f"/checkouts/{checkout_id}/token",
            operation="create_checkout_token",
            json={},
        )

    async def create_order(self, credentials: StoreCredentials, checkout_id: str) -> dict[str, Any]:
        """Convert the checkout into an order."""
        return await self._request(
            "POST",
            credentials,
            f"/checkouts/{checkout_id}/orders",
            operation="create_order",
        )

    async def get_order(self, credentials: StoreCredentials, order_id: str) -> dict[str, Any]:
        """Fetch order by BigCommerce order ID."""
        return await self._request(
            "GET", credentials, f"/orders/{order_id}", operation="get_order", version="v2"
        )

    async def update_order(
        self,
        credentials: StoreCredentials,
        order_id: str,
        order_data: dict[str, Any],
    ) -> dict[str, Any]:
        """Update order fields (status_id, payment_method, payment_provider_id)."""
        return await self._request(
            "PUT",
            credentials,
            f"/orders/{order_id}",
            operation="update_order",
            version="v2",
            json=order_data,
        )
