"""The four remote stages of the checkout-to-order flow.

Each stage validates its inputs before any remote call, applies a timeout
to the gateway call, appends to the run's ``FlowLog`` and raises a domain
exception on failure. Only the token stage recovers from upstream errors.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from checkout_explorer.exceptions import (
    CheckoutValidationError,
    MalformedResponseError,
    MissingOrderIdError,
    OrderCreationError,
    OrderDetailsUnavailableError,
    OrderUpdateError,
    UpstreamError,
    UpstreamUnavailableError,
)
from checkout_explorer.flow.log import FlowLog
from checkout_explorer.flow.tokens import decode_token_response, synthesize_fallback_token
from checkout_explorer.integrations.base import CheckoutGateway
from checkout_explorer.integrations.bigcommerce.mapping import get_status_name
from checkout_explorer.models.flow import FlowStage, LogEvent
from checkout_explorer.models.order import OrderUpdate, SessionToken, StoreCredentials, TokenSource
from checkout_explorer.observability.metrics import record_token_fallback

T = TypeVar("T")

DEFAULT_STAGE_TIMEOUT = 20.0


def require_fields(**fields: Any) -> None:
    """Raise CheckoutValidationError naming every empty field."""
    missing = [name for name, value in fields.items() if value is None or value == ""]
    if missing:
        raise CheckoutValidationError(details={"missing": missing})


def require_credentials(credentials: StoreCredentials) -> None:
    require_fields(store_hash=credentials.store_hash, access_token=credentials.access_token)


async def call_with_timeout(call: Awaitable[T], timeout: float, operation: str) -> T:
    """Await a gateway call, turning a timeout into UpstreamUnavailableError."""
    try:
        return await asyncio.wait_for(call, timeout)
    except asyncio.TimeoutError as e:
        raise UpstreamUnavailableError(
            f"{operation} timed out after {timeout}s", timed_out=True
        ) from e


class TokenProvider:
    """
    Obtains a checkout session token.

    Prefers the API; on any upstream failure (non-2xx, timeout, unreachable or
    unrecognized response shape) falls back to a locally synthesized token
    tagged ``TokenSource.LOCALLY_SYNTHESIZED``.
    """

    def __init__(
        self,
        gateway: CheckoutGateway,
        timeout: float = DEFAULT_STAGE_TIMEOUT,
        fallback_factory: Callable[[str], str] = synthesize_fallback_token,
    ) -> None:
        self.gateway = gateway
        self.timeout = timeout
        self.fallback_factory = fallback_factory

    async def provide(
        self,
        credentials: StoreCredentials,
        checkout_id: str,
        log: FlowLog,
    ) -> SessionToken:
        require_credentials(credentials)
        require_fields(checkout_id=checkout_id)

        log.add(FlowStage.TOKEN, LogEvent.STARTED, f"Generating checkout token for checkout {checkout_id}")

        try:
            payload = await call_with_timeout(
                self.gateway.create_checkout_token(credentials, checkout_id),
                self.timeout,
                "Token generation",
            )
            decoded = decode_token_response(payload)
        except UpstreamUnavailableError as e:
            reason = "unavailable"
            log.add(FlowStage.TOKEN, LogEvent.WARNING, f"Token API unreachable: {e.message}")
        except UpstreamError as e:
            reason = "upstream_error"
            log.add(FlowStage.TOKEN, LogEvent.WARNING, f"Token API failed: {e.message}")
        except MalformedResponseError as e:
            reason = "malformed"
            log.add(FlowStage.TOKEN, LogEvent.WARNING, f"Token API response not usable: {e.message}")
        else:
            log.add(
                FlowStage.TOKEN,
                LogEvent.SUCCEEDED,
                f"Token issued by API ({decoded.shape.value} response)",
            )
            return SessionToken(value=decoded.value, source=TokenSource.API_ISSUED, checkout_id=checkout_id)

        record_token_fallback(reason)
        token = SessionToken(
            value=self.fallback_factory(checkout_id),
            source=TokenSource.LOCALLY_SYNTHESIZED,
            checkout_id=checkout_id,
        )
        log.add(FlowStage.TOKEN, LogEvent.FALLBACK_USED, "Using locally synthesized fallback token")
        return token


class OrderConverter:
    """Converts a checkout into an order. Failures are fatal: no order is ever invented."""

    def __init__(self, gateway: CheckoutGateway, timeout: float = DEFAULT_STAGE_TIMEOUT) -> None:
        self.gateway = gateway
        self.timeout = timeout

    async def convert(
        self,
        credentials: StoreCredentials,
        checkout_id: str,
        log: FlowLog,
    ) -> str:
        require_credentials(credentials)
        require_fields(checkout_id=checkout_id)

        log.add(FlowStage.ORDER_CREATE, LogEvent.STARTED, f"Converting checkout {checkout_id} to order")

        try:
            payload = await call_with_timeout(
                self.gateway.create_order(credentials, checkout_id),
                self.timeout,
                "Order creation",
            )
        except UpstreamError as e:
            raise OrderCreationError(
                f"Failed to create order: {e.message}",
                status_code=e.status_code,
                body=e.body,
            ) from e

        order_id = extract_order_id(payload)
        log.add(FlowStage.ORDER_CREATE, LogEvent.SUCCEEDED, f"Order created successfully with ID: {order_id}")
        return order_id


def extract_order_id(payload: Any) -> str:
    """Read ``data.id`` from an order-create response."""
    data = payload.get("data") if isinstance(payload, dict) else None
    order_id = data.get("id") if isinstance(data, dict) else None
    if order_id is None or order_id == "":
        raise MissingOrderIdError(payload)
    return str(order_id)


class OrderDetailFetcher:
    """Reads the new order back. The result is informational; later stages do not consume it."""

    def __init__(self, gateway: CheckoutGateway, timeout: float = DEFAULT_STAGE_TIMEOUT) -> None:
        self.gateway = gateway
        self.timeout = timeout

    async def fetch(
        self,
        credentials: StoreCredentials,
        order_id: str,
        log: FlowLog,
    ) -> dict[str, Any]:
        require_credentials(credentials)
        require_fields(order_id=order_id)

        log.add(FlowStage.ORDER_DETAILS, LogEvent.STARTED, f"Fetching details for order {order_id}")

        try:
            details = await call_with_timeout(
                self.gateway.get_order(credentials, order_id),
                self.timeout,
                "Order details",
            )
        except UpstreamError as e:
            raise OrderDetailsUnavailableError(
                f"Failed to fetch order details: {e.message}",
                status_code=e.status_code,
                body=e.body,
            ) from e

        if not isinstance(details, dict):
            raise MalformedResponseError("Order details response was not an object", details)

        status = details.get("status") or get_status_name(details.get("status_id", -1))
        log.add(
            FlowStage.ORDER_DETAILS,
            LogEvent.SUCCEEDED,
            f"Order {order_id} details retrieved (status: {status})",
        )
        return details


class OrderUpdater:
    """Applies payment method, provider ID and status to the order."""

    def __init__(self, gateway: CheckoutGateway, timeout: float = DEFAULT_STAGE_TIMEOUT) -> None:
        self.gateway = gateway
        self.timeout = timeout

    async def apply(
        self,
        credentials: StoreCredentials,
        order_id: str,
        update: OrderUpdate,
        log: FlowLog,
    ) -> dict[str, Any]:
        require_credentials(credentials)
        require_fields(
            order_id=order_id,
            payment_method=update.payment_method,
            payment_provider_id=update.payment_provider_id,
        )

        log.add(
            FlowStage.ORDER_UPDATE,
            LogEvent.STARTED,
            f"Updating order {order_id}: payment_method={update.payment_method}, "
            f"payment_provider_id={update.payment_provider_id}, "
            f"status_id={update.status_id} ({get_status_name(update.status_id)})",
        )

        try:
            updated = await call_with_timeout(
                self.gateway.update_order(credentials, order_id, update.to_payload()),
                self.timeout,
                "Order update",
            )
        except UpstreamError as e:
            raise OrderUpdateError(
                f"Failed to update order: {e.message}",
                status_code=e.status_code,
                body=e.body,
            ) from e

        log.add(FlowStage.ORDER_UPDATE, LogEvent.SUCCEEDED, "Order updated successfully")
        return updated if isinstance(updated, dict) else {"response": updated}
