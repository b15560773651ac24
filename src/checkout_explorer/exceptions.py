"""Domain exceptions for the checkout explorer.

These map to consistent HTTP responses when handled by the global exception handler.
"""

from typing import Any


class CheckoutExplorerError(Exception):
    """Base exception for checkout explorer domain errors."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int = 500,
        details: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details


class CheckoutValidationError(CheckoutExplorerError):
    """Raised when required input fields are missing. No remote call is made."""

    def __init__(self, message: str = "Missing required parameters", details: Any = None) -> None:
        super().__init__(message, status_code=400, details=details)


class UpstreamError(CheckoutExplorerError):
    """Raised when BigCommerce answers with a non-2xx status."""

    def __init__(self, message: str, *, status_code: int, body: Any = None) -> None:
        super().__init__(message, status_code=status_code, details=body)
        self.body = body


class UpstreamUnavailableError(UpstreamError):
    """Raised when BigCommerce cannot be reached or does not answer in time."""

    def __init__(self, message: str, *, timed_out: bool = False) -> None:
        super().__init__(message, status_code=504 if timed_out else 502)
        self.timed_out = timed_out


class MalformedResponseError(CheckoutExplorerError):
    """Raised when a 2xx response does not have the expected shape."""

    def __init__(self, message: str, payload: Any = None) -> None:
        super().__init__(message, status_code=502, details=payload)
        self.payload = payload


class MissingOrderIdError(MalformedResponseError):
    """Raised when an order-create response carries no data.id."""

    def __init__(self, payload: Any = None) -> None:
        super().__init__("Order response did not contain an order ID", payload)


class OrderCreationError(UpstreamError):
    """Raised when converting a checkout into an order fails."""


class OrderDetailsUnavailableError(UpstreamError):
    """Raised when the created order cannot be read back."""


class OrderUpdateError(UpstreamError):
    """Raised when payment/status fields cannot be applied to an order."""
