"""Order status catalogue for BigCommerce orders."""

from enum import IntEnum

# BigCommerce uses numeric status IDs
# See: https://developer.bigcommerce.com/docs/rest-management/orders#order-status-codes


class OrderStatusCode(IntEnum):
    """The fifteen BigCommerce order statuses."""

    INCOMPLETE = 0
    PENDING = 1
    SHIPPED = 2
    PARTIALLY_SHIPPED = 3
    REFUNDED = 4
    CANCELLED = 5
    DECLINED = 6
    AWAITING_PAYMENT = 7
    AWAITING_PICKUP = 8
    AWAITING_SHIPMENT = 9
    COMPLETED = 10
    AWAITING_FULFILLMENT = 11
    MANUAL_VERIFICATION_REQUIRED = 12
    DISPUTED = 13
    PARTIALLY_REFUNDED = 14


# Human-readable status names
BIGCOMMERCE_STATUS_NAMES: dict[int, str] = {
    0: "Incomplete",
    1: "Pending",
    2: "Shipped",
    3: "Partially Shipped",
    4: "Refunded",
    5: "Cancelled",
    6: "Declined",
    7: "Awaiting Payment",
    8: "Awaiting Pickup",
    9: "Awaiting Shipment",
    10: "Completed",
    11: "Awaiting Fulfillment",
    12: "Manual Verification Required",
    13: "Disputed",
    14: "Partially Refunded",
}

MIN_STATUS_ID = min(BIGCOMMERCE_STATUS_NAMES)
MAX_STATUS_ID = max(BIGCOMMERCE_STATUS_NAMES)


def get_status_name(status_id: int) -> str:
    """
    Get human-readable status name from status ID.

    Args:
        status_id: BigCommerce numeric status ID.

    Returns:
        Human-readable status name.
    """
    return BIGCOMMERCE_STATUS_NAMES.get(status_id, f"Unknown ({status_id})")


def is_known_status(status_id: int) -> bool:
    """True for the fifteen catalogued status IDs."""
    return status_id in BIGCOMMERCE_STATUS_NAMES


def list_statuses() -> list[dict[str, int | str]]:
    """Status catalogue as ``[{"id": 0, "name": "Incomplete"}, ...]`` for form selects."""
    return [{"id": status_id, "name": name} for status_id, name in BIGCOMMERCE_STATUS_NAMES.items()]
