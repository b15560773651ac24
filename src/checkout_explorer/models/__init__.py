"""Data models for the checkout explorer."""

from checkout_explorer.models.checkout import Checkout, CheckoutData
from checkout_explorer.models.flow import (
    STAGE_ORDER,
    FlowFailure,
    FlowResult,
    FlowStage,
    FlowState,
    LogEntry,
    LogEvent,
)
from checkout_explorer.models.order import (
    OrderUpdate,
    SessionToken,
    StoreCredentials,
    TokenSource,
)

__all__ = [
    "Checkout",
    "CheckoutData",
    "FlowFailure",
    "FlowResult",
    "FlowStage",
    "FlowState",
    "LogEntry",
    "LogEvent",
    "OrderUpdate",
    "STAGE_ORDER",
    "SessionToken",
    "StoreCredentials",
    "TokenSource",
]
