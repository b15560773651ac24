"""Checkout-to-order conversion flow."""

from checkout_explorer.flow.log import FlowLog
from checkout_explorer.flow.orchestrator import FlowOrchestrator, build_confirmation_url
from checkout_explorer.flow.stages import (
    OrderConverter,
    OrderDetailFetcher,
    OrderUpdater,
    TokenProvider,
)
from checkout_explorer.flow.tokens import (
    DecodedToken,
    TokenShape,
    decode_token_response,
    synthesize_fallback_token,
)

__all__ = [
    "DecodedToken",
    "FlowLog",
    "FlowOrchestrator",
    "OrderConverter",
    "OrderDetailFetcher",
    "OrderUpdater",
    "TokenProvider",
    "TokenShape",
    "build_confirmation_url",
    "decode_token_response",
    "synthesize_fallback_token",
]
