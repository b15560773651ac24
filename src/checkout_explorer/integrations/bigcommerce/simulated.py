"""
Simulated BigCommerce gateway.

Returns realistic-looking responses without touching the network, so the
external payment flow can be demonstrated against any checkout ID.
Responses mirror the shapes the real API returns.
"""

import asyncio
import logging
import random
from datetime import datetime, timezone
from typing import Any

from checkout_explorer.exceptions import UpstreamError
from checkout_explorer.integrations.base import CheckoutGateway
from checkout_explorer.integrations.bigcommerce.mapping import OrderStatusCode, get_status_name
from checkout_explorer.models.order import StoreCredentials

logger = logging.getLogger(__name__)

_NOTE = "Simulated response for demonstrating the external payment flow"


class SimulatedGateway(CheckoutGateway):
    """
    Simulated gateway.

    Parameters
    ----------
    latency_seconds : float
        Delay added before every response. Default 0.
    token_endpoint_available : bool
        When False the token call answers 503, exercising the fallback token path.
    """

    def __init__(self, latency_seconds: float = 0.0, token_endpoint_available: bool = True) -> None:
        self._latency = latency_seconds
        self._token_available = token_endpoint_available
        logger.info("[SIMULATED] BigCommerce gateway initialised")

    @property
    def name(self) -> str:
        return "simulated"

    async def _pause(self) -> None:
        if self._latency:
            await asyncio.sleep(self._latency)

    async def validate_credentials(self, credentials: StoreCredentials) -> bool:
        await self._pause()
        return bool(credentials.store_hash and credentials.access_token)

    async def get_checkout(self, credentials: StoreCredentials, checkout_id: str) -> dict[str, Any]:
        await self._pause()
        return sample_checkout(checkout_id)

    async def create_checkout_token(self, credentials: StoreCredentials, checkout_id: str) -> Any:
        await self._pause()
        if not self._token_available:
            raise UpstreamError(
                "API Error: 503 Service Unavailable",
                status_code=503,
                body={"title": "Checkout token issuance unavailable"},
            )
        return {"token": f"demo-token-{checkout_id[:8]}", "_note": _NOTE}

    async def create_order(self, credentials: StoreCredentials, checkout_id: str) -> dict[str, Any]:
        await self._pause()
        order_id = random.randint(100000, 999999)
        logger.info("[SIMULATED] Created order %s for checkout %s", order_id, checkout_id)
        return {
            "data": {
                "id": order_id,
                "checkout_id": checkout_id,
                "status": {
                    "id": int(OrderStatusCode.INCOMPLETE),
                    "label": get_status_name(OrderStatusCode.INCOMPLETE),
                },
                "_note": _NOTE,
            },
            "meta": {},
        }

    async def get_order(self, credentials: StoreCredentials, order_id: str) -> dict[str, Any]:
        await self._pause()
        now = datetime.now(timezone.utc).strftime("%a, %d %b %Y %H:%M:%S +0000")
        return {
            "id": _as_int(order_id),
            "status_id": int(OrderStatusCode.INCOMPLETE),
            "status": get_status_name(OrderStatusCode.INCOMPLETE),
            "payment_method": "",
            "payment_provider_id": None,
            "date_created": now,
            "date_modified": now,
            "currency_code": "USD",
            "_note": _NOTE,
        }

    async def update_order(
        self,
        credentials: StoreCredentials,
        order_id: str,
        order_data: dict[str, Any],
    ) -> dict[str, Any]:
        await self._pause()
        return {
            "id": _as_int(order_id),
            "status_id": order_data.get("status_id"),
            "payment_method": order_data.get("payment_method"),
            "payment_provider_id": order_data.get("payment_provider_id"),
            "_note": _NOTE,
        }


def _as_int(value: str) -> int | str:
    return int(value) if value.isdigit() else value


def sample_checkout(checkout_id: str) -> dict[str, Any]:
    """A small but complete checkout payload for the given ID."""
    return {
        "data": {
            "id": checkout_id,
            "cart": {
                "id": checkout_id,
                "customer_id": 0,
                "channel_id": 1,
                "email": "shopper@example.com",
                "currency": {"code": "USD"},
                "base_amount": 59.0,
                "discount_amount": 0,
                "cart_amount_inc_tax": 59.0,
                "cart_amount_ex_tax": 59.0,
                "line_items": {
                    "physical_items": [
                        {
                            "id": "a1b2c3d4-0001",
                            "product_id": 111,
                            "variant_id": 77,
                            "sku": "MUG-BLK",
                            "name": "Enamel Camp Mug",
                            "quantity": 2,
                            "list_price": 17.0,
                            "sale_price": 17.0,
                            "extended_list_price": 34.0,
                            "extended_sale_price": 34.0,
                        }
                    ],
                    "digital_items": [
                        {
                            "id": "a1b2c3d4-0002",
                            "product_id": 112,
                            "sku": "EBOOK-TRAIL",
                            "name": "Trail Cooking eBook",
                            "quantity": 1,
                            "list_price": 25.0,
                            "sale_price": 25.0,
                            "extended_list_price": 25.0,
                            "extended_sale_price": 25.0,
                        }
                    ],
                    "gift_certificates": [],
                    "custom_items": [],
                },
            },
            "billing_address": {
                "first_name": "Jane",
                "last_name": "Doe",
                "email": "shopper@example.com",
                "address1": "1 Main St",
                "city": "Austin",
                "state_or_province": "Texas",
                "country": "United States",
                "country_code": "US",
                "postal_code": "78701",
            },
            "consignments": [
                {
                    "id": "cons-1",
                    "shipping_cost_inc_tax": 5.0,
                    "shipping_cost_ex_tax": 5.0,
                    "handling_cost_inc_tax": 0,
                    "handling_cost_ex_tax": 0,
                    "line_item_ids": ["a1b2c3d4-0001"],
                    "selected_shipping_option": {
                        "id": "ship-flat",
                        "type": "shipping_flatrate",
                        "description": "Flat Rate",
                        "cost": 5.0,
                    },
                }
            ],
            "taxes": [{"name": "Tax", "amount": 0}],
            "coupons": [],
            "shipping_cost_total_inc_tax": 5.0,
            "shipping_cost_total_ex_tax": 5.0,
            "handling_cost_total_inc_tax": 0,
            "handling_cost_total_ex_tax": 0,
            "tax_total": 0,
            "subtotal_inc_tax": 59.0,
            "subtotal_ex_tax": 59.0,
            "grand_total": 64.0,
        },
        "meta": {},
    }
