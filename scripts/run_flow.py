#!/usr/bin/env python
"""Run the external payment flow for one checkout and print the flow log."""

import argparse
import asyncio
import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from checkout_explorer.config import get_settings
from checkout_explorer.exceptions import CheckoutExplorerError
from checkout_explorer.flow import FlowOrchestrator
from checkout_explorer.integrations.bigcommerce import create_gateway, get_status_name
from checkout_explorer.integrations.bigcommerce.mapping import MAX_STATUS_ID, MIN_STATUS_ID
from checkout_explorer.models.order import OrderUpdate, StoreCredentials
from checkout_explorer.observability.logging import configure_logging
from checkout_explorer.summary import summarize_checkout


async def main() -> int:
    settings = get_settings()

    parser = argparse.ArgumentParser(description="Convert a BigCommerce checkout into a paid order")
    parser.add_argument("--store-hash", required=True, help="Store hash (e.g. abc123)")
    parser.add_argument("--access-token", required=True, help="API account access token")
    parser.add_argument("--checkout-id", required=True, help="Checkout ID")
    parser.add_argument("--payment-method", default=settings.default_payment_method)
    parser.add_argument("--payment-provider-id", default=settings.default_payment_provider_id)
    parser.add_argument(
        "--status-id",
        type=int,
        choices=range(MIN_STATUS_ID, MAX_STATUS_ID + 1),
        default=settings.default_status_id,
        metavar=f"{{{MIN_STATUS_ID}..{MAX_STATUS_ID}}}",
        help=f"Order status after payment (default: {settings.default_status_id}, "
        f"{get_status_name(settings.default_status_id)})",
    )
    parser.add_argument("--store-base-url", default=settings.store_base_url)
    parser.add_argument(
        "--gateway",
        choices=["real", "simulated"],
        default=settings.gateway_mode,
        help=f"Gateway to use (default: {settings.gateway_mode})",
    )
    parser.add_argument("--summary", action="store_true", help="Print the checkout summary first")
    args = parser.parse_args()

    configure_logging(level="WARNING", json_format=False)

    gateway = create_gateway(settings.model_copy(update={"gateway_mode": args.gateway}))

    credentials = StoreCredentials(store_hash=args.store_hash, access_token=args.access_token)
    update = OrderUpdate(
        payment_method=args.payment_method,
        payment_provider_id=args.payment_provider_id,
        status_id=args.status_id,
    )

    try:
        if args.summary:
            try:
                checkout = await gateway.get_checkout(credentials, args.checkout_id)
            except CheckoutExplorerError as e:
                print(f"Could not load checkout: {e.message}", file=sys.stderr)
                return 1
            summary = summarize_checkout(checkout)
            print(json.dumps(summary.model_dump(), indent=2))

        orchestrator = FlowOrchestrator.from_settings(gateway, settings)
        result = await orchestrator.run(
            credentials,
            args.checkout_id,
            update,
            store_base_url=args.store_base_url,
        )
    finally:
        await gateway.close()

    for line in (str(entry) for entry in result.log):
        print(line)

    if result.succeeded:
        print(f"\nConfirmation URL: {result.confirmation_url}")
        return 0

    print(f"\nFlow failed at {result.failure.stage.value}: {result.failure.message}", file=sys.stderr)
    if result.order_created_without_update:
        print(f"Order {result.order_id} exists but was not updated", file=sys.stderr)
    return 1


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
