"""Pytest configuration and fixtures."""

import os
import sys
from pathlib import Path

import pytest

# Add src to path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

# Set test environment variables
os.environ.setdefault("GATEWAY_MODE", "simulated")
os.environ.setdefault("ENABLE_TRACING", "false")
os.environ.setdefault("ENABLE_METRICS", "false")
os.environ.setdefault("LOG_JSON", "false")
os.environ.setdefault("STORE_BASE_URL", "https://shop.example.com")


CHECKOUT_ID = "306d57d7-124e-4112-82cd-35e060c0d4d9"


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Get the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def checkout_id() -> str:
    return CHECKOUT_ID


@pytest.fixture
def credentials():
    """Store credentials used across tests."""
    from checkout_explorer.models.order import StoreCredentials

    return StoreCredentials(store_hash="abc123", access_token="test-token")


@pytest.fixture
def order_update():
    """Default external payment update."""
    from checkout_explorer.models.order import OrderUpdate

    return OrderUpdate(
        payment_method="ExternalPayment",
        payment_provider_id="transaction_123456789",
        status_id=11,
    )


@pytest.fixture
def flow_body() -> dict:
    """Request body for the external payment endpoint."""
    return {
        "storeHash": "abc123",
        "accessToken": "test-token",
        "checkoutId": CHECKOUT_ID,
        "paymentMethod": "ExternalPayment",
        "paymentProviderId": "transaction_123456789",
        "statusId": 11,
    }
