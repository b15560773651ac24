"""Unit tests for the BigCommerce gateway."""

import json

import httpx
import pytest

from checkout_explorer.exceptions import (
    MalformedResponseError,
    UpstreamError,
    UpstreamUnavailableError,
)
from checkout_explorer.integrations.bigcommerce.connector import BigCommerceGateway


def make_gateway(handler, recorded: list | None = None) -> BigCommerceGateway:
    """Gateway whose HTTP traffic is answered by ``handler``."""

    def transport_handler(request: httpx.Request) -> httpx.Response:
        if recorded is not None:
            recorded.append(request)
        return handler(request)

    return BigCommerceGateway(
        api_url="https://api.bigcommerce.test/",
        timeout=5.0,
        transport=httpx.MockTransport(transport_handler),
    )


class TestBigCommerceGatewayInit:
    """Tests for gateway construction."""

    def test_init(self):
        """Test gateway initialization strips the trailing slash."""
        gateway = BigCommerceGateway(api_url="https://api.bigcommerce.com/")
        assert gateway.api_url == "https://api.bigcommerce.com"
        assert gateway.name == "bigcommerce"

    def test_store_url(self):
        """Test store URL per API version."""
        gateway = BigCommerceGateway(api_url="https://api.bigcommerce.com")
        assert gateway.store_url("abc123") == "https://api.bigcommerce.com/stores/abc123/v3"
        assert gateway.store_url("abc123", "v2") == "https://api.bigcommerce.com/stores/abc123/v2"

    @pytest.mark.asyncio
    async def test_close_resets_client(self):
        """Test close releases the lazily created client."""
        gateway = make_gateway(lambda request: httpx.Response(200, json={}))
        assert gateway.client is gateway.client
        await gateway.close()
        assert gateway._client is None


class TestBigCommerceGatewayRequests:
    """Tests for endpoint paths, methods and headers."""

    @pytest.mark.asyncio
    async def test_create_checkout_token(self, credentials, checkout_id):
        """Token request posts an empty JSON object to the v3 token endpoint."""
        recorded: list[httpx.Request] = []
        gateway = make_gateway(lambda r: httpx.Response(200, json={"token": "tok"}), recorded)

        payload = await gateway.create_checkout_token(credentials, checkout_id)

        assert payload == {"token": "tok"}
        request = recorded[0]
        assert request.method == "POST"
        assert str(request.url) == (
            f"https://api.bigcommerce.test/stores/abc123/v3/checkouts/{checkout_id}/token"
        )
        assert request.headers["X-Auth-Token"] == "test-token"
        assert request.headers["Accept"] == "application/json"
        assert json.loads(request.content) == {}

    @pytest.mark.asyncio
    async def test_create_order(self, credentials, checkout_id):
        """Order creation posts to the v3 checkout orders endpoint."""
        recorded: list[httpx.Request] = []
        gateway = make_gateway(lambda r: httpx.Response(200, json={"data": {"id": 42}}), recorded)

        payload = await gateway.create_order(credentials, checkout_id)

        assert payload["data"]["id"] == 42
        assert recorded[0].method == "POST"
        assert recorded[0].url.path == f"/stores/abc123/v3/checkouts/{checkout_id}/orders"

    @pytest.mark.asyncio
    async def test_get_order_uses_v2(self, credentials):
        """Order details come from the v2 orders endpoint."""
        recorded: list[httpx.Request] = []
        gateway = make_gateway(lambda r: httpx.Response(200, json={"id": 42, "status_id": 0}), recorded)

        details = await gateway.get_order(credentials, "42")

        assert details["status_id"] == 0
        assert recorded[0].method == "GET"
        assert recorded[0].url.path == "/stores/abc123/v2/orders/42"

    @pytest.mark.asyncio
    async def test_update_order_sends_fields(self, credentials):
        """Order update PUTs the payment and status fields to v2."""
        recorded: list[httpx.Request] = []
        gateway = make_gateway(lambda r: httpx.Response(200, json={"id": 42, "status_id": 11}), recorded)

        await gateway.update_order(
            credentials,
            "42",
            {"payment_method": "ExternalPayment", "payment_provider_id": "txn_1", "status_id": 11},
        )

        request = recorded[0]
        assert request.method == "PUT"
        assert request.url.path == "/stores/abc123/v2/orders/42"
        assert json.loads(request.content) == {
            "payment_method": "ExternalPayment",
            "payment_provider_id": "txn_1",
            "status_id": 11,
        }

    @pytest.mark.asyncio
    async def test_get_checkout(self, credentials, checkout_id):
        """Checkout is fetched from v3."""
        recorded: list[httpx.Request] = []
        gateway = make_gateway(lambda r: httpx.Response(200, json={"data": {"id": checkout_id}}), recorded)

        payload = await gateway.get_checkout(credentials, checkout_id)

        assert payload["data"]["id"] == checkout_id
        assert recorded[0].url.path == f"/stores/abc123/v3/checkouts/{checkout_id}"


class TestBigCommerceGatewayErrors:
    """Tests for upstream failure handling."""

    @pytest.mark.asyncio
    async def test_non_success_raises_upstream_error(self, credentials, checkout_id):
        """Non-2xx statuses are mirrored with the upstream body."""
        gateway = make_gateway(
            lambda r: httpx.Response(422, json={"title": "Checkout is incomplete"})
        )

        with pytest.raises(UpstreamError) as exc_info:
            await gateway.create_order(credentials, checkout_id)

        assert exc_info.value.status_code == 422
        assert exc_info.value.message == "API Error: 422 Unprocessable Entity"
        assert exc_info.value.body == {"title": "Checkout is incomplete"}

    @pytest.mark.asyncio
    async def test_text_error_body(self, credentials):
        """Non-JSON error bodies are kept as text."""
        gateway = make_gateway(lambda r: httpx.Response(500, text="boom"))

        with pytest.raises(UpstreamError) as exc_info:
            await gateway.get_order(credentials, "42")

        assert exc_info.value.status_code == 500
        assert exc_info.value.details == "boom"

    @pytest.mark.asyncio
    async def test_timeout_raises_unavailable(self, credentials, checkout_id):
        """Client timeouts become a 504 UpstreamUnavailableError."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        gateway = make_gateway(handler)

        with pytest.raises(UpstreamUnavailableError) as exc_info:
            await gateway.create_checkout_token(credentials, checkout_id)

        assert exc_info.value.timed_out is True
        assert exc_info.value.status_code == 504

    @pytest.mark.asyncio
    async def test_connection_error_raises_unavailable(self, credentials, checkout_id):
        """Connection failures become a 502 UpstreamUnavailableError."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        gateway = make_gateway(handler)

        with pytest.raises(UpstreamUnavailableError) as exc_info:
            await gateway.create_order(credentials, checkout_id)

        assert exc_info.value.timed_out is False
        assert exc_info.value.status_code == 502

    @pytest.mark.asyncio
    async def test_invalid_json_raises_malformed(self, credentials):
        """A 2xx body that is not JSON is a malformed response."""
        gateway = make_gateway(lambda r: httpx.Response(200, text="<html>"))

        with pytest.raises(MalformedResponseError):
            await gateway.get_order(credentials, "42")

    @pytest.mark.asyncio
    async def test_empty_body_returns_empty_dict(self, credentials):
        """204 / empty bodies decode to an empty dict."""
        gateway = make_gateway(lambda r: httpx.Response(204))

        assert await gateway.update_order(credentials, "42", {"status_id": 11}) == {}


class TestBigCommerceCredentialValidation:
    """Tests for credential validation."""

    @pytest.mark.asyncio
    async def test_valid_credentials(self, credentials):
        """Test 200 from the catalog summary means valid credentials."""
        recorded: list[httpx.Request] = []
        gateway = make_gateway(lambda r: httpx.Response(200, json={"data": {}}), recorded)

        assert await gateway.validate_credentials(credentials) is True
        assert recorded[0].url.path == "/stores/abc123/v3/catalog/summary"

    @pytest.mark.asyncio
    async def test_invalid_credentials(self, credentials):
        """Test 401 from the catalog summary means invalid credentials."""
        gateway = make_gateway(lambda r: httpx.Response(401, json={"title": "Unauthorized"}))

        assert await gateway.validate_credentials(credentials) is False

    @pytest.mark.asyncio
    async def test_unreachable_is_not_a_rejection(self, credentials):
        """Outages propagate instead of reporting bad credentials."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        gateway = make_gateway(handler)

        with pytest.raises(UpstreamUnavailableError):
            await gateway.validate_credentials(credentials)
