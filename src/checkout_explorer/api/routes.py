"""BigCommerce proxy routes consumed by the checkout explorer UI."""

from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from checkout_explorer.config import Settings, get_settings
from checkout_explorer.exceptions import MalformedResponseError
from checkout_explorer.flow import (
    FlowLog,
    FlowOrchestrator,
    OrderConverter,
    OrderDetailFetcher,
    OrderUpdater,
    TokenProvider,
)
from checkout_explorer.flow.stages import call_with_timeout
from checkout_explorer.integrations.base import CheckoutGateway
from checkout_explorer.integrations.bigcommerce.mapping import (
    MAX_STATUS_ID,
    MIN_STATUS_ID,
    list_statuses,
)
from checkout_explorer.models.flow import FlowResult
from checkout_explorer.models.order import OrderUpdate, StoreCredentials
from checkout_explorer.summary import CheckoutSummary, summarize_checkout

router = APIRouter(prefix="/api/bigcommerce", tags=["bigcommerce"])
health_router = APIRouter()


def get_gateway(request: Request) -> CheckoutGateway:
    """Gateway created in the application lifespan."""
    return request.app.state.gateway


def get_orchestrator(
    gateway: CheckoutGateway = Depends(get_gateway),
    settings: Settings = Depends(get_settings),
) -> FlowOrchestrator:
    return FlowOrchestrator.from_settings(gateway, settings)


# =========================================================================
# Request / response bodies (camelCase on the wire)
# =========================================================================


class StoreRequest(BaseModel):
    """Credentials every proxy call carries."""

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    store_hash: str = Field(alias="storeHash", min_length=1)
    access_token: str = Field(alias="accessToken", min_length=1)

    @property
    def credentials(self) -> StoreCredentials:
        return StoreCredentials(store_hash=self.store_hash, access_token=self.access_token)


class CheckoutRequest(StoreRequest):
    checkout_id: str = Field(alias="checkoutId", min_length=1)

    model_config = ConfigDict(
        populate_by_name=True,
        coerce_numbers_to_str=True,
        json_schema_extra={"examples": [
            {
                "storeHash": "abc123",
                "accessToken": "xxxxxxxx",
                "checkoutId": "306d57d7-124e-4112-82cd-35e060c0d4d9",
            }
        ]},
    )


class OrderRequest(StoreRequest):
    order_id: str = Field(alias="orderId", min_length=1)


class OrderUpdateRequest(OrderRequest):
    order_data: OrderUpdate = Field(alias="orderData")


class ExternalPaymentRequest(CheckoutRequest):
    """Full flow request. Form values default from settings when omitted."""

    payment_method: str | None = Field(default=None, alias="paymentMethod")
    payment_provider_id: str | None = Field(default=None, alias="paymentProviderId")
    status_id: int | None = Field(
        default=None,
        alias="statusId",
        ge=MIN_STATUS_ID,
        le=MAX_STATUS_ID,
    )
    store_base_url: str | None = Field(default=None, alias="storeBaseUrl")

    def order_update(self, settings: Settings) -> OrderUpdate:
        return OrderUpdate(
            payment_method=self.payment_method or settings.default_payment_method,
            payment_provider_id=self.payment_provider_id or settings.default_payment_provider_id,
            status_id=self.status_id if self.status_id is not None else settings.default_status_id,
        )


class TokenResponse(BaseModel):
    token: str
    source: str
    log: list[str]


class CheckoutSummaryResponse(BaseModel):
    raw: dict[str, Any]
    summary: CheckoutSummary


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    gateway: str


# =========================================================================
# Checkout inspection
# =========================================================================


@router.post("/validate", summary="Validate store credentials")
async def validate_credentials(
    body: StoreRequest,
    gateway: CheckoutGateway = Depends(get_gateway),
) -> JSONResponse:
    """Check the store hash / access token pair against the catalog summary endpoint."""
    if await gateway.validate_credentials(body.credentials):
        return JSONResponse({"success": True})
    return JSONResponse(
        status_code=401,
        content={"success": False, "error": "Invalid store hash or access token"},
    )


@router.post("/checkout", summary="Fetch raw checkout payload")
async def get_checkout(
    body: CheckoutRequest,
    gateway: CheckoutGateway = Depends(get_gateway),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    return await call_with_timeout(
        gateway.get_checkout(body.credentials, body.checkout_id),
        settings.stage_timeout_seconds,
        "Checkout retrieval",
    )


@router.post(
    "/checkout-summary",
    response_model=CheckoutSummaryResponse,
    summary="Fetch checkout with formatted summary",
)
async def get_checkout_summary(
    body: CheckoutRequest,
    gateway: CheckoutGateway = Depends(get_gateway),
    settings: Settings = Depends(get_settings),
) -> CheckoutSummaryResponse:
    raw = await call_with_timeout(
        gateway.get_checkout(body.credentials, body.checkout_id),
        settings.stage_timeout_seconds,
        "Checkout retrieval",
    )
    try:
        summary = summarize_checkout(raw)
    except ValidationError as e:
        raise MalformedResponseError("Checkout response has an unexpected shape", raw) from e
    return CheckoutSummaryResponse(raw=raw, summary=summary)


# =========================================================================
# Flow stages
# =========================================================================


@router.post("/token-generate", response_model=TokenResponse, summary="Generate checkout token")
async def generate_token(
    body: CheckoutRequest,
    gateway: CheckoutGateway = Depends(get_gateway),
    settings: Settings = Depends(get_settings),
) -> TokenResponse:
    """
    Obtain a session token for the checkout.

    Always 200 for valid input: upstream failures yield a synthesized token.
    """
    log = FlowLog(body.checkout_id)
    provider = TokenProvider(gateway, timeout=settings.stage_timeout_seconds)
    token = await provider.provide(body.credentials, body.checkout_id, log)
    return TokenResponse(token=token.value, source=token.source.value, log=log.lines())


@router.post("/order-create", summary="Convert checkout to order")
async def create_order(
    body: CheckoutRequest,
    gateway: CheckoutGateway = Depends(get_gateway),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    log = FlowLog(body.checkout_id)
    converter = OrderConverter(gateway, timeout=settings.stage_timeout_seconds)
    order_id = await converter.convert(body.credentials, body.checkout_id, log)
    return {"data": {"id": order_id}}


@router.post("/order-details", summary="Fetch order details")
async def get_order_details(
    body: OrderRequest,
    gateway: CheckoutGateway = Depends(get_gateway),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    log = FlowLog(order_id=body.order_id)
    fetcher = OrderDetailFetcher(gateway, timeout=settings.stage_timeout_seconds)
    return await fetcher.fetch(body.credentials, body.order_id, log)


@router.post("/order-update", summary="Apply payment and status to an order")
async def update_order(
    body: OrderUpdateRequest,
    gateway: CheckoutGateway = Depends(get_gateway),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    """``status_id`` is passed through as given; range checks belong to the caller."""
    log = FlowLog(order_id=body.order_id)
    updater = OrderUpdater(gateway, timeout=settings.stage_timeout_seconds)
    return await updater.apply(body.credentials, body.order_id, body.order_data, log)


@router.post(
    "/external-payment",
    response_model=FlowResult,
    summary="Run the external payment flow",
    description=(
        "Token -> order creation -> order details -> order update -> confirmation URL. "
        "Returns 200 with the flow result for both completed and failed runs."
    ),
)
async def run_external_payment(
    body: ExternalPaymentRequest,
    orchestrator: FlowOrchestrator = Depends(get_orchestrator),
    settings: Settings = Depends(get_settings),
) -> FlowResult:
    return await orchestrator.run(
        body.credentials,
        body.checkout_id,
        body.order_update(settings),
        store_base_url=body.store_base_url,
    )


# =========================================================================
# Form data
# =========================================================================


@router.get("/order-statuses", summary="List order statuses")
async def get_order_statuses() -> list[dict[str, int | str]]:
    return list_statuses()


@router.get("/payment-defaults", summary="Default external payment form values")
async def get_payment_defaults(settings: Settings = Depends(get_settings)) -> dict[str, Any]:
    return {
        "paymentMethod": settings.default_payment_method,
        "paymentProviderId": settings.default_payment_provider_id,
        "statusId": settings.default_status_id,
        "storeBaseUrl": settings.store_base_url,
    }


@health_router.get("/health", response_model=HealthResponse, summary="Health check")
async def health_check(
    gateway: CheckoutGateway = Depends(get_gateway),
    settings: Settings = Depends(get_settings),
) -> HealthResponse:
    return HealthResponse(status="healthy", version=settings.api_version, gateway=gateway.name)
