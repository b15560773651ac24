"""External payment flow: checkout -> token -> order -> details -> update -> confirmation URL."""

import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

from checkout_explorer.config import Settings
from checkout_explorer.exceptions import (
    CheckoutExplorerError,
    MalformedResponseError,
    OrderDetailsUnavailableError,
)
from checkout_explorer.flow.log import FlowLog
from checkout_explorer.flow.stages import (
    DEFAULT_STAGE_TIMEOUT,
    OrderConverter,
    OrderDetailFetcher,
    OrderUpdater,
    TokenProvider,
)
from checkout_explorer.integrations.base import CheckoutGateway
from checkout_explorer.models.flow import FlowFailure, FlowResult, FlowStage, FlowState, LogEvent
from checkout_explorer.models.order import OrderUpdate, SessionToken, StoreCredentials
from checkout_explorer.observability.logging import checkout_context
from checkout_explorer.observability.metrics import record_flow_run, record_stage
from checkout_explorer.observability.tracing import flow_span

logger = logging.getLogger(__name__)

DEFAULT_STORE_BASE_URL = "https://yourstore.example.com"

# Stage executing while the orchestrator sits in each pending state
STAGE_FOR_STATE: dict[FlowState, FlowStage] = {
    FlowState.TOKEN_PENDING: FlowStage.TOKEN,
    FlowState.ORDER_PENDING: FlowStage.ORDER_CREATE,
    FlowState.DETAILS_PENDING: FlowStage.ORDER_DETAILS,
    FlowState.UPDATE_PENDING: FlowStage.ORDER_UPDATE,
}


def build_confirmation_url(store_base_url: str, order_id: str, token: str) -> str:
    """``{store_base_url}/checkout/order-confirmation/{order_id}?t={token}``"""
    return f"{store_base_url.rstrip('/')}/checkout/order-confirmation/{order_id}?t={token}"


@dataclass
class _StageOutcome:
    value: str = "success"


class FlowOrchestrator:
    """
    Runs the external payment flow for one checkout.

    Stages run strictly one after another; the first failure ends the run in
    ``FlowState.FAILED`` with every log line written so far. Nothing is
    retried and nothing created upstream is rolled back.

    The orchestrator keeps no per-run state on the instance, so one instance
    can serve concurrent runs.
    """

    def __init__(
        self,
        gateway: CheckoutGateway,
        *,
        timeout: float = DEFAULT_STAGE_TIMEOUT,
        store_base_url: str = DEFAULT_STORE_BASE_URL,
        order_details_required: bool = True,
        token_provider: TokenProvider | None = None,
    ) -> None:
        self.gateway = gateway
        self.store_base_url = store_base_url
        self.order_details_required = order_details_required
        self.token_provider = token_provider or TokenProvider(gateway, timeout=timeout)
        self.order_converter = OrderConverter(gateway, timeout=timeout)
        self.detail_fetcher = OrderDetailFetcher(gateway, timeout=timeout)
        self.order_updater = OrderUpdater(gateway, timeout=timeout)

    @classmethod
    def from_settings(cls, gateway: CheckoutGateway, settings: Settings) -> "FlowOrchestrator":
        return cls(
            gateway,
            timeout=settings.stage_timeout_seconds,
            store_base_url=settings.store_base_url,
            order_details_required=settings.order_details_required,
        )

    @contextmanager
    def _stage(self, stage: FlowStage, checkout_id: str) -> Iterator[_StageOutcome]:
        outcome = _StageOutcome()
        started = time.perf_counter()
        with flow_span(stage.value, checkout_id=checkout_id):
            try:
                yield outcome
            except Exception:
                outcome.value = "error"
                raise
            finally:
                record_stage(stage.value, time.perf_counter() - started, outcome.value)

    async def run(
        self,
        credentials: StoreCredentials,
        checkout_id: str,
        update: OrderUpdate,
        store_base_url: str | None = None,
    ) -> FlowResult:
        """
        Convert the checkout into an order and mark it paid.

        Returns a FlowResult in state COMPLETED (with confirmation URL) or
        FAILED (with the failing stage and error). Domain errors never escape.
        """
        with checkout_context(checkout_id):
            return await self._run(credentials, checkout_id, update, store_base_url)

    async def _run(
        self,
        credentials: StoreCredentials,
        checkout_id: str,
        update: OrderUpdate,
        store_base_url: str | None,
    ) -> FlowResult:
        log = FlowLog(checkout_id)
        state = FlowState.INIT
        token: SessionToken | None = None
        order_id: str | None = None
        order_details: dict[str, Any] | None = None
        updated_order: dict[str, Any] | None = None

        try:
            state = FlowState.TOKEN_PENDING
            with self._stage(FlowStage.TOKEN, checkout_id) as outcome:
                token = await self.token_provider.provide(credentials, checkout_id, log)
                if token.is_synthesized:
                    outcome.value = "fallback"

            state = FlowState.ORDER_PENDING
            with self._stage(FlowStage.ORDER_CREATE, checkout_id):
                order_id = await self.order_converter.convert(credentials, checkout_id, log)

            state = FlowState.DETAILS_PENDING
            with self._stage(FlowStage.ORDER_DETAILS, checkout_id) as outcome:
                try:
                    order_details = await self.detail_fetcher.fetch(credentials, order_id, log)
                except (OrderDetailsUnavailableError, MalformedResponseError) as e:
                    if self.order_details_required:
                        raise
                    outcome.value = "skipped"
                    log.add(
                        FlowStage.ORDER_DETAILS,
                        LogEvent.WARNING,
                        f"Continuing without order details: {e.message}",
                    )

            state = FlowState.UPDATE_PENDING
            with self._stage(FlowStage.ORDER_UPDATE, checkout_id):
                updated_order = await self.order_updater.apply(credentials, order_id, update, log)
        except CheckoutExplorerError as e:
            return self._fail(
                log,
                STAGE_FOR_STATE[state],
                e,
                checkout_id=checkout_id,
                token=token,
                order_id=order_id,
                order_details=order_details,
            )

        url = build_confirmation_url(store_base_url or self.store_base_url, order_id, token.value)
        log.add(FlowStage.CONFIRMATION, LogEvent.SUCCEEDED, "Flow completed - confirmation URL generated")
        if token.is_synthesized:
            log.add(FlowStage.CONFIRMATION, LogEvent.INFO, "Confirmation URL carries a synthesized token")

        record_flow_run("completed")
        return FlowResult(
            checkout_id=checkout_id,
            state=FlowState.COMPLETED,
            log=log.entries,
            confirmation_url=url,
            token=token,
            order_id=order_id,
            order_details=order_details,
            updated_order=updated_order,
        )

    def _fail(
        self,
        log: FlowLog,
        stage: FlowStage,
        error: CheckoutExplorerError,
        *,
        checkout_id: str,
        token: SessionToken | None,
        order_id: str | None,
        order_details: dict[str, Any] | None,
    ) -> FlowResult:
        log.add(stage, LogEvent.FAILED, f"Error: {error.message}")
        if error.details is not None:
            log.add(stage, LogEvent.FAILED, f"Error details: {error.details}")
        if order_id is not None:
            log.add(
                stage,
                LogEvent.WARNING,
                f"Order {order_id} was created but its payment and status update was not applied",
            )

        record_flow_run("failed", failed_stage=stage.value)
        return FlowResult(
            checkout_id=checkout_id,
            state=FlowState.FAILED,
            log=log.entries,
            failure=FlowFailure(
                stage=stage,
                error=type(error).__name__,
                message=error.message,
                status_code=error.status_code,
                details=error.details,
            ),
            token=token,
            order_id=order_id,
            order_details=order_details,
        )
