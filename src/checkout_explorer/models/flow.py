"""Models for the checkout-to-order flow: stages, states, log entries and result."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, computed_field, model_validator

from checkout_explorer.models.order import SessionToken


class FlowStage(str, Enum):
    """Flow stages, in execution order."""

    TOKEN = "token"
    ORDER_CREATE = "order-create"
    ORDER_DETAILS = "order-details"
    ORDER_UPDATE = "order-update"
    CONFIRMATION = "confirmation"


STAGE_ORDER: tuple[FlowStage, ...] = tuple(FlowStage)


class FlowState(str, Enum):
    """Orchestrator state machine.

    Init -> TokenPending -> OrderPending -> DetailsPending -> UpdatePending -> Completed,
    with Failed reachable from every non-terminal state.
    """

    INIT = "init"
    TOKEN_PENDING = "token_pending"
    ORDER_PENDING = "order_pending"
    DETAILS_PENDING = "details_pending"
    UPDATE_PENDING = "update_pending"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (FlowState.COMPLETED, FlowState.FAILED)


class LogEvent(str, Enum):
    """Kind of flow log entry."""

    STARTED = "started"
    SUCCEEDED = "succeeded"
    INFO = "info"
    WARNING = "warning"
    FALLBACK_USED = "fallback_used"
    FAILED = "failed"


class LogEntry(BaseModel):
    """One line of the flow's audit trail."""

    model_config = ConfigDict(frozen=True)

    stage: FlowStage
    event: LogEvent
    message: str

    def __str__(self) -> str:
        return f"[{self.stage.value}] {self.message}"


class FlowFailure(BaseModel):
    """Terminal failure of a flow run."""

    stage: FlowStage
    error: str
    message: str
    status_code: int | None = None
    details: Any = None


class FlowResult(BaseModel):
    """Outcome of one orchestrator invocation.

    Exactly one of ``confirmation_url`` (Completed) or ``failure`` (Failed) is set.
    """

    checkout_id: str
    state: FlowState
    log: list[LogEntry]
    confirmation_url: str | None = None
    failure: FlowFailure | None = None
    token: SessionToken | None = None
    order_id: str | None = None
    order_details: dict[str, Any] | None = None
    updated_order: dict[str, Any] | None = None

    @model_validator(mode="after")
    def _check_terminal_outcome(self) -> "FlowResult":
        if self.state == FlowState.COMPLETED:
            if self.confirmation_url is None or self.failure is not None:
                raise ValueError("completed flow needs a confirmation URL and no failure")
        elif self.state == FlowState.FAILED:
            if self.failure is None or self.confirmation_url is not None:
                raise ValueError("failed flow needs a failure and no confirmation URL")
        else:
            raise ValueError(f"flow result must be terminal, got {self.state.value}")
        return self

    @computed_field  # type: ignore[prop-decorator]
    @property
    def succeeded(self) -> bool:
        return self.state == FlowState.COMPLETED

    @computed_field  # type: ignore[prop-decorator]
    @property
    def order_created_without_update(self) -> bool:
        """An order exists upstream but never received its payment/status update."""
        return self.state == FlowState.FAILED and self.order_id is not None and self.updated_order is None

    def stages_logged(self) -> list[FlowStage]:
        """Distinct stages in the log, in first-appearance order."""
        seen: list[FlowStage] = []
        for entry in self.log:
            if entry.stage not in seen:
                seen.append(entry.stage)
        return seen
