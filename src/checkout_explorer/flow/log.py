"""Append-only audit trail returned with every flow result."""

import logging
from collections.abc import Iterator

from checkout_explorer.models.flow import STAGE_ORDER, FlowStage, LogEntry, LogEvent

logger = logging.getLogger(__name__)

_LEVELS = {
    LogEvent.WARNING: logging.WARNING,
    LogEvent.FALLBACK_USED: logging.WARNING,
    LogEvent.FAILED: logging.ERROR,
}


class FlowLog:
    """
    Ordered log of one flow run.

    Entries can only be appended, and a stage can never log after a later
    stage has. Each entry is mirrored to the module logger.
    """

    def __init__(self, checkout_id: str | None = None, order_id: str | None = None) -> None:
        self.checkout_id = checkout_id
        self.order_id = order_id
        self._entries: list[LogEntry] = []

    def add(self, stage: FlowStage, event: LogEvent, message: str) -> LogEntry:
        if self._entries:
            last = self._entries[-1].stage
            if STAGE_ORDER.index(stage) < STAGE_ORDER.index(last):
                raise ValueError(f"cannot log {stage.value} after {last.value}")

        entry = LogEntry(stage=stage, event=event, message=message)
        self._entries.append(entry)
        logger.log(
            _LEVELS.get(event, logging.INFO),
            "[%s] %s",
            stage.value,
            message,
            extra=self._context(stage, event),
        )
        return entry

    def _context(self, stage: FlowStage, event: LogEvent) -> dict[str, str]:
        context = {"stage": stage.value, "event": event.value}
        if self.checkout_id is not None:
            context["checkout_id"] = self.checkout_id
        if self.order_id is not None:
            context["order_id"] = self.order_id
        return context

    @property
    def entries(self) -> list[LogEntry]:
        return list(self._entries)

    def lines(self) -> list[str]:
        return [str(entry) for entry in self._entries]

    def __iter__(self) -> Iterator[LogEntry]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)
