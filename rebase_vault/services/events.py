"""
Event log.

Events emitted inside an operation are held back until the outermost
operation commits; a rollback discards them.
"""

from collections.abc import Callable
from typing import TypeVar

from loguru import logger

from rebase_vault.models.events import LedgerEvent


EventT = TypeVar("EventT", bound=LedgerEvent)
Subscriber = Callable[[LedgerEvent], None]


class EventLog:
    """Buffered, ordered record of committed ledger events."""

    def __init__(self) -> None:
        self._committed: list[LedgerEvent] = []
        self._pending: list[LedgerEvent] = []
        self._subscribers: list[Subscriber] = []
        self._depth = 0

    @property
    def events(self) -> list[LedgerEvent]:
        """Committed events, oldest first."""
        return list(self._committed)

    def of_type(self, event_type: type[EventT]) -> list[EventT]:
        return [e for e in self._committed if isinstance(e, event_type)]

    def subscribe(self, callback: Subscriber) -> None:
        """Register a callback invoked for every committed event."""
        self._subscribers.append(callback)

    def emit(self, event: LedgerEvent) -> None:
        self._pending.append(event)
        if self._depth == 0:
            self._publish()

    def begin(self) -> int:
        """Open a nesting level; returns a mark for rollback."""
        self._depth += 1
        return len(self._pending)

    def commit(self) -> None:
        self._depth -= 1
        if self._depth == 0:
            self._publish()

    def rollback(self, mark: int) -> None:
        """Drop events emitted since mark and close the level."""
        discarded = len(self._pending) - mark
        del self._pending[mark:]
        self._depth -= 1
        if discarded:
            logger.debug(f"Discarded {discarded} uncommitted event(s)")
        if self._depth == 0:
            self._publish()

    def _publish(self) -> None:
        pending, self._pending = self._pending, []
        for event in pending:
            self._committed.append(event)
            logger.info(
                f"Event {event.name}",
                extra={"event": event.model_dump()},
            )
            for callback in self._subscribers:
                try:
                    callback(event)
                except Exception as e:
                    # committed state stays; listener errors are only logged
                    logger.exception(
                        f"Event subscriber failed for {event.name}: {e}"
                    )
