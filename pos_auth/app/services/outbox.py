"""
Outbox and event dispatch.

Use cases publish domain events into a per-request Outbox. Flushing hands
each event, in publish order, to the EventDispatcher, which runs every
handler registered for that event type. A failing handler is logged and
does not stop the remaining handlers or events.
"""

import logging
from typing import Awaitable, Callable, Dict, List, Type

from pos_auth.domain.events import DomainEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[DomainEvent], Awaitable[None]]


class EventDispatcher:
    def __init__(self):
        self._handlers: Dict[Type[DomainEvent], List[EventHandler]] = {}

    def register(self, event_type: Type[DomainEvent], handler: EventHandler) -> None:
        self._handlers.setdefault(event_type, []).append(handler)

    def handlers_for(self, event: DomainEvent) -> List[EventHandler]:
        return list(self._handlers.get(type(event), []))

    async def dispatch(self, event: DomainEvent) -> None:
        for handler in self.handlers_for(event):
            try:
                await handler(event)
            except Exception as e:
                logger.error(
                    f"Handler {getattr(handler, '__name__', handler)!s} failed for "
                    f"{type(event).__name__}: {e}",
                    exc_info=True,
                )


class Outbox:
    def __init__(self, dispatcher: EventDispatcher):
        self.dispatcher = dispatcher
        self._pending: List[DomainEvent] = []

    @property
    def pending(self) -> List[DomainEvent]:
        return list(self._pending)

    def publish(self, event: DomainEvent) -> None:
        self._pending.append(event)

    async def flush(self) -> int:
        """Dispatch everything published so far. Returns number of events."""
        count = 0
        while self._pending:
            event = self._pending.pop(0)
            await self.dispatcher.dispatch(event)
            count += 1
        return count
