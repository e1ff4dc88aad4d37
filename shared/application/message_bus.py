"""
Message Bus

Routes domain events to the handlers subscribed to their type. Booking and
inventory services only record events; app configs subscribe the side
effects (supplier cancellation, invoice email, notifications) at startup.
"""

from collections import defaultdict
from typing import Callable, DefaultDict, Iterable, List, Type
import logging

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)

Handler = Callable[[DomainEvent], None]


class MessageBus:
    """
    Events fan out to every subscribed handler (1:N), in subscription order.

    A failing handler is logged and skipped: side effects run after the
    transaction committed and must not undo or block each other.
    """

    def __init__(self):
        self._subscribers: DefaultDict[Type[DomainEvent], List[Handler]] = defaultdict(list)

    def register_event_handler(self, event_type: Type[DomainEvent], handler: Handler) -> None:
        """Subscribe ``handler``; subscribing the same handler twice is a no-op."""
        if handler not in self._subscribers[event_type]:
            self._subscribers[event_type].append(handler)

    def handlers_for(self, event_type: Type[DomainEvent]) -> List[Handler]:
        return list(self._subscribers.get(event_type, ()))

    def publish_events(self, events: Iterable[DomainEvent]) -> None:
        for event in events:
            self._dispatch(event)

    def _dispatch(self, event: DomainEvent) -> None:
        name = type(event).__name__
        handlers = self.handlers_for(type(event))
        if not handlers:
            logger.debug(f"No subscribers for {name}")
            return

        logger.info(f"Dispatching {name} ({event.event_id}) to {len(handlers)} handler(s)")
        for handler in handlers:
            try:
                handler(event)
            except Exception:
                logger.exception(f"Handler {handler.__name__} failed for {name} ({event.event_id})")


message_bus = MessageBus()
