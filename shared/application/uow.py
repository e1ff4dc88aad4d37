"""
Unit of Work

Wraps one database transaction and the domain events recorded while it was
open. Events reach the message bus only after the outermost transaction
commits; a rollback discards them.
"""

from typing import List
import logging

from django.db import transaction

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)


class DjangoUnitOfWork:
    """
    Usage:
        with DjangoUnitOfWork() as uow:
            room = lock_room(room_id)
            ... decide and write ...
            uow.record(RoomCapacityReduced(...))
        # RoomCapacityReduced handlers run after commit

    Units of work nest like ``transaction.atomic`` blocks: an inner unit
    schedules its events on the outer transaction's commit.
    """

    def __init__(self, using: str | None = None):
        self.using = using
        self._events: List[DomainEvent] = []
        self._atomic = None

    def __enter__(self):
        self._atomic = transaction.atomic(using=self.using)
        self._atomic.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            if exc_type is None:
                self.commit()
            else:
                self.rollback()
        finally:
            self._atomic.__exit__(exc_type, exc_val, exc_tb)

    def record(self, event: DomainEvent) -> None:
        self._events.append(event)

    def commit(self) -> None:
        events, self._events = self._events, []
        if events:
            logger.debug(f"Scheduling {len(events)} events for after commit")
            transaction.on_commit(lambda: self._publish_events(events), using=self.using)

    def rollback(self) -> None:
        if self._events:
            logger.warning(f"Rolling back transaction, discarding {len(self._events)} events")
        self._events = []

    @staticmethod
    def _publish_events(events: List[DomainEvent]) -> None:
        from shared.application.message_bus import message_bus

        logger.info(f"Publishing {len(events)} domain events after commit")
        message_bus.publish_events(events)
