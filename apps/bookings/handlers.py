"""Event handlers for booking side effects.

Each handler runs after the booking transaction committed. Failures are
logged by the message bus and never reach the request that caused them.
"""

from __future__ import annotations

import logging

from apps.flights.client import FlightSupplierError, get_client

from .domain.events import BookingCancelled, BookingConfirmed, ComponentCancelled
from .models import Booking, BookingStatus
from .tasks import send_booking_invoice

logger = logging.getLogger(__name__)


def attach_traveller_details(event: BookingConfirmed) -> None:
    """Store passenger and hotel guest details given at checkout."""
    booking = Booking.objects.get(pk=event.booking_id)
    if event.passenger_details:
        booking.flight_bookings.exclude(status=BookingStatus.CANCELLED).update(
            passenger_details=event.passenger_details
        )
    if event.hotel_guest_details:
        booking.hotel_bookings.exclude(status=BookingStatus.CANCELLED).update(
            guest_details=event.hotel_guest_details
        )


def email_invoice(event: BookingConfirmed) -> None:
    send_booking_invoice.delay(event.booking_id)


def _cancel_with_supplier(booking_reference: str, supplier_reference: str, flight_ids: list[str]) -> None:
    try:
        get_client().cancel_booking(supplier_reference, flight_ids)
    except FlightSupplierError as exc:
        logger.warning(
            "Supplier cancellation of %s (booking %s) failed: %s",
            supplier_reference, booking_reference, exc,
        )
        return
    logger.info("Supplier cancelled flights %s for booking %s", flight_ids, booking_reference)


def cancel_supplier_flight(event: ComponentCancelled) -> None:
    if event.component_type != "flight" or not event.supplier_reference:
        return
    _cancel_with_supplier(event.booking_reference, event.supplier_reference, event.flight_ids)


def cancel_supplier_booking(event: BookingCancelled) -> None:
    for item in event.supplier_flights:
        _cancel_with_supplier(event.booking_reference, item["supplier_reference"], item["flight_ids"])


def register_handlers(bus) -> None:
    bus.register_event_handler(BookingConfirmed, attach_traveller_details)
    bus.register_event_handler(BookingConfirmed, email_invoice)
    bus.register_event_handler(ComponentCancelled, cancel_supplier_flight)
    bus.register_event_handler(BookingCancelled, cancel_supplier_booking)
