"""Domain services for booking workflows.

The open cart is the user's single PENDING booking. Components are merged
into it under a row lock; hotel stays additionally lock their room and
re-validate availability before anything is written.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date
from decimal import Decimal
from typing import Any

from django.db import IntegrityError, transaction  # type: ignore
from django.utils.dateparse import parse_datetime  # type: ignore
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError  # type: ignore

from apps.flights.client import FlightSupplierError, get_client
from apps.hotels.models import Room
from apps.hotels.services import ensure_room_is_available, lock_queryset_if_possible, lock_room
from apps.users.permissions import is_platform_admin
from shared.application.uow import DjangoUnitOfWork
from shared.domain.value_objects import DateRange

from .domain.events import BookingCancelled, ComponentAddedToCart, ComponentCancelled
from .exceptions import SupplierUnavailable
from .models import Booking, BookingStatus, FlightBooking, HotelBooking

logger = logging.getLogger(__name__)

COMPONENT_FLIGHT = "flight"
COMPONENT_HOTEL = "hotel"


def lock_open_cart(user, *, currency: str = "USD") -> Booking:
    """
    Return the user's PENDING booking, locked, creating it if needed.

    Must run inside a transaction. A concurrent request creating the same
    cart trips the one-open-cart constraint; the loser re-reads the winner's.
    """
    cart = lock_queryset_if_possible(
        Booking.objects.filter(user=user, status=BookingStatus.PENDING)
    ).first()
    if cart is not None:
        return cart

    try:
        with transaction.atomic():
            cart = Booking.objects.create(user=user, currency=currency)
    except IntegrityError:
        cart = lock_queryset_if_possible(
            Booking.objects.filter(user=user, status=BookingStatus.PENDING)
        ).get()
        return cart

    logger.info("Opened cart %s for user %s", cart.booking_reference, user.pk)
    return cart


def get_cart(user) -> Booking | None:
    return (
        Booking.objects.filter(user=user, status=BookingStatus.PENDING)
        .prefetch_related("hotel_bookings__room", "hotel_bookings__hotel", "flight_bookings")
        .first()
    )


def add_hotel_to_cart(
    user,
    *,
    room_id: int,
    check_in: date,
    check_out: date,
    guest_count: int = 1,
    guest_details: dict | None = None,
) -> Booking:
    """
    Add a stay to the user's cart.

    Raises BookingConflictError (409) when the room is full on any night;
    nothing is written in that case.
    """
    stay = DateRange(check_in, check_out)

    with DjangoUnitOfWork() as uow:
        try:
            room = lock_room(room_id)
        except Room.DoesNotExist:
            raise NotFound("Room not found.")

        ensure_room_is_available(room, stay, guest_count)

        cart = lock_open_cart(user, currency=room.currency)
        hotel_booking = HotelBooking.objects.create(
            booking=cart,
            hotel_id=room.hotel_id,
            room=room,
            check_in_date=check_in,
            check_out_date=check_out,
            guest_count=guest_count,
            price=room.price * len(stay),
            currency=room.currency,
            status=BookingStatus.PENDING,
            guest_details=guest_details,
        )
        cart.recalculate_total()

        logger.info(
            "Added hotel booking %s (room %s, %s) to cart %s",
            hotel_booking.pk, room.pk, stay, cart.booking_reference,
        )
        uow.record(ComponentAddedToCart(
            booking_id=cart.pk,
            user_id=user.pk,
            booking_reference=cart.booking_reference,
            component_type=COMPONENT_HOTEL,
            summary=f"{room.type} at {room.hotel.name}, {stay}",
        ))

    return cart


def _supplier_value(value: Any, key: str) -> str:
    """Supplier fields are either plain strings or nested objects."""
    if isinstance(value, dict):
        return str(value.get(key) or value.get("name") or "")
    return str(value or "")


def _supplier_time(value: Any):
    parsed = parse_datetime(str(value or ""))
    if parsed is None:
        raise SupplierUnavailable("Flight supplier returned malformed flight times.")
    return parsed


def add_flights_to_cart(user, *, flight_ids: list[str], passenger: dict) -> Booking:
    """
    Ticket flights with the supplier and merge the segments into the cart.

    The supplier is called exactly once, before any lock is taken. Segments
    of one itinerary share a connection group.
    """
    try:
        confirmation = get_client().book_flights(passenger, flight_ids)
    except FlightSupplierError as exc:
        logger.warning("Supplier booking failed for user %s: %s", user.pk, exc)
        raise SupplierUnavailable() from exc

    segments = confirmation.get("flights") or []
    if not segments:
        raise SupplierUnavailable("Flight supplier returned no flights.")

    supplier_reference = str(confirmation.get("bookingReference", ""))
    total_segments = len(segments)
    group_id = uuid.uuid4() if total_segments > 1 else None

    with DjangoUnitOfWork() as uow:
        cart = lock_open_cart(user, currency=segments[0].get("currency") or "USD")
        for index, segment in enumerate(segments):
            FlightBooking.objects.create(
                booking=cart,
                flight_id=str(segment.get("id", "")),
                flight_number=str(segment.get("flightNumber", "")),
                airline=_supplier_value(segment.get("airline"), "name"),
                origin=_supplier_value(segment.get("origin"), "code"),
                destination=_supplier_value(segment.get("destination"), "code"),
                departure_time=_supplier_time(segment.get("departureTime")),
                arrival_time=_supplier_time(segment.get("arrivalTime")),
                price=Decimal(str(segment.get("price", "0"))),
                currency=segment.get("currency") or cart.currency,
                status=BookingStatus.PENDING,
                supplier_reference=supplier_reference,
                connection_group_id=group_id,
                segment_index=index if group_id else None,
                total_segments=total_segments if group_id else None,
                passenger_details=passenger,
            )
        cart.recalculate_total()

        first, last = segments[0], segments[-1]
        logger.info(
            "Added %s flight segment(s) (supplier ref %s) to cart %s",
            total_segments, supplier_reference, cart.booking_reference,
        )
        uow.record(ComponentAddedToCart(
            booking_id=cart.pk,
            user_id=user.pk,
            booking_reference=cart.booking_reference,
            component_type=COMPONENT_FLIGHT,
            summary=(
                f"{_supplier_value(first.get('origin'), 'code')} to "
                f"{_supplier_value(last.get('destination'), 'code')}"
            ),
        ))

    return cart


def can_manage_booking(user, booking: Booking) -> bool:
    """Owner, administrator, or the owner of any hotel in the booking."""
    if not user or not user.is_authenticated:
        return False
    if booking.user_id == user.id or is_platform_admin(user):
        return True
    return booking.hotel_bookings.filter(hotel__owner=user).exists()


def _get_booking_for_update(booking_id) -> Booking:
    try:
        return lock_queryset_if_possible(Booking.objects.filter(pk=booking_id)).get()
    except Booking.DoesNotExist:
        raise NotFound("Booking not found.")


def cancel_booking(booking_id, actor) -> Booking:
    """Cancel a booking and all its components."""

    with DjangoUnitOfWork() as uow:
        booking = _get_booking_for_update(booking_id)
        if not can_manage_booking(actor, booking):
            raise PermissionDenied("You cannot cancel this booking.")
        if booking.is_cancelled:
            raise ValidationError("Booking is already cancelled.")

        supplier_flights = _active_supplier_flights(booking.active_flight_bookings())
        booking.mark_cancelled()

        logger.info("Booking %s cancelled by user %s", booking.booking_reference, actor.pk)
        uow.record(BookingCancelled(
            booking_id=booking.pk,
            user_id=booking.user_id,
            booking_reference=booking.booking_reference,
            cancelled_by_id=actor.pk,
            supplier_flights=supplier_flights,
        ))

    return booking


def _active_supplier_flights(flights) -> list[dict]:
    grouped: dict[str, list[str]] = {}
    for flight in flights:
        if flight.supplier_reference:
            grouped.setdefault(flight.supplier_reference, []).append(flight.flight_id)
    return [
        {"supplier_reference": reference, "flight_ids": ids}
        for reference, ids in grouped.items()
    ]


def cancel_component(booking_id, actor, *, component_type: str, component_id) -> Booking:
    """
    Cancel one flight segment or hotel stay.

    Only the component changes; the booking keeps its status and its total
    is recomputed.
    """
    if component_type not in (COMPONENT_FLIGHT, COMPONENT_HOTEL):
        raise ValidationError({"component_type": "Must be 'flight' or 'hotel'."})

    with DjangoUnitOfWork() as uow:
        booking = _get_booking_for_update(booking_id)
        if not can_manage_booking(actor, booking):
            raise PermissionDenied("You cannot modify this booking.")
        if booking.is_cancelled:
            raise ValidationError("Booking is already cancelled.")

        model = FlightBooking if component_type == COMPONENT_FLIGHT else HotelBooking
        component = model.objects.filter(pk=component_id, booking=booking).first()
        if component is None:
            raise NotFound("Component not found in this booking.")
        if component.status == BookingStatus.CANCELLED:
            raise ValidationError("Component is already cancelled.")

        component.status = BookingStatus.CANCELLED
        component.save(update_fields=["status", "updated_at"])
        booking.recalculate_total()

        logger.info(
            "Cancelled %s component %s of booking %s",
            component_type, component.pk, booking.booking_reference,
        )
        uow.record(ComponentCancelled(
            booking_id=booking.pk,
            user_id=booking.user_id,
            booking_reference=booking.booking_reference,
            component_type=component_type,
            component_id=component.pk,
            supplier_reference=getattr(component, "supplier_reference", ""),
            flight_ids=[component.flight_id] if component_type == COMPONENT_FLIGHT else [],
        ))

    return booking
