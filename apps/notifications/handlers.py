"""Event handlers turning domain events into in-app notifications."""

from __future__ import annotations

import logging

from apps.bookings.domain.events import (
    BookingCancelled,
    BookingConfirmed,
    ComponentAddedToCart,
    ComponentCancelled,
)
from apps.bookings.models import Booking
from apps.hotels.domain.events import RoomCapacityReduced
from apps.users.models import CustomUser

from .models import Notification
from .services import create_notification

logger = logging.getLogger(__name__)


def notify_cart_addition(event: ComponentAddedToCart) -> None:
    user = CustomUser.objects.get(pk=event.user_id)
    create_notification(
        user,
        f"Added {event.component_type} ({event.summary}) to booking {event.booking_reference}.",
        Notification.Type.BOOKING_CART_ADDITION,
    )


def notify_traveller_of_confirmation(event: BookingConfirmed) -> None:
    user = CustomUser.objects.get(pk=event.user_id)
    create_notification(
        user,
        f"Your booking {event.booking_reference} is confirmed. The invoice is on its way by email.",
        Notification.Type.BOOKING_CONFIRMATION,
    )


def notify_hotel_owners_of_confirmation(event: BookingConfirmed) -> None:
    booking = Booking.objects.get(pk=event.booking_id)
    stays = booking.active_hotel_bookings().select_related("hotel__owner", "room")
    for stay in stays:
        create_notification(
            stay.hotel.owner,
            f"New booking {event.booking_reference} at {stay.hotel.name}: "
            f"{stay.room.type}, {stay.check_in_date:%Y-%m-%d} to {stay.check_out_date:%Y-%m-%d}.",
            Notification.Type.NEW_BOOKING,
        )


def notify_booking_cancelled(event: BookingCancelled) -> None:
    user = CustomUser.objects.get(pk=event.user_id)
    create_notification(
        user,
        f"Your booking {event.booking_reference} has been cancelled.",
        Notification.Type.BOOKING_CANCELLATION,
    )


def notify_hotel_owners_of_cancellation(event: BookingCancelled) -> None:
    stays = Booking.objects.get(pk=event.booking_id).hotel_bookings.select_related("hotel__owner")
    owners = {stay.hotel.owner_id: stay.hotel for stay in stays}
    for hotel in owners.values():
        if hotel.owner_id == event.cancelled_by_id:
            continue
        create_notification(
            hotel.owner,
            f"Booking {event.booking_reference} at {hotel.name} has been cancelled.",
            Notification.Type.BOOKING_CANCELLATION,
        )


def notify_component_cancelled(event: ComponentCancelled) -> None:
    user = CustomUser.objects.get(pk=event.user_id)
    create_notification(
        user,
        f"A {event.component_type} in booking {event.booking_reference} has been cancelled.",
        Notification.Type.BOOKING_CANCELLATION,
    )


def notify_capacity_cancellations(event: RoomCapacityReduced) -> None:
    """Tell each traveller whose booking was dropped by a room capacity cut."""
    for user in CustomUser.objects.filter(pk__in=event.affected_user_ids):
        create_notification(
            user,
            f"Your stay in a {event.room_type} room at {event.hotel_name} was cancelled "
            f"because the hotel reduced its availability. The whole booking has been cancelled.",
            Notification.Type.CAPACITY_CANCELLATION,
        )
    logger.info(
        "Notified %s traveller(s) about capacity cut on room %s",
        len(event.affected_user_ids), event.room_id,
    )


def register_handlers(bus) -> None:
    bus.register_event_handler(ComponentAddedToCart, notify_cart_addition)
    bus.register_event_handler(BookingConfirmed, notify_traveller_of_confirmation)
    bus.register_event_handler(BookingConfirmed, notify_hotel_owners_of_confirmation)
    bus.register_event_handler(BookingCancelled, notify_booking_cancelled)
    bus.register_event_handler(BookingCancelled, notify_hotel_owners_of_cancellation)
    bus.register_event_handler(ComponentCancelled, notify_component_cancelled)
    bus.register_event_handler(RoomCapacityReduced, notify_capacity_cancellations)
