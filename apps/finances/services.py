"""Checkout settlement.

Settling confirms a PENDING booking: the card is validated, every hotel stay
is re-checked against current room capacity and the Payment row is upserted,
all inside one transaction. Invoice email and notifications follow after
commit through the ``BookingConfirmed`` event.
"""

from __future__ import annotations

import logging

from django.utils import timezone  # type: ignore
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError  # type: ignore

from apps.bookings.domain.events import BookingConfirmed
from apps.bookings.models import Booking, BookingStatus
from apps.hotels.services import ensure_booking_stays_available
from apps.users.permissions import is_platform_admin
from shared.application.uow import DjangoUnitOfWork

from .cards import CardValidationError, validate_card
from .models import Payment

logger = logging.getLogger(__name__)


def settle_booking(
    booking_id,
    actor,
    *,
    card_number: str,
    expiry_month,
    expiry_year,
    cvc: str,
    cardholder_name: str,
    passenger_details: dict | None = None,
    hotel_guest_details: dict | None = None,
) -> tuple[Booking, Payment]:
    """
    Pay for and confirm a booking.

    Raises ValidationError for bad card details before anything is read or
    written, BookingConflictError when a stay no longer fits its room.
    """
    try:
        card = validate_card(card_number, expiry_month, expiry_year, cvc)
    except CardValidationError as exc:
        raise ValidationError({"card": [str(exc)]})

    booking = Booking.objects.filter(pk=booking_id).first()
    if booking is None:
        raise NotFound("Booking not found.")
    if booking.user_id != actor.pk and not is_platform_admin(actor):
        raise PermissionDenied("You cannot check out this booking.")

    with DjangoUnitOfWork() as uow:
        # Rooms before the booking row, the same order reconciliation uses.
        ensure_booking_stays_available(booking)
        booking = Booking.objects.select_for_update().get(pk=booking_id)

        if booking.status == BookingStatus.CANCELLED:
            raise ValidationError("Cancelled bookings cannot be checked out.")
        if not (booking.active_hotel_bookings().exists() or booking.active_flight_bookings().exists()):
            raise ValidationError("Booking has nothing to pay for.")

        amount = booking.recalculate_total()
        payment, created = Payment.objects.update_or_create(
            booking=booking,
            defaults={
                "card_last4": card.last4,
                "card_type": card.card_type,
                "cardholder_name": cardholder_name,
                "payment_status": Payment.Status.COMPLETED,
                "amount": amount,
                "currency": booking.currency,
                "paid_at": timezone.now(),
            },
        )
        booking.mark_confirmed()

        logger.info(
            "Booking %s settled (%s payment %s, %s %s)",
            booking.booking_reference, "new" if created else "updated",
            payment.pk, amount, booking.currency,
        )
        uow.record(BookingConfirmed(
            booking_id=booking.pk,
            user_id=booking.user_id,
            booking_reference=booking.booking_reference,
            passenger_details=passenger_details,
            hotel_guest_details=hotel_guest_details,
        ))

    return booking, payment
