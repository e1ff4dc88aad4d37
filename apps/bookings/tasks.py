"""Celery tasks for the booking domain."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore

from apps.finances.invoices import render_invoice
from apps.notifications.services import send_email_notification

from .models import Booking

logger = logging.getLogger(__name__)


@shared_task(name="bookings.send_booking_invoice")
def send_booking_invoice(booking_id: int) -> bool:
    """Render the invoice of a confirmed booking and email it to the traveller."""

    try:
        booking = Booking.objects.select_related("user").get(pk=booking_id)
    except Booking.DoesNotExist:
        logger.warning("Invoice requested for missing booking %s", booking_id)
        return False

    return send_email_notification(
        recipient_email=booking.user.email,
        subject=f"Your FlyNext invoice for booking {booking.booking_reference}",
        template_name=None,
        context={},
        html_message=render_invoice(booking),
    )
