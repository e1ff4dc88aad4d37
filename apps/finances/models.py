"""Financial domain models for FlyNext."""

from __future__ import annotations

from decimal import Decimal

from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Payment(models.Model):
    """Card payment settling a booking. One per booking, replaced on re-checkout."""

    class Status(models.TextChoices):
        PENDING = "PENDING", _("Pending")
        COMPLETED = "COMPLETED", _("Completed")
        REFUNDED = "REFUNDED", _("Refunded")

    class CardType(models.TextChoices):
        VISA = "VISA", _("Visa")
        MASTERCARD = "MASTERCARD", _("Mastercard")
        AMEX = "AMEX", _("American Express")
        DISCOVER = "DISCOVER", _("Discover")

    booking = models.OneToOneField(
        "bookings.Booking",
        on_delete=models.CASCADE,
        related_name="payment",
    )
    card_last4 = models.CharField(max_length=4)
    card_type = models.CharField(max_length=20, choices=CardType.choices)
    cardholder_name = models.CharField(max_length=255)
    payment_status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    currency = models.CharField(max_length=3, default="USD")
    paid_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Payment")
        verbose_name_plural = _("Payments")
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"Payment for booking {self.booking_id}: {self.card_type} ****{self.card_last4}"

    @property
    def masked_card(self) -> str:
        return f"**** **** **** {self.card_last4}"
