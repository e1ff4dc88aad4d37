"""Booking domain models for FlyNext.

A ``Booking`` is a traveller's order. While PENDING it is the cart: flight
segments and hotel stays are merged into it until checkout confirms it.
``total_price`` always equals the sum of the non-cancelled components as of
the last mutation.
"""

from __future__ import annotations

import secrets
import string
from decimal import Decimal

from django.conf import settings  # type: ignore
from django.db import models, transaction  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.value_objects import DateRange


REFERENCE_ALPHABET = string.ascii_uppercase + string.digits
REFERENCE_LENGTH = 6


class BookingStatus(models.TextChoices):
    PENDING = "PENDING", _("Pending")
    CONFIRMED = "CONFIRMED", _("Confirmed")
    CANCELLED = "CANCELLED", _("Cancelled")


class Booking(models.Model):
    """Traveller's itinerary order (flights + hotel stays)."""

    Status = BookingStatus

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="bookings",
    )
    booking_reference = models.CharField(max_length=8, unique=True, editable=False)
    status = models.CharField(
        max_length=16,
        choices=BookingStatus.choices,
        default=BookingStatus.PENDING,
    )
    total_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    currency = models.CharField(max_length=3, default="USD")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["-created_at", "-id"]
        constraints = [
            models.UniqueConstraint(
                fields=["user"],
                condition=models.Q(status="PENDING"),
                name="one_open_cart_per_user",
            ),
        ]
        indexes = [
            models.Index(fields=["user", "status"]),
        ]

    def __str__(self) -> str:
        return f"Booking #{self.booking_reference} ({self.status})"

    def save(self, *args, **kwargs):  # type: ignore
        if not self.booking_reference:
            self.booking_reference = self.generate_booking_reference()
        super().save(*args, **kwargs)

    @classmethod
    def generate_booking_reference(cls) -> str:
        while True:
            candidate = "".join(secrets.choice(REFERENCE_ALPHABET) for _ in range(REFERENCE_LENGTH))
            if not cls.objects.filter(booking_reference=candidate).exists():
                return candidate

    # --- Aggregate helpers --------------------------------------------------
    @property
    def is_cancelled(self) -> bool:
        return self.status == BookingStatus.CANCELLED

    def active_hotel_bookings(self):
        return self.hotel_bookings.exclude(status=BookingStatus.CANCELLED)

    def active_flight_bookings(self):
        return self.flight_bookings.exclude(status=BookingStatus.CANCELLED)

    def recalculate_total(self, save: bool = True) -> Decimal:
        """Sum the prices of every non-cancelled component."""
        hotel_total = self.active_hotel_bookings().aggregate(total=models.Sum("price"))["total"]
        flight_total = self.active_flight_bookings().aggregate(total=models.Sum("price"))["total"]
        self.total_price = (hotel_total or Decimal("0.00")) + (flight_total or Decimal("0.00"))
        if save:
            self.save(update_fields=["total_price", "updated_at"])
        return self.total_price

    def mark_confirmed(self) -> None:
        """Confirm the booking and every component that is not cancelled."""
        with transaction.atomic():
            self.active_hotel_bookings().update(status=BookingStatus.CONFIRMED)
            self.active_flight_bookings().update(status=BookingStatus.CONFIRMED)
            self.status = BookingStatus.CONFIRMED
            self.save(update_fields=["status", "updated_at"])
            self.recalculate_total()

    def mark_cancelled(self) -> None:
        """Cancel the booking together with all of its components."""
        with transaction.atomic():
            self.hotel_bookings.update(status=BookingStatus.CANCELLED)
            self.flight_bookings.update(status=BookingStatus.CANCELLED)
            self.status = BookingStatus.CANCELLED
            self.save(update_fields=["status", "updated_at"])
            self.recalculate_total()


class HotelBooking(models.Model):
    """One unit of a room type held for a stay."""

    Status = BookingStatus

    booking = models.ForeignKey(Booking, on_delete=models.CASCADE, related_name="hotel_bookings")
    hotel = models.ForeignKey("hotels.Hotel", on_delete=models.CASCADE, related_name="hotel_bookings")
    room = models.ForeignKey("hotels.Room", on_delete=models.CASCADE, related_name="hotel_bookings")
    check_in_date = models.DateField()
    check_out_date = models.DateField()
    guest_count = models.PositiveSmallIntegerField(default=1)
    price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        help_text=_("Room price times nights, fixed when added to the cart."),
    )
    currency = models.CharField(max_length=3, default="USD")
    status = models.CharField(
        max_length=16,
        choices=BookingStatus.choices,
        default=BookingStatus.PENDING,
    )
    guest_details = models.JSONField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Hotel booking")
        verbose_name_plural = _("Hotel bookings")
        ordering = ["-created_at", "-id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(check_out_date__gt=models.F("check_in_date")),
                name="hotel_booking_valid_dates",
            ),
        ]
        indexes = [
            models.Index(fields=["room", "status", "check_in_date", "check_out_date"]),
        ]

    def __str__(self) -> str:
        return f"HotelBooking #{self.pk} room={self.room_id} {self.check_in_date}..{self.check_out_date}"

    @property
    def dates(self) -> DateRange:
        return DateRange(self.check_in_date, self.check_out_date)

    @property
    def nights(self) -> int:
        return (self.check_out_date - self.check_in_date).days


class FlightBooking(models.Model):
    """A single flight segment booked through the supplier.

    Segments of one connecting itinerary share ``connection_group_id`` and
    are ordered by ``segment_index`` out of ``total_segments``.
    """

    Status = BookingStatus

    booking = models.ForeignKey(Booking, on_delete=models.CASCADE, related_name="flight_bookings")
    flight_id = models.CharField(max_length=100)
    flight_number = models.CharField(max_length=20)
    airline = models.CharField(max_length=100, blank=True)
    origin = models.CharField(max_length=10)
    destination = models.CharField(max_length=10)
    departure_time = models.DateTimeField()
    arrival_time = models.DateTimeField()
    price = models.DecimalField(max_digits=12, decimal_places=2)
    currency = models.CharField(max_length=3, default="USD")
    status = models.CharField(
        max_length=16,
        choices=BookingStatus.choices,
        default=BookingStatus.PENDING,
    )
    supplier_reference = models.CharField(max_length=64, blank=True)
    connection_group_id = models.UUIDField(null=True, blank=True)
    segment_index = models.PositiveSmallIntegerField(null=True, blank=True)
    total_segments = models.PositiveSmallIntegerField(null=True, blank=True)
    passenger_details = models.JSONField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Flight booking")
        verbose_name_plural = _("Flight bookings")
        ordering = ["departure_time", "segment_index"]

    def __str__(self) -> str:
        return f"{self.flight_number} {self.origin}->{self.destination}"

    @property
    def is_connection(self) -> bool:
        return bool(self.total_segments and self.total_segments > 1)
