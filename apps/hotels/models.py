"""Hotel catalogue models for FlyNext.

``Room.available_count`` is the total number of interchangeable units of a
room type. Per-night remaining capacity is always derived from confirmed
hotel bookings (see ``apps.hotels.domain.inventory``), never stored.
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings  # type: ignore
from django.core.validators import MaxValueValidator, MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class City(models.Model):
    """Reference list of cities served by hotels and flights."""

    name = models.CharField(max_length=100)
    country = models.CharField(max_length=100)

    class Meta:
        verbose_name = _("City")
        verbose_name_plural = _("Cities")
        ordering = ["name"]
        constraints = [
            models.UniqueConstraint(fields=["name", "country"], name="unique_city_per_country"),
        ]

    def __str__(self) -> str:
        return f"{self.name}, {self.country}"


class Hotel(models.Model):
    """Hotel managed by a hotel owner."""

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="hotels",
    )
    name = models.CharField(max_length=255)
    logo = models.URLField(blank=True)
    address = models.CharField(max_length=255)
    city = models.ForeignKey(City, on_delete=models.PROTECT, related_name="hotels")
    rating = models.DecimalField(
        max_digits=2,
        decimal_places=1,
        default=Decimal("0.0"),
        validators=[MinValueValidator(Decimal("0.0")), MaxValueValidator(Decimal("5.0"))],
        help_text=_("Star rating, 0 to 5."),
    )
    amenities = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Hotel")
        verbose_name_plural = _("Hotels")
        ordering = ["name"]
        indexes = [
            models.Index(fields=["city", "rating"]),
        ]

    def __str__(self) -> str:
        return self.name


class Room(models.Model):
    """Room type with a pool of identical units."""

    hotel = models.ForeignKey(Hotel, on_delete=models.CASCADE, related_name="rooms")
    type = models.CharField(max_length=100)
    description = models.TextField(blank=True)
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text=_("Price per night."),
    )
    currency = models.CharField(max_length=3, default="USD")
    amenities = models.JSONField(default=list, blank=True)
    available_count = models.PositiveIntegerField(
        default=1,
        help_text=_("Total number of units of this room type."),
    )
    max_guests = models.PositiveSmallIntegerField(default=2, validators=[MinValueValidator(1)])
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Room")
        verbose_name_plural = _("Rooms")
        ordering = ["hotel", "type"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(available_count__gte=0),
                name="room_available_count_non_negative",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.hotel.name}: {self.type}"
