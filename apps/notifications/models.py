"""Notification model.

Notifications are created by event handlers once a booking change has
committed (cart additions, confirmations, cancellations, capacity cuts)
and are listed to their recipient, who can mark them as read.
"""

from __future__ import annotations

from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Notification(models.Model):
    """A message sent to a user about some event."""

    class Type(models.TextChoices):
        BOOKING_CONFIRMATION = "BOOKING_CONFIRMATION", _("Booking confirmation")
        BOOKING_CANCELLATION = "BOOKING_CANCELLATION", _("Booking cancellation")
        NEW_BOOKING = "NEW_BOOKING", _("New booking")
        BOOKING_CART_ADDITION = "BOOKING_CART_ADDITION", _("Added to cart")
        CAPACITY_CANCELLATION = "CAPACITY_CANCELLATION", _("Cancelled after capacity change")

    user = models.ForeignKey(
        'users.CustomUser', on_delete=models.CASCADE, related_name='notifications'
    )
    type = models.CharField(max_length=32, choices=Type.choices)
    message = models.TextField()
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at', '-id']
        indexes = [models.Index(fields=['user', 'is_read'])]

    def __str__(self) -> str:
        return f"Notification to {self.user_id}: {self.type}"
