"""Admin registrations for payments."""

from __future__ import annotations

from django.contrib import admin

from .models import Payment


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ("booking", "card_type", "card_last4", "payment_status", "amount", "currency", "paid_at")
    list_filter = ("payment_status", "card_type")
    search_fields = ("booking__booking_reference", "cardholder_name", "booking__user__email")
    readonly_fields = ("card_type", "card_last4", "amount", "currency", "paid_at", "created_at", "updated_at")
