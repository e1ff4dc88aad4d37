"""Admin registrations for the hotels domain."""

from __future__ import annotations

from django.contrib import admin

from .cache import invalidate_cities
from .models import City, Hotel, Room


@admin.register(City)
class CityAdmin(admin.ModelAdmin):
    list_display = ("name", "country")
    search_fields = ("name", "country")

    def save_model(self, request, obj, form, change):  # type: ignore
        super().save_model(request, obj, form, change)
        invalidate_cities()

    def delete_model(self, request, obj):  # type: ignore
        super().delete_model(request, obj)
        invalidate_cities()


class RoomInline(admin.TabularInline):
    model = Room
    extra = 0
    fields = ("type", "price", "currency", "available_count", "max_guests")
    readonly_fields = ("available_count",)


@admin.register(Hotel)
class HotelAdmin(admin.ModelAdmin):
    list_display = ("name", "city", "rating", "owner", "created_at")
    list_filter = ("city", "rating")
    search_fields = ("name", "address", "owner__email")
    inlines = [RoomInline]
    readonly_fields = ("created_at", "updated_at")


@admin.register(Room)
class RoomAdmin(admin.ModelAdmin):
    list_display = ("hotel", "type", "price", "currency", "available_count", "max_guests")
    list_filter = ("hotel",)
    search_fields = ("hotel__name", "type")
    # Capacity changes must go through reconciliation, see RoomViewSet.
    readonly_fields = ("available_count", "created_at", "updated_at")
