"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin

from .models import Booking, FlightBooking, HotelBooking


class HotelBookingInline(admin.TabularInline):
    model = HotelBooking
    extra = 0
    fields = ("hotel", "room", "check_in_date", "check_out_date", "guest_count", "price", "status")
    readonly_fields = fields
    can_delete = False


class FlightBookingInline(admin.TabularInline):
    model = FlightBooking
    extra = 0
    fields = ("flight_number", "origin", "destination", "departure_time", "price", "status", "supplier_reference")
    readonly_fields = fields
    can_delete = False


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ("booking_reference", "user", "status", "total_price", "currency", "created_at")
    list_filter = ("status", "created_at")
    search_fields = ("booking_reference", "user__email")
    readonly_fields = ("booking_reference", "total_price", "created_at", "updated_at")
    inlines = [FlightBookingInline, HotelBookingInline]


@admin.register(HotelBooking)
class HotelBookingAdmin(admin.ModelAdmin):
    list_display = ("id", "booking", "hotel", "room", "check_in_date", "check_out_date", "status")
    list_filter = ("status", "hotel")
    search_fields = ("booking__booking_reference", "hotel__name")
    date_hierarchy = "check_in_date"


@admin.register(FlightBooking)
class FlightBookingAdmin(admin.ModelAdmin):
    list_display = ("flight_number", "booking", "origin", "destination", "departure_time", "status")
    list_filter = ("status", "airline")
    search_fields = ("booking__booking_reference", "flight_number", "supplier_reference")
