"""Serializers for the booking domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Booking, FlightBooking, HotelBooking
from .services import COMPONENT_FLIGHT, COMPONENT_HOTEL

PASSPORT_NUMBER_LENGTH = 9


class HotelBookingSerializer(serializers.ModelSerializer):
    hotel_name = serializers.ReadOnlyField(source="hotel.name")
    room_type = serializers.ReadOnlyField(source="room.type")
    booking_reference = serializers.ReadOnlyField(source="booking.booking_reference")
    guest_email = serializers.ReadOnlyField(source="booking.user.email")
    nights = serializers.ReadOnlyField()

    class Meta:
        model = HotelBooking
        fields = [
            "id",
            "booking",
            "booking_reference",
            "hotel",
            "hotel_name",
            "room",
            "room_type",
            "check_in_date",
            "check_out_date",
            "nights",
            "guest_count",
            "guest_email",
            "guest_details",
            "price",
            "currency",
            "status",
            "created_at",
        ]
        read_only_fields = fields


class FlightBookingSerializer(serializers.ModelSerializer):
    is_connection = serializers.ReadOnlyField()

    class Meta:
        model = FlightBooking
        fields = [
            "id",
            "flight_id",
            "flight_number",
            "airline",
            "origin",
            "destination",
            "departure_time",
            "arrival_time",
            "price",
            "currency",
            "status",
            "supplier_reference",
            "is_connection",
            "connection_group_id",
            "segment_index",
            "total_segments",
            "passenger_details",
            "created_at",
        ]
        read_only_fields = fields


class BookingSerializer(serializers.ModelSerializer):
    """Booking with its flight segments and hotel stays."""

    user_id = serializers.ReadOnlyField(source="user.id")
    hotel_bookings = HotelBookingSerializer(many=True, read_only=True)
    flight_bookings = FlightBookingSerializer(many=True, read_only=True)
    payment = serializers.SerializerMethodField()

    class Meta:
        model = Booking
        fields = [
            "id",
            "booking_reference",
            "user_id",
            "status",
            "total_price",
            "currency",
            "flight_bookings",
            "hotel_bookings",
            "payment",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_payment(self, obj):  # type: ignore
        payment = getattr(obj, "payment", None)
        if payment is None:
            return None
        return {
            "card_type": payment.card_type,
            "card_last4": payment.card_last4,
            "payment_status": payment.payment_status,
            "amount": str(payment.amount),
        }


class AddHotelSerializer(serializers.Serializer):
    room_id = serializers.IntegerField()
    check_in_date = serializers.DateField()
    check_out_date = serializers.DateField()
    guest_count = serializers.IntegerField(min_value=1, default=1)
    guest_details = serializers.DictField(required=False, allow_null=True)

    def validate(self, attrs):  # type: ignore
        if attrs["check_out_date"] <= attrs["check_in_date"]:
            raise serializers.ValidationError(
                {"check_out_date": "Check-out date must be after check-in date."}
            )
        return attrs


class AddFlightsSerializer(serializers.Serializer):
    """
    Flights to ticket plus the passenger they are ticketed for.

    Missing passenger fields fall back to the traveller's profile.
    """

    flight_ids = serializers.ListField(child=serializers.CharField(), allow_empty=False)
    first_name = serializers.CharField(required=False, allow_blank=True)
    last_name = serializers.CharField(required=False, allow_blank=True)
    email = serializers.EmailField(required=False, allow_blank=True)
    passport_number = serializers.CharField(required=False, allow_blank=True)

    def validate(self, attrs):  # type: ignore
        user = self.context["request"].user
        passenger = {
            "first_name": attrs.get("first_name") or user.first_name,
            "last_name": attrs.get("last_name") or user.last_name,
            "email": attrs.get("email") or user.email,
            "passport_number": (attrs.get("passport_number") or user.passport_id or "").strip(),
        }
        missing = [key for key, value in passenger.items() if not value]
        if missing:
            raise serializers.ValidationError(
                {key: "This field is required for flight bookings." for key in missing}
            )
        if len(passenger["passport_number"]) != PASSPORT_NUMBER_LENGTH:
            raise serializers.ValidationError(
                {"passport_number": f"Passport number must be exactly {PASSPORT_NUMBER_LENGTH} characters."}
            )
        return {"flight_ids": attrs["flight_ids"], "passenger": passenger}


class ComponentCancelSerializer(serializers.Serializer):
    component_type = serializers.ChoiceField(choices=[COMPONENT_FLIGHT, COMPONENT_HOTEL])
    component_id = serializers.IntegerField()
