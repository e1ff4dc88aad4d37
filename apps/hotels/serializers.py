"""Serializers for the hotels domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import City, Hotel, Room


class CitySerializer(serializers.ModelSerializer):
    class Meta:
        model = City
        fields = ["id", "name", "country"]


class RoomSerializer(serializers.ModelSerializer):
    hotel = serializers.ReadOnlyField(source="hotel_id")

    class Meta:
        model = Room
        fields = [
            "id",
            "hotel",
            "type",
            "description",
            "price",
            "currency",
            "amenities",
            "available_count",
            "max_guests",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["created_at", "updated_at"]

    def validate_amenities(self, value):  # type: ignore
        if not isinstance(value, list):
            raise serializers.ValidationError("Amenities must be a list.")
        return value


class HotelSerializer(serializers.ModelSerializer):
    owner = serializers.ReadOnlyField(source="owner_id")
    city = CitySerializer(read_only=True)
    rooms = RoomSerializer(many=True, read_only=True)

    class Meta:
        model = Hotel
        fields = [
            "id",
            "owner",
            "name",
            "logo",
            "address",
            "city",
            "rating",
            "amenities",
            "rooms",
            "created_at",
            "updated_at",
        ]


class HotelWriteSerializer(serializers.ModelSerializer):
    city = serializers.PrimaryKeyRelatedField(queryset=City.objects.all())

    class Meta:
        model = Hotel
        fields = ["name", "logo", "address", "city", "rating", "amenities"]

    def validate_amenities(self, value):  # type: ignore
        if not isinstance(value, list):
            raise serializers.ValidationError("Amenities must be a list.")
        return value

    def to_representation(self, instance):  # type: ignore
        return HotelSerializer(instance, context=self.context).data


class CapacityUpdateSerializer(serializers.Serializer):
    """
    New unit count for a room, optionally limited to an inclusive date range.
    """

    available_count = serializers.IntegerField(min_value=0)
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)

    def validate(self, attrs):  # type: ignore
        start = attrs.get("start_date")
        end = attrs.get("end_date")
        if bool(start) != bool(end):
            raise serializers.ValidationError("Both start_date and end_date are required for a date range.")
        if start and end and start > end:
            raise serializers.ValidationError({"end_date": "End date cannot be before start date."})
        return attrs


class StayQuerySerializer(serializers.Serializer):
    check_in = serializers.DateField()
    check_out = serializers.DateField()
    guests = serializers.IntegerField(min_value=1, required=False, default=1)

    def validate(self, attrs):  # type: ignore
        if attrs["check_out"] <= attrs["check_in"]:
            raise serializers.ValidationError({"check_out": "Check-out date must be after check-in date."})
        return attrs


class OwnerReportQuerySerializer(serializers.Serializer):
    """Date window (inclusive) and optional room type for owner reports."""

    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)
    room_type = serializers.CharField(required=False, allow_blank=True)

    def validate(self, attrs):  # type: ignore
        start = attrs.get("start_date")
        end = attrs.get("end_date")
        if start and end and start > end:
            raise serializers.ValidationError({"end_date": "End date cannot be before start date."})
        return attrs


class CapacityResultSerializer(serializers.Serializer):
    room = RoomSerializer()
    cancelled_count = serializers.IntegerField()
    cancelled_booking_ids = serializers.ListField(child=serializers.IntegerField())
    message = serializers.CharField()
