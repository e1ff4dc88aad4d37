"""Serializers for flight search parameters."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore


class FlightSearchSerializer(serializers.Serializer):
    origin = serializers.CharField(max_length=100)
    destination = serializers.CharField(max_length=100)
    date = serializers.DateField()
    return_date = serializers.DateField(required=False)

    def validate(self, attrs):  # type: ignore
        if attrs["origin"].strip().lower() == attrs["destination"].strip().lower():
            raise serializers.ValidationError("Origin and destination must differ.")
        return_date = attrs.get("return_date")
        if return_date and return_date < attrs["date"]:
            raise serializers.ValidationError({"return_date": "Return date cannot be before departure."})
        return attrs
