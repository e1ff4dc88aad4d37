"""Serializers for checkout and payments."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .cards import CardValidationError, validate_card
from .models import Payment


class PaymentSerializer(serializers.ModelSerializer):
    masked_card = serializers.ReadOnlyField()

    class Meta:
        model = Payment
        fields = [
            "id",
            "booking",
            "card_type",
            "card_last4",
            "masked_card",
            "cardholder_name",
            "payment_status",
            "amount",
            "currency",
            "paid_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class CardSerializer(serializers.Serializer):
    card_number = serializers.CharField(max_length=32)
    expiry_month = serializers.IntegerField()
    expiry_year = serializers.IntegerField()
    cvc = serializers.CharField(max_length=4)


class CardValidationSerializer(CardSerializer):
    """Run the card checks without creating anything."""

    def validate(self, attrs):  # type: ignore
        try:
            card = validate_card(
                attrs["card_number"], attrs["expiry_month"], attrs["expiry_year"], attrs["cvc"]
            )
        except CardValidationError as exc:
            raise serializers.ValidationError({"card": [str(exc)]})
        attrs["card"] = card
        return attrs


class CheckoutSerializer(CardSerializer):
    booking_id = serializers.IntegerField()
    cardholder_name = serializers.CharField(max_length=255)
    passenger_details = serializers.DictField(required=False, allow_null=True)
    hotel_guest_details = serializers.DictField(required=False, allow_null=True)
