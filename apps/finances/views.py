"""Checkout and payment API views.

Checkout settles a PENDING booking with a card; card details are validated
but never charged or stored beyond the last four digits.
"""

from __future__ import annotations

import logging

from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from apps.bookings.serializers import BookingSerializer
from apps.users.permissions import is_platform_admin

from .models import Payment
from .serializers import CardValidationSerializer, CheckoutSerializer, PaymentSerializer
from .services import settle_booking

logger = logging.getLogger(__name__)


class CheckoutView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):  # type: ignore
        serializer = CheckoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        params = serializer.validated_data

        booking, payment = settle_booking(
            params["booking_id"],
            request.user,
            card_number=params["card_number"],
            expiry_month=params["expiry_month"],
            expiry_year=params["expiry_year"],
            cvc=params["cvc"],
            cardholder_name=params["cardholder_name"],
            passenger_details=params.get("passenger_details"),
            hotel_guest_details=params.get("hotel_guest_details"),
        )
        booking.refresh_from_db()
        return Response(
            {
                "booking": BookingSerializer(booking, context={"request": request}).data,
                "payment": PaymentSerializer(payment).data,
            },
            status=status.HTTP_200_OK,
        )


class ValidateCardView(APIView):
    """Check card details without paying."""

    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):  # type: ignore
        serializer = CardValidationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        card = serializer.validated_data["card"]
        return Response({
            "valid": True,
            "card_type": card.card_type,
            "last4": card.last4,
            "expiry_month": card.expiry_month,
            "expiry_year": card.expiry_year,
        })


class PaymentViewSet(viewsets.ReadOnlyModelViewSet):
    """Payments of the current user's bookings; administrators see all."""

    serializer_class = PaymentSerializer
    permission_classes = [permissions.IsAuthenticated]
    filter_backends: list = []

    def get_queryset(self):  # type: ignore
        qs = Payment.objects.select_related("booking", "booking__user")
        if is_platform_admin(self.request.user):
            return qs
        return qs.filter(booking__user=self.request.user)
