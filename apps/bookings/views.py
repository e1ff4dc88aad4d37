"""API views for the booking domain."""

from __future__ import annotations

import logging

from django.db.models import Q  # type: ignore
from django.http import HttpResponse  # type: ignore
from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.exceptions import NotFound, PermissionDenied  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.finances.invoices import render_invoice
from apps.users.permissions import is_platform_admin

from .models import Booking
from .serializers import (
    AddFlightsSerializer,
    AddHotelSerializer,
    BookingSerializer,
    ComponentCancelSerializer,
)
from .services import (
    add_flights_to_cart,
    add_hotel_to_cart,
    can_manage_booking,
    cancel_booking,
    cancel_component,
    get_cart,
)

logger = logging.getLogger(__name__)


class BookingViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Traveller bookings.

    ``list`` shows the caller's own bookings (administrators see every
    booking). Hotel owners can open and cancel bookings that include a stay
    at one of their hotels.
    """

    serializer_class = BookingSerializer
    permission_classes = [permissions.IsAuthenticated]
    filter_backends: list = []

    def get_queryset(self):  # type: ignore
        user = self.request.user
        qs = Booking.objects.select_related("user", "payment").prefetch_related(
            "hotel_bookings__hotel", "hotel_bookings__room", "flight_bookings"
        )
        if is_platform_admin(user):
            return qs
        if self.action == "list":
            qs = qs.filter(user=user)
            status_filter = self.request.query_params.get("status")
            if status_filter:
                qs = qs.filter(status=status_filter.upper())
            return qs
        return qs.filter(Q(user=user) | Q(hotel_bookings__hotel__owner=user)).distinct()

    def _booking_response(self, booking: Booking, code=status.HTTP_200_OK) -> Response:
        return Response(self.get_serializer(booking).data, status=code)

    @action(detail=False, methods=["get"])
    def cart(self, request):
        """The caller's open (PENDING) booking."""
        cart = get_cart(request.user)
        if cart is None:
            raise NotFound("Your cart is empty.")
        return Response(self.get_serializer(cart).data)

    @action(detail=False, methods=["post"])
    def hotels(self, request):
        """Add a hotel stay to the cart."""
        serializer = AddHotelSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        params = serializer.validated_data

        cart = add_hotel_to_cart(
            request.user,
            room_id=params["room_id"],
            check_in=params["check_in_date"],
            check_out=params["check_out_date"],
            guest_count=params["guest_count"],
            guest_details=params.get("guest_details"),
        )
        return self._booking_response(cart, status.HTTP_201_CREATED)

    @action(detail=False, methods=["post"])
    def flights(self, request):
        """Ticket flights with the supplier and add them to the cart."""
        serializer = AddFlightsSerializer(data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)
        params = serializer.validated_data

        cart = add_flights_to_cart(
            request.user,
            flight_ids=params["flight_ids"],
            passenger=params["passenger"],
        )
        return self._booking_response(cart, status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        booking = cancel_booking(pk, request.user)
        return self._booking_response(booking)

    @action(detail=True, methods=["post"], url_path="components/cancel", url_name="cancel-component")
    def cancel_component(self, request, pk=None):
        serializer = ComponentCancelSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = cancel_component(
            pk,
            request.user,
            component_type=serializer.validated_data["component_type"],
            component_id=serializer.validated_data["component_id"],
        )
        return self._booking_response(booking)

    @action(detail=True, methods=["get"])
    def invoice(self, request, pk=None):
        """Invoice of the booking as an HTML page."""
        booking = self.get_object()
        if not can_manage_booking(request.user, booking):
            raise PermissionDenied("You cannot view this invoice.")
        return HttpResponse(render_invoice(booking), content_type="text/html; charset=utf-8")
