"""Hotel catalogue and room inventory API views."""

from __future__ import annotations

import logging
from datetime import timedelta

from django.db import transaction  # type: ignore
from django.shortcuts import get_object_or_404  # type: ignore
from django.utils import timezone  # type: ignore
from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import generics, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.exceptions import PermissionDenied  # type: ignore
from rest_framework.filters import OrderingFilter  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from apps.bookings.exceptions import SupplierUnavailable
from apps.bookings.models import BookingStatus, HotelBooking
from apps.bookings.serializers import HotelBookingSerializer
from apps.flights.client import FlightSupplierError
from apps.users.permissions import IsHotelOwnerOrAdmin, IsOwnerOrAdmin, is_platform_admin
from shared.domain.value_objects import DateRange

from .cache import get_cities
from .filters import HotelFilterSet
from .models import Hotel, Room
from .serializers import (
    CapacityResultSerializer,
    CapacityUpdateSerializer,
    HotelSerializer,
    HotelWriteSerializer,
    OwnerReportQuerySerializer,
    RoomSerializer,
    StayQuerySerializer,
)
from .services import load_room_inventory, lock_room, reconcile_room_capacity, room_occupancy

logger = logging.getLogger(__name__)

DEFAULT_REPORT_DAYS = 30


class CityListView(APIView):
    """Cities served by hotels and flights."""

    permission_classes = [permissions.AllowAny]

    def get(self, request):  # type: ignore
        try:
            return Response(get_cities())
        except FlightSupplierError as exc:
            logger.warning("Could not seed cities: %s", exc)
            raise SupplierUnavailable() from exc


class HotelViewSet(viewsets.ModelViewSet):
    """Hotel search for everyone, management for hotel owners."""

    queryset = Hotel.objects.select_related("city", "owner").prefetch_related("rooms")
    permission_classes = [IsHotelOwnerOrAdmin, IsOwnerOrAdmin]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_class = HotelFilterSet
    ordering_fields = ["name", "rating", "created_at"]

    def get_serializer_class(self):  # type: ignore
        if self.action in {"create", "update", "partial_update"}:
            return HotelWriteSerializer
        return HotelSerializer

    def perform_create(self, serializer):  # type: ignore
        hotel = serializer.save(owner=self.request.user)
        logger.info("Hotel %s created by user %s", hotel.pk, self.request.user.pk)

    @action(detail=False, methods=["get"], permission_classes=[permissions.IsAuthenticated])
    def mine(self, request):
        """Hotels owned by the current user."""
        hotels = self.get_queryset().filter(owner=request.user)
        return Response(HotelSerializer(hotels, many=True).data)


class HotelScopedMixin:
    """Resolve the hotel from the URL and check management rights."""

    def get_hotel(self) -> Hotel:
        if not hasattr(self, "_hotel"):
            self._hotel = get_object_or_404(Hotel, pk=self.kwargs["hotel_id"])
        return self._hotel

    def ensure_can_manage(self, hotel: Hotel) -> None:
        user = self.request.user
        if not user.is_authenticated:
            raise PermissionDenied("Authentication required.")
        if not (is_platform_admin(user) or hotel.owner_id == user.id):
            raise PermissionDenied("Only the hotel owner can manage this hotel.")


class RoomViewSet(HotelScopedMixin, viewsets.ModelViewSet):
    """
    Room types of a hotel.

    Changing ``available_count`` (update, delete, or the ``capacity`` action)
    goes through capacity reconciliation, which may cancel bookings.
    Deleting a room zeroes its capacity; the row is kept for booking history.
    """

    serializer_class = RoomSerializer
    permission_classes = [permissions.IsAuthenticatedOrReadOnly]
    filter_backends: list = []

    def get_queryset(self):  # type: ignore
        return Room.objects.filter(hotel=self.get_hotel()).select_related("hotel")

    def perform_create(self, serializer):  # type: ignore
        hotel = self.get_hotel()
        self.ensure_can_manage(hotel)
        room = serializer.save(hotel=hotel)
        logger.info("Room %s added to hotel %s", room.pk, hotel.pk)

    def update(self, request, *args, **kwargs):  # type: ignore
        partial = kwargs.pop("partial", False)
        room = self.get_object()
        self.ensure_can_manage(room.hotel)

        # available_count is only ever written by reconciliation.
        with transaction.atomic():
            room = lock_room(room.pk)
            serializer = self.get_serializer(room, data=request.data, partial=partial)
            serializer.is_valid(raise_exception=True)
            changes = dict(serializer.validated_data)
            new_count = changes.pop("available_count", room.available_count)
            for attr, value in changes.items():
                setattr(room, attr, value)
            room.save(update_fields=[*changes, "updated_at"])

            result = None
            if new_count != room.available_count:
                result = reconcile_room_capacity(room.pk, new_count)
                room.refresh_from_db()

        data = RoomSerializer(room).data
        if result is not None:
            data["cancelled_count"] = result.cancelled_count
            data["cancelled_booking_ids"] = result.cancelled_booking_ids
            data["message"] = result.message
        return Response(data)

    def destroy(self, request, *args, **kwargs):  # type: ignore
        room = self.get_object()
        self.ensure_can_manage(room.hotel)
        result = reconcile_room_capacity(room.pk, 0)
        return Response(CapacityResultSerializer(result).data, status=status.HTTP_200_OK)

    @action(detail=True, methods=["patch"])
    def capacity(self, request, hotel_id=None, pk=None):
        """Set the unit count, globally or for an inclusive date range."""
        room = self.get_object()
        self.ensure_can_manage(room.hotel)

        serializer = CapacityUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        params = serializer.validated_data

        result = reconcile_room_capacity(
            room.pk,
            params["available_count"],
            first_day=params.get("start_date"),
            last_day=params.get("end_date"),
        )
        return Response(CapacityResultSerializer(result).data)

    @action(detail=True, methods=["get"], permission_classes=[permissions.AllowAny])
    def availability(self, request, hotel_id=None, pk=None):
        """Per-night remaining units for a stay."""
        room = self.get_object()
        serializer = StayQuerySerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        params = serializer.validated_data

        stay = DateRange(params["check_in"], params["check_out"])
        inventory = load_room_inventory(room)
        unavailable = inventory.unavailable_dates(stay, params["guests"])
        return Response({
            "room_id": room.pk,
            "check_in": params["check_in"],
            "check_out": params["check_out"],
            "guests": params["guests"],
            "available": not unavailable,
            "unavailable_dates": [day.isoformat() for day in unavailable],
            "remaining": {
                day.isoformat(): max(left, 0)
                for day, left in inventory.remaining_capacity(stay).items()
            },
        })

    @action(detail=False, methods=["get"])
    def occupancy(self, request, hotel_id=None):
        """Owner report: booked vs available units per day and room type."""
        hotel = self.get_hotel()
        self.ensure_can_manage(hotel)

        serializer = OwnerReportQuerySerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        params = serializer.validated_data

        start = params.get("start_date") or timezone.localdate()
        end = params.get("end_date") or start + timedelta(days=DEFAULT_REPORT_DAYS - 1)
        rooms = self.get_queryset()
        if params.get("room_type"):
            rooms = rooms.filter(type__iexact=params["room_type"])

        report = room_occupancy(rooms, DateRange.inclusive(start, end))
        return Response({
            "hotel_id": hotel.pk,
            "start_date": start,
            "end_date": end,
            "room_types": report,
        })


class HotelBookingsView(HotelScopedMixin, generics.ListAPIView):
    """Hotel owner's view of stays booked at one of their hotels."""

    serializer_class = HotelBookingSerializer
    permission_classes = [permissions.IsAuthenticated]
    filter_backends: list = []

    def get_queryset(self):  # type: ignore
        hotel = self.get_hotel()
        self.ensure_can_manage(hotel)

        serializer = OwnerReportQuerySerializer(data=self.request.query_params)
        serializer.is_valid(raise_exception=True)
        params = serializer.validated_data

        qs = HotelBooking.objects.filter(hotel=hotel).select_related("room", "booking", "booking__user")
        if params.get("start_date"):
            qs = qs.filter(check_out_date__gt=params["start_date"])
        if params.get("end_date"):
            qs = qs.filter(check_in_date__lte=params["end_date"])
        if params.get("room_type"):
            qs = qs.filter(room__type__iexact=params["room_type"])
        status_filter = self.request.query_params.get("status")
        if status_filter in BookingStatus.values:
            qs = qs.filter(status=status_filter)
        return qs.order_by("check_in_date", "id")
