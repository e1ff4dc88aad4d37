"""URL routing for the hotels domain."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import SimpleRouter  # type: ignore

from .views import HotelBookingsView, HotelViewSet, RoomViewSet

router = SimpleRouter()
router.register(r"", HotelViewSet, basename="hotel")

room_list = RoomViewSet.as_view({"get": "list", "post": "create"})
room_detail = RoomViewSet.as_view(
    {"get": "retrieve", "put": "update", "patch": "partial_update", "delete": "destroy"}
)
room_capacity = RoomViewSet.as_view({"patch": "capacity"})
room_availability = RoomViewSet.as_view({"get": "availability"})
room_occupancy = RoomViewSet.as_view({"get": "occupancy"})

urlpatterns = [
    path("", include(router.urls)),
    path("<int:hotel_id>/rooms/", room_list, name="room-list"),
    path("<int:hotel_id>/rooms/occupancy/", room_occupancy, name="room-occupancy"),
    path("<int:hotel_id>/rooms/<int:pk>/", room_detail, name="room-detail"),
    path("<int:hotel_id>/rooms/<int:pk>/capacity/", room_capacity, name="room-capacity"),
    path("<int:hotel_id>/rooms/<int:pk>/availability/", room_availability, name="room-availability"),
    path("<int:hotel_id>/bookings/", HotelBookingsView.as_view(), name="hotel-bookings"),
]
