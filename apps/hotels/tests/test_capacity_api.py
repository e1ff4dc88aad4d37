"""API tests for room capacity changes and the bookings they cancel."""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal
from unittest.mock import patch

from django.db import transaction
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings import services as booking_services
from apps.bookings.models import Booking, BookingStatus, HotelBooking
from apps.hotels.models import City, Hotel, Room
from apps.hotels.services import load_room_inventory, lock_queryset_if_possible
from apps.hotels.views import RoomViewSet
from apps.notifications.models import Notification
from apps.users.models import User
from shared.domain.value_objects import DateRange


class RoomCapacityAPITests(APITestCase):
    def setUp(self) -> None:
        self.owner = User.objects.create_user(
            email="owner@example.com",
            password="OwnerPass123",
            role=User.RoleChoices.HOTEL_OWNER,
        )
        self.city = City.objects.create(name="Toronto", country="Canada")
        self.hotel = Hotel.objects.create(
            owner=self.owner,
            name="Harbour View",
            address="1 Queens Quay",
            city=self.city,
            rating=Decimal("4.5"),
        )
        self.room = Room.objects.create(
            hotel=self.hotel,
            type="Double",
            price=Decimal("100.00"),
            available_count=3,
            max_guests=2,
        )
        self.capacity_url = reverse("room-capacity", args=[self.hotel.pk, self.room.pk])

    def _confirmed_stay(self, email: str, check_in: date, check_out: date) -> HotelBooking:
        traveller, _ = User.objects.get_or_create(email=email)
        booking = Booking.objects.create(user=traveller, status=BookingStatus.CONFIRMED)
        stay = HotelBooking.objects.create(
            booking=booking,
            hotel=self.hotel,
            room=self.room,
            check_in_date=check_in,
            check_out_date=check_out,
            price=Decimal("200.00"),
            status=BookingStatus.CONFIRMED,
        )
        booking.recalculate_total()
        return stay

    def test_reduction_cancels_most_recent_bookings(self) -> None:
        first = self._confirmed_stay("a@example.com", date(2024, 6, 1), date(2024, 6, 3))
        second = self._confirmed_stay("b@example.com", date(2024, 6, 1), date(2024, 6, 3))
        third = self._confirmed_stay("c@example.com", date(2024, 6, 2), date(2024, 6, 4))
        self.client.force_authenticate(self.owner)

        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.patch(self.capacity_url, {"available_count": 1}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["cancelled_count"], 2)
        self.assertEqual(response.data["cancelled_booking_ids"], [third.pk, second.pk])
        self.assertEqual(response.data["room"]["available_count"], 1)

        first.refresh_from_db()
        second.refresh_from_db()
        self.assertEqual(first.status, BookingStatus.CONFIRMED)
        self.assertEqual(second.status, BookingStatus.CANCELLED)
        parent = Booking.objects.get(pk=second.booking_id)
        self.assertEqual(parent.status, BookingStatus.CANCELLED)
        self.assertEqual(parent.total_price, Decimal("0.00"))
        self.assertEqual(
            Notification.objects.filter(type=Notification.Type.CAPACITY_CANCELLATION).count(), 2
        )

    def test_reduction_to_zero_cancels_everything(self) -> None:
        stays = [
            self._confirmed_stay(f"t{i}@example.com", date(2024, 6, 1), date(2024, 6, 2))
            for i in range(3)
        ]
        self.client.force_authenticate(self.owner)

        response = self.client.patch(self.capacity_url, {"available_count": 0}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["cancelled_count"], 3)
        self.room.refresh_from_db()
        self.assertEqual(self.room.available_count, 0)
        for stay in stays:
            stay.refresh_from_db()
            self.assertEqual(stay.status, BookingStatus.CANCELLED)

    def test_increase_cancels_nothing(self) -> None:
        stay = self._confirmed_stay("a@example.com", date(2024, 6, 1), date(2024, 6, 3))
        self.client.force_authenticate(self.owner)

        response = self.client.patch(self.capacity_url, {"available_count": 5}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["cancelled_count"], 0)
        self.assertIn("No bookings were affected", response.data["message"])
        stay.refresh_from_db()
        self.assertEqual(stay.status, BookingStatus.CONFIRMED)

    def test_negative_count_is_rejected(self) -> None:
        self.client.force_authenticate(self.owner)

        response = self.client.patch(self.capacity_url, {"available_count": -1}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.room.refresh_from_db()
        self.assertEqual(self.room.available_count, 3)

    def test_range_reduction_leaves_no_night_over_committed(self) -> None:
        june = self._confirmed_stay("a@example.com", date(2024, 6, 1), date(2024, 6, 3))
        july_first = self._confirmed_stay("j1@example.com", date(2024, 7, 1), date(2024, 7, 3))
        july_second = self._confirmed_stay("j2@example.com", date(2024, 7, 1), date(2024, 7, 3))
        self.client.force_authenticate(self.owner)

        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.patch(
                self.capacity_url,
                {"available_count": 1, "start_date": "2024-06-01", "end_date": "2024-06-30"},
                format="json",
            )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["cancelled_booking_ids"], [july_second.pk])
        for stay, expected in (
            (june, BookingStatus.CONFIRMED),
            (july_first, BookingStatus.CONFIRMED),
            (july_second, BookingStatus.CANCELLED),
        ):
            stay.refresh_from_db()
            self.assertEqual(stay.status, expected)

        self.room.refresh_from_db()
        inventory = load_room_inventory(self.room)
        season = DateRange(date(2024, 6, 1), date(2024, 7, 5))
        self.assertGreaterEqual(min(inventory.remaining_capacity(season).values()), 0)

    def test_range_reduction_cancels_the_whole_parent_booking(self) -> None:
        self._confirmed_stay("a@example.com", date(2024, 6, 1), date(2024, 6, 3))
        late = self._confirmed_stay("b@example.com", date(2024, 6, 2), date(2024, 6, 4))
        other_stay = HotelBooking.objects.create(
            booking=late.booking,
            hotel=self.hotel,
            room=self.room,
            check_in_date=date(2024, 8, 1),
            check_out_date=date(2024, 8, 2),
            price=Decimal("100.00"),
            status=BookingStatus.CONFIRMED,
        )
        self.client.force_authenticate(self.owner)

        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.patch(
                self.capacity_url,
                {"available_count": 1, "start_date": "2024-06-01", "end_date": "2024-06-05"},
                format="json",
            )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["cancelled_booking_ids"], [late.pk])
        parent = Booking.objects.get(pk=late.booking_id)
        self.assertEqual(parent.status, BookingStatus.CANCELLED)
        other_stay.refresh_from_db()
        self.assertEqual(other_stay.status, BookingStatus.CANCELLED)
        self.assertTrue(
            Notification.objects.filter(
                user=parent.user, type=Notification.Type.CAPACITY_CANCELLATION
            ).exists()
        )

    def test_range_requires_both_dates(self) -> None:
        self.client.force_authenticate(self.owner)

        response = self.client.patch(
            self.capacity_url, {"available_count": 1, "start_date": "2024-06-01"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_only_hotel_owner_can_change_capacity(self) -> None:
        stranger = User.objects.create_user(
            email="other-owner@example.com",
            password="OtherPass123",
            role=User.RoleChoices.HOTEL_OWNER,
        )
        self.client.force_authenticate(stranger)

        response = self.client.patch(self.capacity_url, {"available_count": 0}, format="json")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_room_update_reconciles_available_count(self) -> None:
        self._confirmed_stay("a@example.com", date(2024, 6, 1), date(2024, 6, 3))
        latest = self._confirmed_stay("b@example.com", date(2024, 6, 1), date(2024, 6, 3))
        self.client.force_authenticate(self.owner)

        response = self.client.patch(
            reverse("room-detail", args=[self.hotel.pk, self.room.pk]),
            {"available_count": 1, "price": "120.00"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["available_count"], 1)
        self.assertEqual(response.data["price"], "120.00")
        self.assertEqual(response.data["cancelled_booking_ids"], [latest.pk])

    def test_update_does_not_restore_a_count_changed_after_the_room_was_read(self) -> None:
        original_get_object = RoomViewSet.get_object

        def get_object_then_capacity_cut(view):
            stale = original_get_object(view)
            Room.objects.filter(pk=stale.pk).update(available_count=0)
            return stale

        self.client.force_authenticate(self.owner)

        with patch.object(RoomViewSet, "get_object", get_object_then_capacity_cut):
            response = self.client.patch(
                reverse("room-detail", args=[self.hotel.pk, self.room.pk]),
                {"description": "Sea-facing balcony"},
                format="json",
            )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["available_count"], 0)
        self.room.refresh_from_db()
        self.assertEqual(self.room.available_count, 0)
        self.assertEqual(self.room.description, "Sea-facing balcony")

    def test_booking_and_room_locks_share_one_helper(self) -> None:
        self.assertIs(booking_services.lock_queryset_if_possible, lock_queryset_if_possible)

        queryset = Room.objects.filter(pk=self.room.pk)
        with transaction.atomic():
            self.assertTrue(lock_queryset_if_possible(queryset).query.select_for_update)

    def test_deleting_room_zeroes_capacity(self) -> None:
        stay = self._confirmed_stay("a@example.com", date(2024, 6, 1), date(2024, 6, 3))
        self.client.force_authenticate(self.owner)

        response = self.client.delete(reverse("room-detail", args=[self.hotel.pk, self.room.pk]))

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertTrue(Room.objects.filter(pk=self.room.pk, available_count=0).exists())
        stay.refresh_from_db()
        self.assertEqual(stay.status, BookingStatus.CANCELLED)


class RoomAvailabilityAPITests(APITestCase):
    def setUp(self) -> None:
        self.owner = User.objects.create_user(
            email="owner@example.com",
            password="OwnerPass123",
            role=User.RoleChoices.HOTEL_OWNER,
        )
        city = City.objects.create(name="Montreal", country="Canada")
        self.hotel = Hotel.objects.create(owner=self.owner, name="Old Port Inn", address="2 Rue", city=city)
        self.room = Room.objects.create(
            hotel=self.hotel, type="Single", price=Decimal("80.00"), available_count=1, max_guests=1
        )
        traveller = User.objects.create_user(email="t@example.com", password="TravelPass123")
        booking = Booking.objects.create(user=traveller, status=BookingStatus.CONFIRMED)
        HotelBooking.objects.create(
            booking=booking,
            hotel=self.hotel,
            room=self.room,
            check_in_date=date(2024, 6, 1),
            check_out_date=date(2024, 6, 3),
            price=Decimal("160.00"),
            status=BookingStatus.CONFIRMED,
        )

    def test_availability_is_public_and_per_night(self) -> None:
        url = reverse("room-availability", args=[self.hotel.pk, self.room.pk])

        response = self.client.get(url, {"check_in": "2024-06-02", "check_out": "2024-06-04"})

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertFalse(response.data["available"])
        self.assertEqual(response.data["unavailable_dates"], ["2024-06-02"])
        self.assertEqual(response.data["remaining"], {"2024-06-02": 0, "2024-06-03": 1})

    def test_occupancy_report_groups_by_room_type(self) -> None:
        self.client.force_authenticate(self.owner)
        url = reverse("room-occupancy", args=[self.hotel.pk])

        response = self.client.get(url, {"start_date": "2024-06-01", "end_date": "2024-06-03"})

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        single = response.data["room_types"]["Single"]
        self.assertEqual(single["total_rooms"], 1)
        self.assertEqual(
            [(day["date"], day["booked"], day["occupancy_rate"]) for day in single["days"]],
            [("2024-06-01", 1, 100.0), ("2024-06-02", 1, 100.0), ("2024-06-03", 0, 0.0)],
        )

    def test_owner_lists_hotel_bookings(self) -> None:
        self.client.force_authenticate(self.owner)

        response = self.client.get(reverse("hotel-bookings", args=[self.hotel.pk]), {"start_date": "2024-06-02"})

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        rows = response.data["results"] if isinstance(response.data, dict) else response.data
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0]["guest_email"], "t@example.com")

    def test_hotel_search_filters_by_availability(self) -> None:
        response = self.client.get(
            reverse("hotel-list"),
            {"city": "montreal", "check_in_date": "2024-06-01", "check_out_date": "2024-06-02"},
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        rows = response.data["results"] if isinstance(response.data, dict) else response.data
        self.assertEqual(rows, [])

        response = self.client.get(
            reverse("hotel-list"),
            {"city": "montreal", "check_in_date": "2024-06-03", "check_out_date": "2024-06-05"},
        )
        rows = response.data["results"] if isinstance(response.data, dict) else response.data
        self.assertEqual([row["name"] for row in rows], ["Old Port Inn"])
