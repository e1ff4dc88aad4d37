"""API tests for checkout settlement."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.core import mail
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.models import Booking, BookingStatus, HotelBooking
from apps.finances.models import Payment
from apps.hotels.models import City, Hotel, Room
from apps.notifications.models import Notification
from apps.users.models import User

VISA = {"card_number": "4242424242424242", "expiry_month": 12, "expiry_year": 2099, "cvc": "123"}
MASTERCARD = {"card_number": "5555 5555 5555 4444", "expiry_month": 1, "expiry_year": 2099, "cvc": "321"}


class CheckoutAPITests(APITestCase):
    def setUp(self) -> None:
        self.owner = User.objects.create_user(
            email="owner@example.com",
            password="OwnerPass123",
            role=User.RoleChoices.HOTEL_OWNER,
        )
        self.traveller = User.objects.create_user(
            email="ada@example.com",
            password="TravelPass123",
            first_name="Ada",
            last_name="Lovelace",
        )
        city = City.objects.create(name="Vancouver", country="Canada")
        self.hotel = Hotel.objects.create(owner=self.owner, name="Seawall Lodge", address="9 Seawall", city=city)
        self.room = Room.objects.create(
            hotel=self.hotel, type="King", price=Decimal("200.00"), available_count=1, max_guests=2
        )
        self.booking = Booking.objects.create(user=self.traveller)
        self.stay = self._stay(self.booking, date(2024, 6, 1), date(2024, 6, 3))
        self.booking.recalculate_total()
        self.url = reverse("checkout")

    def _stay(self, booking: Booking, check_in: date, check_out: date, status_=BookingStatus.PENDING):
        return HotelBooking.objects.create(
            booking=booking,
            hotel=self.hotel,
            room=self.room,
            check_in_date=check_in,
            check_out_date=check_out,
            price=Decimal("400.00"),
            status=status_,
        )

    def _checkout(self, card: dict, **extra):
        payload = dict(card, booking_id=self.booking.pk, cardholder_name="Ada Lovelace", **extra)
        with self.captureOnCommitCallbacks(execute=True):
            return self.client.post(self.url, payload, format="json")

    def test_checkout_confirms_booking_and_components(self) -> None:
        self.client.force_authenticate(self.traveller)

        response = self._checkout(VISA, hotel_guest_details={"arrival": "late"})

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["booking"]["status"], BookingStatus.CONFIRMED)
        self.assertEqual(response.data["payment"]["card_last4"], "4242")
        self.assertEqual(response.data["payment"]["payment_status"], Payment.Status.COMPLETED)
        self.assertEqual(Decimal(response.data["payment"]["amount"]), Decimal("400.00"))

        self.stay.refresh_from_db()
        self.assertEqual(self.stay.status, BookingStatus.CONFIRMED)
        self.assertEqual(self.stay.guest_details, {"arrival": "late"})

    def test_checkout_sends_invoice_and_notifications(self) -> None:
        self.client.force_authenticate(self.traveller)

        self._checkout(VISA)

        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ["ada@example.com"])
        self.assertIn(self.booking.booking_reference, mail.outbox[0].subject)
        self.assertTrue(
            Notification.objects.filter(user=self.traveller, type=Notification.Type.BOOKING_CONFIRMATION).exists()
        )
        self.assertTrue(
            Notification.objects.filter(user=self.owner, type=Notification.Type.NEW_BOOKING).exists()
        )

    def test_second_checkout_replaces_payment(self) -> None:
        self.client.force_authenticate(self.traveller)

        self._checkout(VISA)
        response = self._checkout(MASTERCARD)

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(Payment.objects.filter(booking=self.booking).count(), 1)
        payment = Payment.objects.get(booking=self.booking)
        self.assertEqual(payment.card_last4, "4444")
        self.assertEqual(payment.card_type, Payment.CardType.MASTERCARD)

    def test_invalid_card_changes_nothing(self) -> None:
        self.client.force_authenticate(self.traveller)

        response = self._checkout(dict(VISA, card_number="4242424242424241"))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["card"], ["Invalid card number."])
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.status, BookingStatus.PENDING)
        self.assertFalse(Payment.objects.exists())

    def test_stay_taken_since_added_to_cart_conflicts(self) -> None:
        rival = User.objects.create_user(email="rival@example.com", password="RivalPass123")
        rival_booking = Booking.objects.create(user=rival, status=BookingStatus.CONFIRMED)
        self._stay(rival_booking, date(2024, 6, 2), date(2024, 6, 4), status_=BookingStatus.CONFIRMED)
        self.client.force_authenticate(self.traveller)

        response = self._checkout(VISA)

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)
        self.assertEqual(response.data["unavailable_dates"], ["2024-06-02"])
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.status, BookingStatus.PENDING)
        self.assertFalse(Payment.objects.exists())

    def test_two_stays_of_one_booking_cannot_share_last_unit(self) -> None:
        self._stay(self.booking, date(2024, 6, 2), date(2024, 6, 3))
        self.client.force_authenticate(self.traveller)

        response = self._checkout(VISA)

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)
        self.assertEqual(response.data["unavailable_dates"], ["2024-06-02"])

    def test_only_owner_or_admin_can_check_out(self) -> None:
        self.client.force_authenticate(self.owner)

        response = self._checkout(VISA)

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        admin = User.objects.create_user(
            email="admin@example.com", password="AdminPass123", role=User.RoleChoices.ADMIN
        )
        self.client.force_authenticate(admin)
        self.assertEqual(self._checkout(VISA).status_code, status.HTTP_200_OK)

    def test_missing_booking_is_not_found(self) -> None:
        self.client.force_authenticate(self.traveller)

        payload = dict(VISA, booking_id=999999, cardholder_name="Ada Lovelace")
        response = self.client.post(self.url, payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_cancelled_booking_cannot_be_checked_out(self) -> None:
        self.booking.mark_cancelled()
        self.client.force_authenticate(self.traveller)

        response = self._checkout(VISA)

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_validate_card_endpoint(self) -> None:
        self.client.force_authenticate(self.traveller)
        url = reverse("validate-card")

        ok = self.client.post(url, dict(VISA, card_number="3782 822463 10005", cvc="1234"), format="json")
        bad = self.client.post(url, dict(VISA, expiry_month=13), format="json")

        self.assertEqual(ok.status_code, status.HTTP_200_OK, ok.data)
        self.assertEqual(ok.data["card_type"], "AMEX")
        self.assertEqual(bad.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(bad.data["card"], ["Invalid expiry month."])

    def test_payments_are_listed_to_their_traveller(self) -> None:
        self.client.force_authenticate(self.traveller)
        self._checkout(VISA)

        mine = self.client.get(reverse("payment-list"))
        self.client.force_authenticate(self.owner)
        theirs = self.client.get(reverse("payment-list"))

        rows = mine.data["results"] if isinstance(mine.data, dict) else mine.data
        self.assertEqual([row["masked_card"] for row in rows], ["**** **** **** 4242"])
        other_rows = theirs.data["results"] if isinstance(theirs.data, dict) else theirs.data
        self.assertEqual(other_rows, [])
