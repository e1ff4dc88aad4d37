"""API tests for in-app notifications."""

from __future__ import annotations

from django.core import mail
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.notifications.models import Notification
from apps.notifications.services import create_notification, send_email_notification
from apps.users.models import User


class NotificationAPITests(APITestCase):
    def setUp(self) -> None:
        self.user = User.objects.create_user(email="ada@example.com", password="TravelPass123")
        self.other = User.objects.create_user(email="other@example.com", password="OtherPass123")
        self.mine = create_notification(self.user, "Booking ABC123 confirmed.", Notification.Type.BOOKING_CONFIRMATION)
        create_notification(self.other, "Not yours.", Notification.Type.NEW_BOOKING)

    def test_lists_only_own_notifications(self) -> None:
        self.client.force_authenticate(self.user)

        response = self.client.get(reverse("notification-list"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        rows = response.data["results"] if isinstance(response.data, dict) else response.data
        self.assertEqual([row["id"] for row in rows], [self.mine.pk])
        self.assertEqual(rows[0]["type"], "BOOKING_CONFIRMATION")

    def test_mark_read(self) -> None:
        self.client.force_authenticate(self.user)

        response = self.client.post(reverse("notification-mark-read", args=[self.mine.pk]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.mine.refresh_from_db()
        self.assertTrue(self.mine.is_read)
        unread = self.client.get(reverse("notification-list"), {"unread": "true"})
        rows = unread.data["results"] if isinstance(unread.data, dict) else unread.data
        self.assertEqual(rows, [])

    def test_cannot_mark_someone_elses_notification(self) -> None:
        self.client.force_authenticate(self.other)

        response = self.client.post(reverse("notification-mark-read", args=[self.mine.pk]))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_requires_authentication(self) -> None:
        response = self.client.get(reverse("notification-list"))

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_email_helper_sends_html_with_text_fallback(self) -> None:
        sent = send_email_notification(
            "ada@example.com", "Hello", None, {}, html_message="<p>Your <b>trip</b></p>"
        )

        self.assertTrue(sent)
        self.assertEqual(mail.outbox[0].body, "Your trip")
        self.assertEqual(mail.outbox[0].alternatives[0][1], "text/html")
