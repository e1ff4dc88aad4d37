"""Notification services: in-app notifications and email delivery."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from django.conf import settings  # type: ignore
from django.core.mail import send_mail  # type: ignore
from django.template.loader import render_to_string  # type: ignore
from django.utils.html import strip_tags  # type: ignore

from .models import Notification

if TYPE_CHECKING:  # pragma: no cover
    from apps.users.models import CustomUser

logger = logging.getLogger(__name__)


def create_notification(user: "CustomUser", message: str, type: str) -> Notification:
    """Store an in-app notification for ``user``."""

    notification = Notification.objects.create(user=user, message=message, type=type)
    logger.info(f"In-app notification {type} created for user {user.pk}")
    return notification


def send_email_notification(
    recipient_email: str,
    subject: str,
    template_name: str | None,
    context: dict,
    *,
    html_message: str | None = None,
) -> bool:
    """
    Send an email, rendering ``template_name`` when no HTML body is given.

    Returns True when the message was handed to the email backend. Delivery
    failures are logged and reported as False; callers run after commit and
    must not fail because of email.
    """
    try:
        if html_message:
            text_message = strip_tags(html_message)
        elif template_name:
            html_message = render_to_string(template_name, context)
            text_message = strip_tags(html_message)
        else:
            text_message = context.get("message", "")
            html_message = None

        send_mail(
            subject=subject,
            message=text_message,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[recipient_email],
            html_message=html_message,
            fail_silently=False,
        )

        logger.info(f"Email sent successfully to {recipient_email}: {subject}")
        return True

    except Exception as e:
        logger.error(f"Failed to send email to {recipient_email}: {e}", exc_info=True)
        return False
