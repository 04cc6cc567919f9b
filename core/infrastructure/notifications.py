"""
Email implementation of NotificationDispatcher port.
"""
import logging
from typing import Optional

from asgiref.sync import sync_to_async
from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.mail import send_mail
from django.utils.html import format_html

from core.ports.notifications import Notification, NotificationDispatcher

logger = logging.getLogger(__name__)


class EmailNotificationDispatcher(NotificationDispatcher):
    """
    Sends notifications as email through Django's mail backend.

    Delivery failures are logged and reported as False; they never
    propagate to the caller.
    """

    def __init__(self, from_email: Optional[str] = None):
        """Initialize dispatcher with the sender address."""
        self.from_email = from_email

    @sync_to_async
    def _send(self, notification: Notification) -> bool:
        User = get_user_model()
        email = (
            User.objects.filter(id=notification.user_id)
            .values_list("email", flat=True)
            .first()
        )
        if not email:
            logger.warning(
                "No recipient for %s notification", notification.kind,
                extra={"user_id": str(notification.user_id)},
            )
            return False

        html = format_html(
            "<h2>{}</h2><p>{}</p>", notification.title, notification.message
        )
        sent = send_mail(
            subject=notification.title,
            message=notification.message,
            from_email=self.from_email or settings.DEFAULT_FROM_EMAIL,
            recipient_list=[email],
            html_message=html,
        )
        return sent > 0

    async def dispatch(self, notification: Notification) -> bool:
        """
        Send a notification to its user.

        Args:
            notification: Notification to deliver

        Returns:
            True if the mail backend accepted the message
        """
        try:
            return await self._send(notification)
        except Exception:  # pylint: disable=broad-exception-caught
            logger.error(
                "Failed to send %s notification",
                notification.kind,
                extra={"user_id": str(notification.user_id)},
                exc_info=True,
            )
            return False
