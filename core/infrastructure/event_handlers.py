"""
Event handlers for domain events.

These handlers process domain events for side effects such as
structured logging and user notifications.
"""

import logging
from typing import Optional

from core.domain.events import DomainEvent, EventBus, EventHandler
from core.ports.notifications import Notification, NotificationDispatcher
from licenses.domain.events import (
    LicenseBound,
    LicenseExpiring,
    LicenseExtended,
    LicenseIssued,
    LicenseReactivated,
    LicenseRevoked,
)
from two_factor.domain.events import BackupCodesRegenerated, TwoFactorDisabled, TwoFactorEnabled

logger = logging.getLogger(__name__)

ALL_EVENTS = (
    LicenseIssued,
    LicenseRevoked,
    LicenseExtended,
    LicenseReactivated,
    LicenseBound,
    LicenseExpiring,
    TwoFactorEnabled,
    TwoFactorDisabled,
    BackupCodesRegenerated,
)


class AuditLogEventHandler(EventHandler):
    """
    Event handler for the structured event log.

    Writes every domain event to the application log.
    """

    async def handle(self, event: DomainEvent) -> None:
        """
        Handle domain event for logging.

        Args:
            event: Domain event to log
        """
        logger.info(
            "Domain event: %s - %s",
            event.event_type,
            event.aggregate_id,
            extra={
                "event_id": str(event.event_id),
                "event_type": event.event_type,
                "aggregate_id": event.aggregate_id,
                "occurred_at": event.occurred_at.isoformat(),
            },
        )


class NotificationEventHandler(EventHandler):
    """
    Event handler that notifies users about changes to their credentials.
    """

    def __init__(self, dispatcher: NotificationDispatcher):
        """Initialize handler with a notification dispatcher."""
        self.dispatcher = dispatcher

    def _build(self, event: DomainEvent) -> Optional[Notification]:
        if isinstance(event, LicenseRevoked):
            return Notification(
                user_id=str(event.user_id),
                kind="license_revoked",
                title="License revoked",
                message=(
                    f"Your license for {event.product_id} has been revoked. "
                    f"Reason: {event.reason or 'No reason provided'}"
                ),
                data=event.payload(),
            )
        if isinstance(event, LicenseExpiring):
            prefix = "Urgent: " if event.urgent else ""
            return Notification(
                user_id=str(event.user_id),
                kind="license_expiring",
                title=f"{prefix}License expiring soon",
                message=(
                    f"Your license for {event.product_id} expires on "
                    f"{event.expires_at:%Y-%m-%d %H:%M} UTC."
                ),
                data=event.payload(),
            )
        if isinstance(event, TwoFactorEnabled):
            return Notification(
                user_id=str(event.user_id),
                kind="two_factor_enabled",
                title="Two-factor authentication enabled",
                message="Two-factor authentication is now active on your account.",
            )
        if isinstance(event, TwoFactorDisabled):
            return Notification(
                user_id=str(event.user_id),
                kind="two_factor_disabled",
                title="Two-factor authentication disabled",
                message=(
                    "Two-factor authentication was turned off for your account. "
                    "If this was not you, reset your password now."
                ),
            )
        return None

    async def handle(self, event: DomainEvent) -> None:
        """
        Send the notification for an event, if it has one.

        Args:
            event: Domain event
        """
        notification = self._build(event)
        if notification is None:
            return
        if not await self.dispatcher.dispatch(notification):
            logger.warning(
                "Notification not delivered",
                extra={"kind": notification.kind, "event_id": str(event.event_id)},
            )


def register_event_handlers(bus: EventBus, dispatcher: NotificationDispatcher) -> None:
    """
    Register all event handlers with an event bus.

    Args:
        bus: Event bus to subscribe on
        dispatcher: Delivery channel for user notifications
    """
    audit_handler = AuditLogEventHandler()
    notification_handler = NotificationEventHandler(dispatcher)

    for event_type in ALL_EVENTS:
        bus.subscribe(event_type, audit_handler)

    for event_type in (LicenseRevoked, LicenseExpiring, TwoFactorEnabled, TwoFactorDisabled):
        bus.subscribe(event_type, notification_handler)

    logger.info("Event handlers registered")
