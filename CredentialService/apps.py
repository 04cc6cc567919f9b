"""
App configuration for Credential Service.
"""
import logging

from django.apps import AppConfig

logger = logging.getLogger(__name__)


class CredentialServiceConfig(AppConfig):
    """App configuration for CredentialService."""

    name = "CredentialService"
    verbose_name = "Credential Service"

    def ready(self):
        """Wire event handlers onto the shared event bus."""
        # Only setup once (avoid duplicate registration)
        if getattr(self, "_initialized", False):
            return

        from core.infrastructure.event_handlers import register_event_handlers
        from CredentialService.services import build_notification_dispatcher, get_event_bus

        register_event_handlers(get_event_bus(), build_notification_dispatcher())
        self._initialized = True
