"""
Composition root.

Builds the application services from settings and the Django adapters.
Nothing here is constructed at import time; callers (tasks, commands,
views) ask for a service when they need one.
"""
from functools import lru_cache

from django.conf import settings

from accounts.infrastructure.repositories.django_user_repository import DjangoUserRepository
from core.infrastructure.audit_log import DjangoAuditLog
from core.infrastructure.events import InMemoryEventBus
from core.infrastructure.notifications import EmailNotificationDispatcher
from licenses.application.handlers.payment_confirmed_handler import PaymentConfirmedHandler
from licenses.application.services.license_manager import LicenseManager
from licenses.infrastructure.repositories.django_license_repository import (
    DjangoLicenseRepository,
)
from two_factor.application.services.two_factor_service import TwoFactorService
from verification.application.services.verification_token_service import (
    VerificationTokenService,
)
from verification.infrastructure.repositories.django_token_repository import (
    DjangoTokenRepository,
)


@lru_cache(maxsize=None)
def get_event_bus() -> InMemoryEventBus:
    """The process-wide event bus; handlers are registered in AppConfig.ready."""
    return InMemoryEventBus()


def build_notification_dispatcher() -> EmailNotificationDispatcher:
    return EmailNotificationDispatcher(from_email=settings.DEFAULT_FROM_EMAIL)


def build_license_manager() -> LicenseManager:
    return LicenseManager(
        license_repository=DjangoLicenseRepository(),
        audit_log=DjangoAuditLog(),
        event_bus=get_event_bus(),
        max_key_attempts=settings.LICENSE_KEY_MAX_ATTEMPTS,
    )


def build_payment_confirmed_handler() -> PaymentConfirmedHandler:
    return PaymentConfirmedHandler(build_license_manager())


def build_verification_token_service() -> VerificationTokenService:
    return VerificationTokenService(
        token_repository=DjangoTokenRepository(),
        user_repository=DjangoUserRepository(),
        ttls=settings.VERIFICATION_TOKEN_TTL,
    )


def build_two_factor_service() -> TwoFactorService:
    return TwoFactorService(
        user_repository=DjangoUserRepository(),
        audit_log=DjangoAuditLog(),
        event_bus=get_event_bus(),
        issuer=settings.TWO_FACTOR_ISSUER,
        backup_code_count=settings.TWO_FACTOR_BACKUP_CODE_COUNT,
        valid_window=settings.TWO_FACTOR_VALID_WINDOW,
    )
