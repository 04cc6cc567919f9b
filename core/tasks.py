"""
Celery tasks for background processing.

Periodic sweeps and expiry warnings, scheduled through
``CELERY_BEAT_SCHEDULE``.
"""
import asyncio
import logging

from django.conf import settings

from CredentialService.celery import app

logger = logging.getLogger(__name__)


@app.task
def sweep_expired_licenses() -> int:
    """Move overdue ACTIVE licenses to EXPIRED."""
    from CredentialService.services import build_license_manager

    count = asyncio.run(build_license_manager().sweep_expired())
    logger.info("License sweep finished", extra={"expired": count})
    return count


@app.task
def sweep_expired_tokens() -> int:
    """Delete expired verification tokens."""
    from CredentialService.services import build_verification_token_service

    count = asyncio.run(build_verification_token_service().sweep_expired())
    logger.info("Token sweep finished", extra={"deleted": count})
    return count


@app.task
def notify_expiring_licenses() -> dict:
    """
    Warn owners of licenses nearing expiry.

    The shortest configured horizon is sent as the urgent warning.
    """
    from CredentialService.services import build_license_manager

    manager = build_license_manager()
    horizons = sorted(settings.LICENSE_EXPIRY_WARNING_DAYS, reverse=True)

    async def notify():
        sent = {}
        for days in horizons:
            sent[days] = await manager.notify_expiring(days, urgent=(days == horizons[-1]))
        return sent

    sent = asyncio.run(notify())
    logger.info("Expiry warnings sent", extra={"sent": sent})
    return {str(days): count for days, count in sent.items()}
