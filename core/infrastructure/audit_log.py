"""
Django implementation of AuditLog port.
"""
import logging

from asgiref.sync import sync_to_async

from core.infrastructure.models import SecurityLog
from core.ports.audit_log import AuditEvent, AuditLog

logger = logging.getLogger(__name__)


class DjangoAuditLog(AuditLog):
    """
    Writes audit events to the ``security_logs`` table.

    Write failures are logged and dropped.
    """

    @sync_to_async
    def _write(self, event: AuditEvent) -> None:
        SecurityLog.objects.create(
            actor_id=event.actor_id,
            action=event.action,
            details=event.details,
            created_at=event.timestamp,
        )

    async def record(self, event: AuditEvent) -> None:
        """
        Record an audit event.

        Args:
            event: Audit event to store
        """
        try:
            await self._write(event)
        except Exception:  # pylint: disable=broad-exception-caught
            logger.error("Failed to write audit event %s", event.action, exc_info=True)
