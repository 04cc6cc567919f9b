"""
Audit log port (interface).

This defines the contract for recording security-relevant actions.
Implementations are in the infrastructure layer.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class AuditEvent:
    """A single audit entry."""

    actor_id: Optional[str]
    action: str
    details: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class AuditLog(ABC):
    """
    Abstract audit/security log.

    Recording is fire-and-forget: implementations must not raise,
    so a logging failure never fails the operation being audited.
    """

    @abstractmethod
    async def record(self, event: AuditEvent) -> None:
        """
        Record an audit event.

        Args:
            event: Audit event to store
        """
        pass
