"""
Two-factor domain events.
"""

import uuid
from typing import Any, Dict

from core.domain.events import DomainEvent


class TwoFactorEnabled(DomainEvent):
    """Event raised when a user confirms two-factor setup."""

    def __init__(self, user_id: uuid.UUID, **kwargs):
        super().__init__(aggregate_id=str(user_id), **kwargs)
        self.user_id = user_id

    def payload(self) -> Dict[str, Any]:
        return {"user_id": str(self.user_id)}


class TwoFactorDisabled(DomainEvent):
    """Event raised when two-factor is turned off for a user."""

    def __init__(self, user_id: uuid.UUID, **kwargs):
        super().__init__(aggregate_id=str(user_id), **kwargs)
        self.user_id = user_id

    def payload(self) -> Dict[str, Any]:
        return {"user_id": str(self.user_id)}


class BackupCodesRegenerated(DomainEvent):
    """Event raised when a user's backup-code set is replaced."""

    def __init__(self, user_id: uuid.UUID, count: int, **kwargs):
        super().__init__(aggregate_id=str(user_id), **kwargs)
        self.user_id = user_id
        self.count = count

    def payload(self) -> Dict[str, Any]:
        return {"user_id": str(self.user_id), "count": self.count}
