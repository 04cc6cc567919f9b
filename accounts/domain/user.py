"""
UserAccount domain entity.

A read-only view of the owning user as the credential core sees it.
"""
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from core.domain.value_objects import Email


@dataclass(frozen=True)
class UserAccount:
    """
    UserAccount domain entity.

    ``two_factor_secret`` is present iff ``two_factor_enabled``.
    Backup codes live in their own collection and are not carried here.
    """

    id: uuid.UUID
    email: Email
    name: str
    is_active: bool
    email_verified_at: Optional[datetime]
    two_factor_enabled: bool
    two_factor_secret: Optional[str] = field(default=None, repr=False)

    def __post_init__(self):
        """Validate user entity."""
        if self.two_factor_enabled and not self.two_factor_secret:
            raise ValueError("Two-factor secret is required when two-factor is enabled")
        if not self.two_factor_enabled and self.two_factor_secret:
            raise ValueError("Two-factor secret must be cleared when two-factor is disabled")

    @property
    def is_email_verified(self) -> bool:
        """Whether the email address has been confirmed."""
        return self.email_verified_at is not None
