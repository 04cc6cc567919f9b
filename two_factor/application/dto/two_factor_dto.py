"""
Two-factor DTOs returned to callers.
"""
from dataclasses import dataclass, field
from typing import List, Optional

from core.domain.exceptions import InvalidCodeError
from core.domain.value_objects import TwoFactorMechanism


@dataclass(frozen=True)
class TwoFactorSetup:
    """
    Material for a pending two-factor setup.

    Nothing here is persisted until the user confirms a code.
    """

    secret: str = field(repr=False)
    provisioning_uri: str = field(repr=False)
    qr_code: str = field(repr=False)
    backup_codes: List[str] = field(repr=False)
    manual_entry_key: str = field(repr=False)


@dataclass(frozen=True)
class TwoFactorVerification:
    """Outcome of a two-factor check and the mechanism that passed."""

    success: bool
    mechanism: Optional[TwoFactorMechanism] = None

    @classmethod
    def failed(cls) -> "TwoFactorVerification":
        return cls(success=False)

    def raise_for_failure(self) -> None:
        """Raise InvalidCodeError unless the check passed."""
        if not self.success:
            raise InvalidCodeError()
