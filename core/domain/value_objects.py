"""
Value objects for the domain.

Value objects are immutable objects that are defined by their attributes
rather than their identity. They have no identity and are compared by value.
"""
from abc import ABC
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class ValueObject(ABC):
    """
    Base class for value objects.

    Value objects are immutable and compared by value.
    """

    def __eq__(self, other):
        """Compare value objects by their attributes."""
        if not isinstance(other, self.__class__):
            return False
        return self.__dict__ == other.__dict__

    def __hash__(self):
        """Make value objects hashable."""
        return hash(tuple(sorted(self.__dict__.items())))


@dataclass(frozen=True)
class Email(ValueObject):
    """Email value object with validation."""

    value: str

    def __post_init__(self):
        """Validate email format."""
        if not self.value or "@" not in self.value:
            raise ValueError(f"Invalid email address: {self.value}")

    def __str__(self) -> str:
        """Return email as string."""
        return self.value


@dataclass(frozen=True)
class HardwareInfo(ValueObject):
    """
    Identifying attributes of a machine.

    Every field is optional. The field order here is the order used
    when computing a fingerprint and must not change.
    """

    cpu_id: Optional[str] = None
    motherboard_id: Optional[str] = None
    disk_id: Optional[str] = None
    mac_address: Optional[str] = None
    system_uuid: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "HardwareInfo":
        """
        Build hardware info from a loosely-typed mapping.

        Accepts both snake_case and the camelCase keys sent by desktop
        clients. Unknown keys are ignored.

        Args:
            data: Mapping of hardware attributes (may be None)

        Returns:
            HardwareInfo instance
        """
        data = data or {}
        aliases = {
            "cpuId": "cpu_id",
            "motherboardId": "motherboard_id",
            "diskId": "disk_id",
            "macAddress": "mac_address",
            "systemUuid": "system_uuid",
        }
        names = {f.name for f in fields(cls)}
        values = {}
        for key, value in data.items():
            name = aliases.get(key, key)
            if name in names and value is not None:
                values[name] = str(value)
        return cls(**values)

    def ordered_values(self) -> list:
        """Return field values in fingerprint order, missing ones as ''."""
        return [getattr(self, f.name) or "" for f in fields(self)]


class LicenseStatus(Enum):
    """License status value object."""

    ACTIVE = "active"
    EXPIRED = "expired"
    REVOKED = "revoked"

    def __str__(self) -> str:
        """Return status as string."""
        return self.value


class TokenType(Enum):
    """Purpose of a verification token."""

    EMAIL_VERIFICATION = "email_verification"
    PASSWORD_RESET = "password_reset"
    TWO_FACTOR_SETUP = "two_factor_setup"
    TWO_FACTOR_BACKUP = "two_factor_backup"

    def __str__(self) -> str:
        """Return token type as string."""
        return self.value


class TwoFactorMechanism(Enum):
    """Mechanism that satisfied a two-factor check."""

    TOTP = "totp"
    BACKUP = "backup"

    def __str__(self) -> str:
        return self.value
