"""
License domain entity.

This is the core domain entity representing a license.
It contains business logic and is independent of infrastructure.
"""
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from typing import Optional

from core.domain.value_objects import HardwareInfo, LicenseStatus


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class License:
    """
    License domain entity.

    Represents a credential entitling one user to one product.
    This is an immutable value object with business logic; every
    transition returns a new instance.
    """

    id: uuid.UUID
    license_key: str
    user_id: uuid.UUID
    product_id: str
    status: LicenseStatus
    expires_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime
    hardware_fingerprint: Optional[str] = field(default=None, repr=False)
    hardware_info: Optional[HardwareInfo] = field(default=None, repr=False)
    revoked_at: Optional[datetime] = None
    revocation_reason: Optional[str] = None

    def __post_init__(self):
        """Validate license entity."""
        if not self.license_key:
            raise ValueError("License key is required")
        if not self.user_id:
            raise ValueError("User ID is required")
        if not self.product_id:
            raise ValueError("Product ID is required")
        if self.status != LicenseStatus.REVOKED and (self.revoked_at or self.revocation_reason):
            raise ValueError("Revocation fields are only set on revoked licenses")

    @classmethod
    def create(
        cls,
        license_key: str,
        user_id: uuid.UUID,
        product_id: str,
        duration_days: Optional[int] = None,
        license_id: Optional[uuid.UUID] = None,
        now: Optional[datetime] = None,
    ) -> "License":
        """
        Create a new ACTIVE License entity.

        Args:
            license_key: Canonical license key
            user_id: Owning user UUID
            product_id: Product identifier
            duration_days: Lifetime in days (None for perpetual)
            license_id: Optional UUID (generated if not provided)
            now: Creation time (defaults to current UTC time)

        Returns:
            License entity instance
        """
        if duration_days is not None and duration_days < 1:
            raise ValueError("Duration must be at least 1 day")
        now = now or utc_now()
        return cls(
            id=license_id or uuid.uuid4(),
            license_key=license_key,
            user_id=user_id,
            product_id=str(product_id),
            status=LicenseStatus.ACTIVE,
            expires_at=now + timedelta(days=duration_days) if duration_days else None,
            created_at=now,
            updated_at=now,
        )

    @property
    def is_bound(self) -> bool:
        """Whether the license is locked to a machine."""
        return self.hardware_fingerprint is not None

    def is_overdue(self, current_time: Optional[datetime] = None) -> bool:
        """
        Check whether the expiry time has passed.

        Args:
            current_time: Current time (defaults to current UTC time)

        Returns:
            True if the license has an expiry in the past
        """
        if self.expires_at is None:
            return False
        return self.expires_at < (current_time or utc_now())

    def is_valid(self, current_time: Optional[datetime] = None) -> bool:
        """
        Check if license is currently usable.

        Args:
            current_time: Current time (defaults to current UTC time)

        Returns:
            True if license is active and not past its expiry
        """
        return self.status == LicenseStatus.ACTIVE and not self.is_overdue(current_time)

    def mark_expired(self, now: Optional[datetime] = None) -> "License":
        """
        Create a new License instance with expired status.

        Only an ACTIVE license moves; any other status is returned as is.

        Returns:
            New License instance with expired status
        """
        if self.status != LicenseStatus.ACTIVE:
            return self
        return replace(self, status=LicenseStatus.EXPIRED, updated_at=now or utc_now())

    def revoke(self, reason: Optional[str] = None, now: Optional[datetime] = None) -> "License":
        """
        Create a new License instance with revoked status.

        Revoking an already revoked license is a no-op.

        Args:
            reason: Optional revocation reason
            now: Revocation time

        Returns:
            New License instance with revoked status
        """
        if self.status == LicenseStatus.REVOKED:
            return self
        now = now or utc_now()
        return replace(
            self,
            status=LicenseStatus.REVOKED,
            revoked_at=now,
            revocation_reason=reason,
            updated_at=now,
        )

    def extend(self, days: int, now: Optional[datetime] = None) -> "License":
        """
        Create a new License instance with a later expiry.

        The extension counts from the later of the current expiry and
        now, so a lapsed license gets the full extension. A perpetual
        license is given an expiry of now plus ``days``. Status is left
        unchanged.

        Args:
            days: Positive number of days
            now: Current time

        Returns:
            New License instance with extended expiration
        """
        if isinstance(days, bool) or not isinstance(days, int) or days < 1:
            raise ValueError("Extension days must be a positive integer")
        now = now or utc_now()
        base = max(self.expires_at, now) if self.expires_at else now
        return replace(self, expires_at=base + timedelta(days=days), updated_at=now)

    def bind(
        self,
        fingerprint: str,
        hardware_info: Optional[HardwareInfo] = None,
        now: Optional[datetime] = None,
    ) -> "License":
        """
        Create a new License instance locked to a machine.

        Args:
            fingerprint: Hardware fingerprint digest
            hardware_info: Attributes the fingerprint was computed from
            now: Binding time

        Returns:
            New License instance with the fingerprint recorded
        """
        if not fingerprint:
            raise ValueError("Fingerprint is required")
        return replace(
            self,
            hardware_fingerprint=fingerprint,
            hardware_info=hardware_info,
            updated_at=now or utc_now(),
        )

    def reactivate(self, now: Optional[datetime] = None) -> "License":
        """
        Create a new License instance with active status.

        This is the explicit administrative path out of EXPIRED or
        REVOKED. Revocation fields are cleared.

        Returns:
            New License instance with active status
        """
        if self.status == LicenseStatus.ACTIVE:
            return self
        return replace(
            self,
            status=LicenseStatus.ACTIVE,
            revoked_at=None,
            revocation_reason=None,
            updated_at=now or utc_now(),
        )
