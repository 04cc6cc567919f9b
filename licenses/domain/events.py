"""
License domain events.

Domain events represent something that happened in the license domain.
"""

import uuid
from datetime import datetime
from typing import Any, Dict, Optional

from core.domain.events import DomainEvent


class LicenseIssued(DomainEvent):
    """Event raised when a license is minted for a purchase."""

    def __init__(
        self,
        license_id: uuid.UUID,
        user_id: uuid.UUID,
        product_id: str,
        expires_at: Optional[datetime],
        **kwargs,
    ):
        super().__init__(aggregate_id=str(license_id), **kwargs)
        self.license_id = license_id
        self.user_id = user_id
        self.product_id = product_id
        self.expires_at = expires_at

    def payload(self) -> Dict[str, Any]:
        return {
            "license_id": str(self.license_id),
            "user_id": str(self.user_id),
            "product_id": self.product_id,
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
        }


class LicenseRevoked(DomainEvent):
    """Event raised when a license is revoked."""

    def __init__(
        self,
        license_id: uuid.UUID,
        user_id: uuid.UUID,
        product_id: str,
        reason: Optional[str] = None,
        **kwargs,
    ):
        """
        Initialize LicenseRevoked event.

        Args:
            license_id: License UUID
            user_id: Owner of the license
            product_id: Product the license was for
            reason: Revocation reason, if given
        """
        super().__init__(aggregate_id=str(license_id), **kwargs)
        self.license_id = license_id
        self.user_id = user_id
        self.product_id = product_id
        self.reason = reason

    def payload(self) -> Dict[str, Any]:
        return {
            "license_id": str(self.license_id),
            "user_id": str(self.user_id),
            "product_id": self.product_id,
            "reason": self.reason,
        }


class LicenseExtended(DomainEvent):
    """Event raised when a license expiry is pushed back."""

    def __init__(self, license_id: uuid.UUID, new_expiration: datetime, **kwargs):
        super().__init__(aggregate_id=str(license_id), **kwargs)
        self.license_id = license_id
        self.new_expiration = new_expiration

    def payload(self) -> Dict[str, Any]:
        return {
            "license_id": str(self.license_id),
            "new_expiration": self.new_expiration.isoformat(),
        }


class LicenseReactivated(DomainEvent):
    """Event raised when an administrator returns a license to ACTIVE."""

    def __init__(self, license_id: uuid.UUID, **kwargs):
        super().__init__(aggregate_id=str(license_id), **kwargs)
        self.license_id = license_id

    def payload(self) -> Dict[str, Any]:
        return {"license_id": str(self.license_id)}


class LicenseBound(DomainEvent):
    """Event raised when a license is locked to a machine."""

    def __init__(self, license_id: uuid.UUID, rebind: bool = False, **kwargs):
        super().__init__(aggregate_id=str(license_id), **kwargs)
        self.license_id = license_id
        self.rebind = rebind

    def payload(self) -> Dict[str, Any]:
        return {"license_id": str(self.license_id), "rebind": self.rebind}


class LicenseExpiring(DomainEvent):
    """Event raised when a license is about to expire."""

    def __init__(
        self,
        license_id: uuid.UUID,
        user_id: uuid.UUID,
        product_id: str,
        expires_at: datetime,
        urgent: bool = False,
        **kwargs,
    ):
        """
        Initialize LicenseExpiring event.

        Args:
            license_id: License UUID
            user_id: Owner of the license
            product_id: Product the license is for
            expires_at: When the license expires
            urgent: True for the last warning before expiry
        """
        super().__init__(aggregate_id=str(license_id), **kwargs)
        self.license_id = license_id
        self.user_id = user_id
        self.product_id = product_id
        self.expires_at = expires_at
        self.urgent = urgent

    def payload(self) -> Dict[str, Any]:
        return {
            "license_id": str(self.license_id),
            "user_id": str(self.user_id),
            "product_id": self.product_id,
            "expires_at": self.expires_at.isoformat(),
            "urgent": self.urgent,
        }
