"""
License DTOs returned to callers.
"""
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from core.domain.exceptions import (
    ExpiredError,
    HardwareMismatchError,
    InvalidStateError,
    NotFoundError,
    PersistenceFailureError,
    ProductMismatchError,
)
from licenses.domain.license import License
from licenses.domain.services import ValidationFailure

FAILURE_EXCEPTIONS = {
    ValidationFailure.NOT_FOUND: NotFoundError,
    ValidationFailure.INVALID_STATE: InvalidStateError,
    ValidationFailure.PRODUCT_MISMATCH: ProductMismatchError,
    ValidationFailure.EXPIRED: ExpiredError,
    ValidationFailure.HARDWARE_MISMATCH: HardwareMismatchError,
    ValidationFailure.PERSISTENCE_FAILURE: PersistenceFailureError,
}


@dataclass(frozen=True)
class LicenseDTO:
    """
    Public projection of a license.

    Never carries the hardware fingerprint or bound hardware details.
    """

    id: uuid.UUID
    license_key: str
    status: str
    user_id: uuid.UUID
    product_id: str
    expires_at: Optional[datetime]

    @classmethod
    def from_entity(cls, license: License) -> "LicenseDTO":
        return cls(
            id=license.id,
            license_key=license.license_key,
            status=license.status.value,
            user_id=license.user_id,
            product_id=license.product_id,
            expires_at=license.expires_at,
        )


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a license validation: success or a tagged failure."""

    is_valid: bool
    license: Optional[LicenseDTO] = None
    failure: Optional[ValidationFailure] = None
    message: Optional[str] = None
    status: Optional[str] = None

    @classmethod
    def success(cls, license: License) -> "ValidationResult":
        return cls(
            is_valid=True,
            license=LicenseDTO.from_entity(license),
            status=license.status.value,
        )

    @classmethod
    def fail(
        cls, failure: ValidationFailure, message: str, status: Optional[str] = None
    ) -> "ValidationResult":
        return cls(is_valid=False, failure=failure, message=message, status=status)

    def raise_for_failure(self) -> None:
        """
        Raise the domain exception matching a failed validation.

        Does nothing for a valid result.

        Raises:
            DomainException: Subclass named by ``failure``
        """
        if self.is_valid:
            return
        exception_class = FAILURE_EXCEPTIONS[self.failure]
        if self.message:
            raise exception_class(self.message)
        raise exception_class()
