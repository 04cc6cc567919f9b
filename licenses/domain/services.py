"""
License domain services.

Domain services contain business logic that doesn't naturally
fit within a single entity.
"""
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple

from core.domain.value_objects import HardwareInfo, LicenseStatus
from licenses.domain.fingerprint import generate_hardware_fingerprint
from licenses.domain.license import License, utc_now
from licenses.domain.license_key import generate_license_key


class ValidationFailure(Enum):
    """Why a license failed validation."""

    NOT_FOUND = "not_found"
    INVALID_STATE = "invalid_state"
    PRODUCT_MISMATCH = "product_mismatch"
    EXPIRED = "expired"
    HARDWARE_MISMATCH = "hardware_mismatch"
    PERSISTENCE_FAILURE = "persistence_failure"

    def __str__(self) -> str:
        return self.value


class LicenseKeyGenerator:
    """Domain service for license key generation."""

    @staticmethod
    def generate(product_id: str, user_id: str) -> str:
        """
        Generate a license key.

        Args:
            product_id: Product identifier
            user_id: Owning user identifier

        Returns:
            Generated license key string
        """
        return generate_license_key(str(product_id), str(user_id))


class HardwareFingerprinter:
    """Domain service for hardware fingerprints."""

    @staticmethod
    def fingerprint(hardware_info: HardwareInfo) -> str:
        """
        Compute the fingerprint of a machine.

        Args:
            hardware_info: Identifying attributes

        Returns:
            Hex digest
        """
        return generate_hardware_fingerprint(hardware_info)


class LicenseValidator:
    """Domain service for license validation."""

    @staticmethod
    def validate_license(
        license: License,
        product_id: Optional[str] = None,
        hardware_info: Optional[HardwareInfo] = None,
        current_time: Optional[datetime] = None,
    ) -> Tuple[Optional[ValidationFailure], Optional[str]]:
        """
        Apply the validation rules to a license.

        Rules are checked in order: status, product, expiry, hardware.
        An unbound license passes the hardware check whatever the caller
        sends; binding is a separate step.

        Args:
            license: License entity to validate
            product_id: Product the caller expects, if any
            hardware_info: Caller's machine attributes, if any
            current_time: Current time (defaults to current UTC time)

        Returns:
            Tuple of (failure kind, message); (None, None) when valid
        """
        if license.status != LicenseStatus.ACTIVE:
            return (
                ValidationFailure.INVALID_STATE,
                f"License is {license.status.value}",
            )

        if product_id is not None and str(product_id) != license.product_id:
            return (
                ValidationFailure.PRODUCT_MISMATCH,
                "License is not valid for this product",
            )

        if license.is_overdue(current_time or utc_now()):
            return ValidationFailure.EXPIRED, "License has expired"

        if license.is_bound and hardware_info is not None:
            fingerprint = HardwareFingerprinter.fingerprint(hardware_info)
            if fingerprint != license.hardware_fingerprint:
                return (
                    ValidationFailure.HARDWARE_MISMATCH,
                    "License is bound to different hardware",
                )

        return None, None
