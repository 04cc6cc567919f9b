"""
Unit tests for License domain services.
"""

import uuid
from dataclasses import replace
from datetime import datetime, timedelta, timezone

from core.domain.value_objects import HardwareInfo
from licenses.domain.license import License
from licenses.domain.services import HardwareFingerprinter, LicenseValidator, ValidationFailure

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_license(**changes):
    license = License.create(
        license_key="ABCD-EFGH-2345-67AB",
        user_id=uuid.uuid4(),
        product_id="photo-suite",
        duration_days=365,
        now=NOW,
    )
    return replace(license, **changes) if changes else license


class TestLicenseValidator:
    """Tests for LicenseValidator service."""

    def test_validate_valid_license(self):
        """Test validating a valid license."""
        failure, message = LicenseValidator.validate_license(make_license(), current_time=NOW)

        assert failure is None
        assert message is None

    def test_validate_expired_license(self):
        """Test validating an expired license."""
        license = make_license(expires_at=NOW - timedelta(seconds=1))

        failure, message = LicenseValidator.validate_license(license, current_time=NOW)

        assert failure == ValidationFailure.EXPIRED
        assert "expired" in message.lower()

    def test_validate_revoked_license(self):
        """Test validating a revoked license names the status."""
        license = make_license().revoke("fraud", NOW)

        failure, message = LicenseValidator.validate_license(license, current_time=NOW)

        assert failure == ValidationFailure.INVALID_STATE
        assert message == "License is revoked"

    def test_validate_product_mismatch(self):
        failure, _ = LicenseValidator.validate_license(
            make_license(), product_id="video-suite", current_time=NOW
        )
        assert failure == ValidationFailure.PRODUCT_MISMATCH

    def test_status_is_checked_before_product(self):
        """Test rule order: status, product, expiry, hardware."""
        license = make_license(expires_at=NOW - timedelta(days=1)).revoke("x", NOW)
        failure, _ = LicenseValidator.validate_license(
            license, product_id="video-suite", current_time=NOW
        )
        assert failure == ValidationFailure.INVALID_STATE

    def test_product_is_checked_before_expiry(self):
        license = make_license(expires_at=NOW - timedelta(days=1))
        failure, _ = LicenseValidator.validate_license(
            license, product_id="video-suite", current_time=NOW
        )
        assert failure == ValidationFailure.PRODUCT_MISMATCH

    def test_hardware_mismatch(self, hardware, other_hardware):
        license = make_license().bind(HardwareFingerprinter.fingerprint(hardware), hardware, NOW)

        failure, message = LicenseValidator.validate_license(
            license, hardware_info=other_hardware, current_time=NOW
        )

        assert failure == ValidationFailure.HARDWARE_MISMATCH
        assert message == "License is bound to different hardware"

    def test_hardware_match(self, hardware):
        license = make_license().bind(HardwareFingerprinter.fingerprint(hardware), hardware, NOW)
        failure, _ = LicenseValidator.validate_license(
            license, hardware_info=hardware, current_time=NOW
        )
        assert failure is None

    def test_unbound_license_accepts_any_hardware(self, hardware):
        failure, _ = LicenseValidator.validate_license(
            make_license(), hardware_info=hardware, current_time=NOW
        )
        assert failure is None

    def test_bound_license_without_caller_hardware(self, hardware):
        """Test a caller that sends no hardware info is not checked."""
        license = make_license().bind(HardwareFingerprinter.fingerprint(hardware), hardware, NOW)
        failure, _ = LicenseValidator.validate_license(license, current_time=NOW)
        assert failure is None

    def test_empty_hardware_is_still_compared(self, hardware):
        license = make_license().bind(HardwareFingerprinter.fingerprint(hardware), hardware, NOW)
        failure, _ = LicenseValidator.validate_license(
            license, hardware_info=HardwareInfo(), current_time=NOW
        )
        assert failure == ValidationFailure.HARDWARE_MISMATCH
