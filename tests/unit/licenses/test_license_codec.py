"""
Unit tests for the license key codec and hardware fingerprints.
"""
import re
from dataclasses import replace

import pytest

from core.domain.value_objects import HardwareInfo
from licenses.domain.fingerprint import generate_hardware_fingerprint
from licenses.domain.license_key import (
    LICENSE_KEY_PATTERN,
    generate_license_key,
    is_well_formed,
    normalize_license_key,
)


class TestLicenseKeyCodec:
    """Tests for license key generation and normalization."""

    def test_format(self):
        """Test every generated key has the grouped shape."""
        for _ in range(200):
            key = generate_license_key("photo-suite", "user-1")
            assert re.match(r"^[A-Z0-9]{4}-[A-Z0-9]{4}-[A-Z0-9]{4}-[A-Z0-9]{4}$", key)

    def test_repeated_generation_differs(self):
        """Test keys for the same product and user are not repeated."""
        keys = {generate_license_key("photo-suite", "user-1") for _ in range(500)}
        assert len(keys) == 500

    @pytest.mark.parametrize(
        "raw",
        ["abcd-efgh-2345-67ab", "  ABCD-EFGH-2345-67AB ", "abcdefgh234567ab", "ABCD EFGH 2345 67AB"],
    )
    def test_normalize(self, raw):
        """Test typed keys are brought to canonical form."""
        assert normalize_license_key(raw) == "ABCD-EFGH-2345-67AB"

    def test_normalize_leaves_malformed_keys_malformed(self):
        assert not is_well_formed(normalize_license_key("ABC-123"))
        assert not is_well_formed(normalize_license_key(""))
        assert not is_well_formed(normalize_license_key(None))

    def test_pattern_rejects_lowercase(self):
        assert LICENSE_KEY_PATTERN.match("abcd-efgh-2345-67ab") is None


class TestHardwareFingerprint:
    """Tests for hardware fingerprints."""

    def test_deterministic(self, hardware):
        assert generate_hardware_fingerprint(hardware) == generate_hardware_fingerprint(
            HardwareInfo.from_dict(
                {
                    "cpuId": hardware.cpu_id,
                    "motherboardId": hardware.motherboard_id,
                    "diskId": hardware.disk_id,
                    "macAddress": hardware.mac_address,
                    "systemUuid": hardware.system_uuid,
                }
            )
        )

    def test_fixed_length_hex(self, hardware):
        fingerprint = generate_hardware_fingerprint(hardware)
        assert re.match(r"^[0-9a-f]{64}$", fingerprint)

    def test_missing_fields_are_not_errors(self):
        """Test an empty machine still fingerprints."""
        assert len(generate_hardware_fingerprint(HardwareInfo())) == 64

    def test_any_field_change_changes_digest(self, hardware):
        base = generate_hardware_fingerprint(hardware)
        for name in ("cpu_id", "motherboard_id", "disk_id", "mac_address", "system_uuid"):
            changed = replace(hardware, **{name: "different"})
            assert generate_hardware_fingerprint(changed) != base

    def test_field_position_matters(self):
        """Test the same value in a different field gives a different digest."""
        assert generate_hardware_fingerprint(HardwareInfo(cpu_id="X")) != (
            generate_hardware_fingerprint(HardwareInfo(disk_id="X"))
        )
