"""
Hardware fingerprinting.

A license can be locked to one machine by storing the digest computed
here. The function is pure: the same attributes always produce the same
digest.
"""
import hashlib

from core.domain.value_objects import HardwareInfo

FINGERPRINT_SEPARATOR = "|"


def generate_hardware_fingerprint(hardware_info: HardwareInfo) -> str:
    """
    Compute the fingerprint of a machine.

    Fields are joined in a fixed order with a fixed separator; missing
    fields contribute an empty string.

    Args:
        hardware_info: Identifying attributes of the machine

    Returns:
        64-character hex SHA-256 digest
    """
    data = FINGERPRINT_SEPARATOR.join(hardware_info.ordered_values())
    return hashlib.sha256(data.encode("utf-8")).hexdigest()
