"""
License key codec.

Keys look like ``XXXX-XXXX-XXXX-XXXX``: four groups of uppercase
alphanumerics. They are derived from a hash, so they reveal nothing about
the product or owner they were minted for.
"""
import base64
import hashlib
import re
import secrets
import time

LICENSE_KEY_GROUPS = 4
LICENSE_KEY_GROUP_LENGTH = 4
LICENSE_KEY_PATTERN = re.compile(r"^[A-Z0-9]{4}-[A-Z0-9]{4}-[A-Z0-9]{4}-[A-Z0-9]{4}$")


def generate_license_key(product_id: str, user_id: str) -> str:
    """
    Generate a license key in format: XXXX-XXXX-XXXX-XXXX.

    The hash input mixes product, owner, a nanosecond timestamp and a
    fresh random nonce. Uniqueness is enforced by the store; on a
    conflict the caller generates again.

    Args:
        product_id: Product identifier
        user_id: Owning user identifier

    Returns:
        Generated license key string
    """
    nonce = secrets.token_hex(16)
    data = f"{product_id}-{user_id}-{time.time_ns()}-{nonce}"
    digest = hashlib.sha256(data.encode("utf-8")).digest()
    encoded = base64.b32encode(digest).decode("ascii")

    length = LICENSE_KEY_GROUPS * LICENSE_KEY_GROUP_LENGTH
    chars = encoded[:length]
    return "-".join(
        chars[i:i + LICENSE_KEY_GROUP_LENGTH]
        for i in range(0, length, LICENSE_KEY_GROUP_LENGTH)
    )


def normalize_license_key(raw_key: str) -> str:
    """
    Bring a user-typed key into canonical form.

    Surrounding whitespace is dropped and letters are upper-cased. A key
    typed without hyphens is regrouped.

    Args:
        raw_key: Key as supplied by a caller

    Returns:
        Canonical key (may still be malformed)
    """
    key = (raw_key or "").strip().upper()
    compact = key.replace("-", "").replace(" ", "")
    if len(compact) == LICENSE_KEY_GROUPS * LICENSE_KEY_GROUP_LENGTH and compact.isalnum():
        return "-".join(
            compact[i:i + LICENSE_KEY_GROUP_LENGTH]
            for i in range(0, len(compact), LICENSE_KEY_GROUP_LENGTH)
        )
    return key


def is_well_formed(key: str) -> bool:
    """Check that a key has the canonical shape."""
    return bool(LICENSE_KEY_PATTERN.match(key or ""))
