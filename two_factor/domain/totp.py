"""
TOTP (Time-based One-Time Password) helpers.

RFC 6238 with authenticator-app defaults:
- 6-digit codes
- 30-second time step
- HMAC-SHA1
- Base32 secret encoding
"""
import base64
import binascii
import io
from datetime import datetime
from typing import Optional, Union

import pyotp
import qrcode

ForTime = Union[int, float, datetime, None]


def generate_totp_secret() -> str:
    """
    Generate a new random TOTP secret.

    Returns:
        32-character Base32 string
    """
    return pyotp.random_base32()


def is_valid_secret(secret: str) -> bool:
    """Whether ``secret`` decodes as Base32."""
    if not secret:
        return False
    try:
        base64.b32decode(secret.upper(), casefold=True)
    except (binascii.Error, ValueError):
        return False
    return True


def provisioning_uri(secret: str, account_label: str, issuer: str) -> str:
    """
    Build the otpauth:// URI that authenticator apps scan.

    Format: otpauth://totp/{issuer}:{label}?secret={secret}&issuer={issuer}
    """
    return pyotp.TOTP(secret).provisioning_uri(name=account_label, issuer_name=issuer)


def qr_code_data_uri(uri: str) -> str:
    """
    Render ``uri`` as a QR code PNG wrapped in a data URI.

    Returns:
        ``data:image/png;base64,...`` string usable as an <img> src
    """
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=10,
        border=4,
    )
    qr.add_data(uri)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")

    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
    return f"data:image/png;base64,{encoded}"


def format_manual_entry_key(secret: str) -> str:
    """Split a secret into space-separated groups of four for typing."""
    return " ".join(secret[i:i + 4] for i in range(0, len(secret), 4))


def verify_code(
    secret: str,
    code: str,
    for_time: ForTime = None,
    valid_window: int = 1,
) -> bool:
    """
    Verify a 6-digit TOTP code.

    Args:
        secret: Base32 shared secret
        code: Code as typed by the user (spaces allowed)
        for_time: Time to verify at (defaults to now)
        valid_window: Number of 30-second steps tolerated either side

    Returns:
        True if valid, False otherwise
    """
    if not secret or not code:
        return False

    code = code.strip().replace(" ", "")
    if len(code) != 6 or not code.isdigit():
        return False

    return pyotp.TOTP(secret).verify(code, for_time=for_time, valid_window=valid_window)


def code_at(secret: str, for_time: ForTime = None) -> str:
    """
    Get the TOTP code for a secret at a given time.

    Meant for tests and diagnostics; never expose it to a client.
    """
    totp = pyotp.TOTP(secret)
    return totp.now() if for_time is None else totp.at(for_time)
