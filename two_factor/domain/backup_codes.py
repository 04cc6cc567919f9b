"""
Backup codes.

Single-use recovery codes drawn from an alphabet without the easily
confused characters 0, O, 1, I and L. Only hashes are persisted.
"""
import hashlib
import secrets
from typing import List

BACKUP_CODE_ALPHABET = "ABCDEFGHJKMNPQRSTUVWXYZ23456789"
BACKUP_CODE_LENGTH = 8
DEFAULT_BACKUP_CODE_COUNT = 10


def generate_backup_codes(count: int = DEFAULT_BACKUP_CODE_COUNT) -> List[str]:
    """
    Generate distinct backup codes.

    Args:
        count: Number of codes

    Returns:
        List of ``count`` codes, each BACKUP_CODE_LENGTH characters
    """
    codes: List[str] = []
    while len(codes) < count:
        code = "".join(secrets.choice(BACKUP_CODE_ALPHABET) for _ in range(BACKUP_CODE_LENGTH))
        if code not in codes:
            codes.append(code)
    return codes


def normalize_backup_code(code: str) -> str:
    """Strip spaces and hyphens and upper-case."""
    return "".join(ch for ch in (code or "") if ch not in " -\t").upper()


def is_backup_code_shaped(code: str) -> bool:
    normalized = normalize_backup_code(code)
    return len(normalized) == BACKUP_CODE_LENGTH and all(
        ch in BACKUP_CODE_ALPHABET for ch in normalized
    )


def hash_backup_code(code: str) -> str:
    """SHA-256 hex digest of the normalized code."""
    return hashlib.sha256(normalize_backup_code(code).encode("utf-8")).hexdigest()
