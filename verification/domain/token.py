"""
VerificationToken domain entity and expiry policy.
"""
import secrets
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Dict, Mapping, Optional

from core.domain.value_objects import TokenType

TOKEN_BYTES = 32

DEFAULT_TOKEN_TTLS: Dict[TokenType, timedelta] = {
    TokenType.EMAIL_VERIFICATION: timedelta(hours=24),
    TokenType.PASSWORD_RESET: timedelta(hours=1),
    TokenType.TWO_FACTOR_SETUP: timedelta(hours=2),
    TokenType.TWO_FACTOR_BACKUP: timedelta(hours=2),
}


def generate_token_value() -> str:
    """Return a 256-bit random token as 64 lowercase hex characters."""
    return secrets.token_hex(TOKEN_BYTES)


@dataclass(frozen=True)
class VerificationToken:
    """
    A single-use secret authorizing one action for one user.

    The token value is a bearer secret and is kept out of ``repr``.
    """

    id: uuid.UUID
    user_id: uuid.UUID
    token: str = field(repr=False)
    type: TokenType
    expires_at: datetime
    created_at: datetime

    def __post_init__(self):
        if not self.token:
            raise ValueError("Token value is required")
        if self.expires_at <= self.created_at:
            raise ValueError("Token must expire after it is created")

    @classmethod
    def create(
        cls,
        user_id: uuid.UUID,
        token_type: TokenType,
        ttls: Optional[Mapping[TokenType, timedelta]] = None,
        now: Optional[datetime] = None,
    ) -> "VerificationToken":
        """
        Create a fresh token for a user.

        Args:
            user_id: Owning user UUID
            token_type: Purpose of the token
            ttls: Lifetime per token type (defaults to DEFAULT_TOKEN_TTLS)
            now: Creation time (defaults to current UTC time)

        Returns:
            VerificationToken entity
        """
        ttls = ttls or DEFAULT_TOKEN_TTLS
        now = now or datetime.now(timezone.utc)
        return cls(
            id=uuid.uuid4(),
            user_id=user_id,
            token=generate_token_value(),
            type=token_type,
            expires_at=now + ttls[token_type],
            created_at=now,
        )

    def is_live(self, current_time: Optional[datetime] = None) -> bool:
        """Whether the token has not yet expired."""
        return self.expires_at > (current_time or datetime.now(timezone.utc))
