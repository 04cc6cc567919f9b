"""
User effects.

Declarative descriptions of the write a verification token authorizes.
The persistence adapter applies the effect in the same transaction that
consumes the token, so a token is never spent without its effect and
never applied twice.
"""
from dataclasses import dataclass, field


@dataclass(frozen=True)
class UserEffect:
    """Base class for effects applied to a user on token redemption."""


@dataclass(frozen=True)
class MarkEmailVerified(UserEffect):
    """Stamp the user's email address as verified."""


@dataclass(frozen=True)
class SetPassword(UserEffect):
    """Replace the user's password."""

    raw_password: str = field(repr=False)

    def __post_init__(self):
        if not self.raw_password:
            raise ValueError("Password cannot be empty")
