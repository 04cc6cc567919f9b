"""
Verification token service.

Issues and redeems short-lived single-use tokens. Redemption failures are
reported with one generic error whatever the real cause, so callers
cannot tell an expired token from one that never existed.
"""
import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Mapping, Optional

from accounts.domain.effects import MarkEmailVerified, SetPassword, UserEffect
from accounts.domain.user import UserAccount
from accounts.ports.user_repository import UserRepository
from core.domain.exceptions import InvalidOrExpiredTokenError
from core.domain.value_objects import TokenType
from core.metrics import (
    verification_token_redemptions_total,
    verification_tokens_issued_total,
)
from verification.domain.token import DEFAULT_TOKEN_TTLS, VerificationToken
from verification.ports.token_repository import TokenRepository

logger = logging.getLogger(__name__)


class VerificationTokenService:
    """Application service for verification tokens."""

    def __init__(
        self,
        token_repository: TokenRepository,
        user_repository: UserRepository,
        ttls: Optional[Mapping[TokenType, timedelta]] = None,
    ):
        """Initialize service with repositories and per-type lifetimes."""
        self.token_repository = token_repository
        self.user_repository = user_repository
        self.ttls = {**DEFAULT_TOKEN_TTLS, **(ttls or {})}

    async def issue(self, user_id: uuid.UUID, token_type: TokenType) -> VerificationToken:
        """
        Issue a new token, invalidating earlier ones of the same type.

        Args:
            user_id: Owning user UUID
            token_type: Purpose of the token

        Returns:
            The stored token; its value is what gets sent to the user

        Raises:
            NotFoundError: If the user does not exist
            PersistenceFailureError: If the token could not be stored
        """
        token = VerificationToken.create(user_id, token_type, self.ttls)
        stored = await self.token_repository.replace_live(token)
        verification_tokens_issued_total.labels(token_type=token_type.value).inc()
        logger.info(
            "Verification token issued",
            extra={"user_id": str(user_id), "token_type": token_type.value},
        )
        return stored

    async def redeem(
        self,
        token: str,
        token_type: TokenType,
        effect: Optional[UserEffect] = None,
    ) -> UserAccount:
        """
        Consume a token and return its owner.

        The token is deleted in the same transaction that applies
        ``effect``, so a token is redeemed at most once.

        Args:
            token: Token value as received
            token_type: Type the token must have
            effect: Write the token authorizes, if any

        Returns:
            The owning user, read after the effect was applied

        Raises:
            InvalidOrExpiredTokenError: On any mismatch, expiry or replay
            PersistenceFailureError: If the store is unavailable
        """
        user_id = None
        if token:
            user_id = await self.token_repository.consume(
                token.strip(), token_type, self._now(), effect
            )
        user = await self.user_repository.find_by_id(user_id) if user_id else None

        if user is None:
            verification_token_redemptions_total.labels(
                token_type=token_type.value, outcome="rejected"
            ).inc()
            logger.info("Verification token rejected", extra={"token_type": token_type.value})
            raise InvalidOrExpiredTokenError()

        verification_token_redemptions_total.labels(
            token_type=token_type.value, outcome="redeemed"
        ).inc()
        logger.info(
            "Verification token redeemed",
            extra={"user_id": str(user.id), "token_type": token_type.value},
        )
        return user

    async def peek(self, token: str, token_type: TokenType) -> Optional[UserAccount]:
        """
        Check whether a token is live without consuming it.

        Args:
            token: Token value as received
            token_type: Type the token must have

        Returns:
            The owning user, or None
        """
        if not token:
            return None
        user_id = await self.token_repository.peek(token.strip(), token_type, self._now())
        if user_id is None:
            return None
        return await self.user_repository.find_by_id(user_id)

    async def sweep_expired(self) -> int:
        """
        Delete every expired token.

        Returns:
            Number of tokens deleted
        """
        count = await self.token_repository.delete_expired(self._now())
        logger.info("Deleted %d expired verification tokens", count)
        return count

    async def confirm_email(self, token: str) -> UserAccount:
        """Redeem an email-verification token and mark the address verified."""
        return await self.redeem(token, TokenType.EMAIL_VERIFICATION, MarkEmailVerified())

    async def reset_password(self, token: str, new_password: str) -> UserAccount:
        """
        Redeem a password-reset token and set the new password.

        Raises:
            ValueError: If ``new_password`` is empty
            InvalidOrExpiredTokenError: If the token does not redeem
        """
        return await self.redeem(token, TokenType.PASSWORD_RESET, SetPassword(new_password))

    @staticmethod
    def _now() -> datetime:
        return datetime.now(timezone.utc)
