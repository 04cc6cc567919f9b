"""
Verification token repository port (interface).

This defines the contract for token persistence operations.
Implementations are in the infrastructure layer.
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional
import uuid

from accounts.domain.effects import UserEffect
from core.domain.value_objects import TokenType
from verification.domain.token import VerificationToken


class TokenRepository(ABC):
    """
    Abstract repository for VerificationToken entities.

    This is a port in hexagonal architecture - it defines
    what operations are available, not how they're implemented.
    """

    @abstractmethod
    async def replace_live(self, token: VerificationToken) -> VerificationToken:
        """
        Store a token after deleting every other token of its (user, type).

        Delete and insert form one atomic unit: of two concurrent calls
        for the same (user, type), exactly one token survives.

        Args:
            token: Token to store

        Returns:
            Stored token

        Raises:
            NotFoundError: If the owning user does not exist
            PersistenceFailureError: If the store rejects the write
        """
        pass

    @abstractmethod
    async def consume(
        self,
        value: str,
        token_type: TokenType,
        now: datetime,
        effect: Optional[UserEffect] = None,
    ) -> Optional[uuid.UUID]:
        """
        Delete a live token and apply its effect in one transaction.

        The delete is conditional on the row still existing, so of two
        concurrent calls with the same token exactly one succeeds.

        Args:
            value: Exact token string
            token_type: Type the token must have
            now: Tokens expiring at or before this time do not match
            effect: Write to apply to the owning user, if any

        Returns:
            Owning user UUID, or None if no live token matched
        """
        pass

    @abstractmethod
    async def peek(
        self, value: str, token_type: TokenType, now: datetime
    ) -> Optional[uuid.UUID]:
        """
        Look up a live token without consuming it.

        Args:
            value: Exact token string
            token_type: Type the token must have
            now: Current time

        Returns:
            Owning user UUID, or None if no live token matched
        """
        pass

    @abstractmethod
    async def delete_expired(self, now: datetime) -> int:
        """
        Delete every token whose expiry is at or before ``now``.

        Args:
            now: Current time

        Returns:
            Number of tokens deleted
        """
        pass
