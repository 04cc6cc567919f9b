"""
User repository port (interface).

This defines the contract for user persistence operations, including the
two-factor credential embedded on the user. Every write method here is a
single atomic unit in the implementation.
"""
from abc import ABC, abstractmethod
from typing import List, Optional
import uuid

from accounts.domain.user import UserAccount


class UserRepository(ABC):
    """
    Abstract repository for UserAccount entities.

    This is a port in hexagonal architecture - it defines
    what operations are available, not how they're implemented.
    """

    @abstractmethod
    async def find_by_id(self, user_id: uuid.UUID) -> Optional[UserAccount]:
        """
        Find a user by ID.

        Args:
            user_id: User UUID

        Returns:
            UserAccount entity or None if not found
        """
        pass

    @abstractmethod
    async def enable_two_factor(
        self, user_id: uuid.UUID, secret: str, backup_code_hashes: List[str]
    ) -> bool:
        """
        Turn on two-factor authentication.

        Sets the flag, stores the secret and replaces the backup-code set
        in one transaction.

        Args:
            user_id: User UUID
            secret: Confirmed base32 TOTP secret
            backup_code_hashes: Hashes of the new backup codes

        Returns:
            True if the user existed with two-factor off and is now
            enabled; False leaves an existing secret untouched
        """
        pass

    @abstractmethod
    async def disable_two_factor(self, user_id: uuid.UUID) -> bool:
        """
        Turn off two-factor authentication.

        Clears the flag, the secret and every backup code together.

        Args:
            user_id: User UUID

        Returns:
            True if the user existed and was updated
        """
        pass

    @abstractmethod
    async def replace_backup_codes(
        self, user_id: uuid.UUID, backup_code_hashes: List[str]
    ) -> bool:
        """
        Replace the whole backup-code set.

        The enabled flag is checked under the same lock as the write.

        Args:
            user_id: User UUID
            backup_code_hashes: Hashes of the new backup codes

        Returns:
            True if the user existed with two-factor enabled
        """
        pass

    @abstractmethod
    async def consume_backup_code(self, user_id: uuid.UUID, code_hash: str) -> bool:
        """
        Remove a backup code if it is still in the set.

        The removal is conditional, so of several concurrent attempts with
        the same code exactly one returns True.

        Args:
            user_id: User UUID
            code_hash: Hash of the normalized submitted code

        Returns:
            True if this call removed the code
        """
        pass

    @abstractmethod
    async def count_backup_codes(self, user_id: uuid.UUID) -> int:
        """
        Count unused backup codes.

        Args:
            user_id: User UUID

        Returns:
            Number of remaining backup codes
        """
        pass
