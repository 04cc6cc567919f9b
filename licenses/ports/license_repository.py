"""
License repository port (interface).

This defines the contract for license persistence operations.
Implementations are in the infrastructure layer.
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Iterable, List, Optional
import uuid

from licenses.domain.license import License


class LicenseRepository(ABC):
    """
    Abstract repository for License entities.

    This is a port in hexagonal architecture - it defines
    what operations are available, not how they're implemented.
    """

    @abstractmethod
    async def insert(self, license: License) -> License:
        """
        Insert a new license.

        Args:
            license: License entity to insert

        Returns:
            Saved license entity

        Raises:
            LicenseKeyConflictError: If the license key already exists
            PersistenceFailureError: If the store rejects the write
        """
        pass

    @abstractmethod
    async def update(self, license: License, fields: Iterable[str]) -> bool:
        """
        Write selected fields of an existing license.

        Only the named fields are written, so concurrent transitions on
        other fields (e.g. a lazy expiry) are not overwritten.

        Args:
            license: License entity carrying the new values
            fields: Entity field names to write

        Returns:
            True if a row was updated, False if the license is gone
        """
        pass

    @abstractmethod
    async def bind_if_unbound(self, license: License) -> bool:
        """
        Store the hardware binding only if the license has none yet.

        Of several concurrent first bindings exactly one returns True.

        Args:
            license: License entity carrying the new binding

        Returns:
            True if this call stored the binding
        """
        pass

    @abstractmethod
    async def find_by_id(self, license_id: uuid.UUID) -> Optional[License]:
        """
        Find a license by ID.

        Args:
            license_id: License UUID

        Returns:
            License entity or None if not found
        """
        pass

    @abstractmethod
    async def find_by_key(self, license_key: str) -> Optional[License]:
        """
        Find a license by its canonical key.

        Args:
            license_key: Canonical license key

        Returns:
            License entity or None if not found
        """
        pass

    @abstractmethod
    async def find_by_user(self, user_id: uuid.UUID) -> List[License]:
        """
        Find all licenses owned by a user, newest first.

        Args:
            user_id: User UUID

        Returns:
            List of License entities
        """
        pass

    @abstractmethod
    async def expire_if_active(self, license_id: uuid.UUID, now: datetime) -> bool:
        """
        Move one license from ACTIVE to EXPIRED.

        Conditional on the stored status still being ACTIVE, so it is
        idempotent and safe to race with the sweep.

        Args:
            license_id: License UUID
            now: Transition time

        Returns:
            True if this call changed the row
        """
        pass

    @abstractmethod
    async def expire_overdue(self, now: datetime) -> int:
        """
        Move every ACTIVE license whose expiry has passed to EXPIRED.

        Args:
            now: Current time

        Returns:
            Number of licenses transitioned
        """
        pass

    @abstractmethod
    async def find_overdue(self, now: datetime) -> List[License]:
        """
        Find ACTIVE licenses whose expiry has passed.

        Args:
            now: Current time

        Returns:
            List of License entities
        """
        pass

    @abstractmethod
    async def find_expiring_between(self, start: datetime, end: datetime) -> List[License]:
        """
        Find ACTIVE licenses expiring in ``[start, end]``.

        Args:
            start: Window start
            end: Window end

        Returns:
            List of License entities, soonest first
        """
        pass
