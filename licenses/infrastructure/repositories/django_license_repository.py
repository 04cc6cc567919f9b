"""
Django implementation of LicenseRepository port.

This adapter converts between domain entities and Django ORM models.
"""
import dataclasses
import logging
import uuid
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from asgiref.sync import sync_to_async
from django.db import DatabaseError, IntegrityError, transaction

from core.domain.exceptions import LicenseKeyConflictError, PersistenceFailureError
from core.domain.value_objects import HardwareInfo, LicenseStatus
from licenses.domain.license import License
from licenses.infrastructure.models import License as LicenseModel
from licenses.ports.license_repository import LicenseRepository

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = {
    "status",
    "expires_at",
    "hardware_fingerprint",
    "hardware_info",
    "revoked_at",
    "revocation_reason",
}


class DjangoLicenseRepository(LicenseRepository):
    """
    Django ORM implementation of LicenseRepository.

    This adapter:
    1. Converts Django models to domain entities
    2. Converts domain entities to column values
    3. Implements repository interface with conditional updates
    """

    def _to_domain(self, model: LicenseModel) -> License:
        """
        Convert Django model to domain entity.

        Args:
            model: Django License model

        Returns:
            License domain entity
        """
        return License(
            id=model.id,
            license_key=model.license_key,
            user_id=model.user_id,
            product_id=model.product_id,
            status=LicenseStatus(model.status),
            expires_at=model.expires_at,
            created_at=model.created_at,
            updated_at=model.updated_at,
            hardware_fingerprint=model.hardware_fingerprint,
            hardware_info=(
                HardwareInfo.from_dict(model.hardware_info) if model.hardware_info else None
            ),
            revoked_at=model.revoked_at,
            revocation_reason=model.revocation_reason,
        )

    def _column_value(self, license: License, name: str) -> Any:
        """
        Convert one entity field to its column value.

        Args:
            license: License domain entity
            name: Entity field name

        Returns:
            Value suitable for the ORM
        """
        value = getattr(license, name)
        if name == "status":
            return value.value
        if name == "hardware_info":
            return dataclasses.asdict(value) if value is not None else None
        return value

    @sync_to_async
    def insert(self, license: License) -> License:
        """
        Insert a new license.

        Args:
            license: License entity to insert

        Returns:
            Saved license entity
        """
        values: Dict[str, Any] = {
            name: self._column_value(license, name) for name in UPDATABLE_FIELDS
        }
        model = LicenseModel(
            id=license.id,
            license_key=license.license_key,
            user_id=license.user_id,
            product_id=license.product_id,
            created_at=license.created_at,
            updated_at=license.updated_at,
            **values,
        )
        try:
            with transaction.atomic():
                model.save(force_insert=True)
        except IntegrityError as e:
            if LicenseModel.objects.filter(license_key=license.license_key).exists():
                raise LicenseKeyConflictError() from e
            logger.error("License insert rejected", exc_info=True)
            raise PersistenceFailureError("License insert rejected") from e
        except DatabaseError as e:
            logger.error("License insert failed", exc_info=True)
            raise PersistenceFailureError("License insert failed") from e
        return self._to_domain(model)

    @sync_to_async
    def update(self, license: License, fields: Iterable[str]) -> bool:
        """
        Write selected fields of an existing license.

        Args:
            license: License entity carrying the new values
            fields: Entity field names to write

        Returns:
            True if a row was updated
        """
        names = set(fields)
        unknown = names - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields cannot be updated: {sorted(unknown)}")
        values = {name: self._column_value(license, name) for name in names}
        values["updated_at"] = license.updated_at
        try:
            return LicenseModel.objects.filter(id=license.id).update(**values) > 0
        except DatabaseError as e:
            logger.error("License update failed for %s", license.id, exc_info=True)
            raise PersistenceFailureError("License update failed") from e

    @sync_to_async
    def bind_if_unbound(self, license: License) -> bool:
        """Conditionally store the binding on a license that has none."""
        try:
            updated = LicenseModel.objects.filter(
                id=license.id, hardware_fingerprint__isnull=True
            ).update(
                hardware_fingerprint=license.hardware_fingerprint,
                hardware_info=self._column_value(license, "hardware_info"),
                updated_at=license.updated_at,
            )
            return updated > 0
        except DatabaseError as e:
            logger.error("License binding failed for %s", license.id, exc_info=True)
            raise PersistenceFailureError("License binding failed") from e

    @sync_to_async
    def find_by_id(self, license_id: uuid.UUID) -> Optional[License]:
        """
        Find a license by ID.

        Args:
            license_id: License UUID

        Returns:
            License entity or None if not found
        """
        try:
            model = LicenseModel.objects.get(id=license_id)
            return self._to_domain(model)
        except LicenseModel.DoesNotExist:
            return None
        except DatabaseError as e:
            raise PersistenceFailureError("License lookup failed") from e

    @sync_to_async
    def find_by_key(self, license_key: str) -> Optional[License]:
        """
        Find a license by its canonical key.

        Args:
            license_key: Canonical license key

        Returns:
            License entity or None if not found
        """
        try:
            model = LicenseModel.objects.get(license_key=license_key)
            return self._to_domain(model)
        except LicenseModel.DoesNotExist:
            return None
        except DatabaseError as e:
            raise PersistenceFailureError("License lookup failed") from e

    @sync_to_async
    def find_by_user(self, user_id: uuid.UUID) -> List[License]:
        models = LicenseModel.objects.filter(user_id=user_id).order_by("-created_at")
        return [self._to_domain(model) for model in models]

    @sync_to_async
    def expire_if_active(self, license_id: uuid.UUID, now: datetime) -> bool:
        """Conditionally move one license from active to expired."""
        try:
            updated = LicenseModel.objects.filter(
                id=license_id, status=LicenseStatus.ACTIVE.value
            ).update(status=LicenseStatus.EXPIRED.value, updated_at=now)
            return updated > 0
        except DatabaseError as e:
            raise PersistenceFailureError("License expiry failed") from e

    @sync_to_async
    def expire_overdue(self, now: datetime) -> int:
        """Batch-move overdue active licenses to expired."""
        try:
            return LicenseModel.objects.filter(
                status=LicenseStatus.ACTIVE.value, expires_at__lt=now
            ).update(status=LicenseStatus.EXPIRED.value, updated_at=now)
        except DatabaseError as e:
            logger.error("Expired license sweep failed", exc_info=True)
            raise PersistenceFailureError("Expired license sweep failed") from e

    @sync_to_async
    def find_overdue(self, now: datetime) -> List[License]:
        models = LicenseModel.objects.filter(
            status=LicenseStatus.ACTIVE.value, expires_at__lt=now
        ).order_by("expires_at")
        return [self._to_domain(model) for model in models]

    @sync_to_async
    def find_expiring_between(self, start: datetime, end: datetime) -> List[License]:
        models = LicenseModel.objects.filter(
            status=LicenseStatus.ACTIVE.value,
            expires_at__gte=start,
            expires_at__lte=end,
        ).order_by("expires_at")
        return [self._to_domain(model) for model in models]
