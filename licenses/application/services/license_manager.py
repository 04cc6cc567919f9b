"""
License lifecycle service.

Owns every state transition of a license: issue, validate (with lazy
expiry), bind, revoke, extend, reactivate and the expiry sweep.
"""
import logging
import uuid
from datetime import timedelta
from typing import Any, Mapping, Optional, Union

from core.domain.events import EventBus
from core.domain.exceptions import LicenseKeyConflictError, PersistenceFailureError
from core.domain.value_objects import HardwareInfo, LicenseStatus
from core.metrics import (
    license_key_conflicts_total,
    license_validations_total,
    licenses_expired_total,
    licenses_issued_total,
    licenses_revoked_total,
)
from core.ports.audit_log import AuditEvent, AuditLog
from licenses.application.dto.license_dto import ValidationResult
from licenses.domain.events import (
    LicenseBound,
    LicenseExpiring,
    LicenseExtended,
    LicenseIssued,
    LicenseReactivated,
    LicenseRevoked,
)
from licenses.domain.license import License, utc_now
from licenses.domain.license_key import is_well_formed, normalize_license_key
from licenses.domain.services import (
    HardwareFingerprinter,
    LicenseKeyGenerator,
    LicenseValidator,
    ValidationFailure,
)
from licenses.ports.license_repository import LicenseRepository

logger = logging.getLogger(__name__)

HardwareInput = Union[HardwareInfo, Mapping[str, Any], None]

DEFAULT_MAX_KEY_ATTEMPTS = 3


def _coerce_hardware(hardware_info: HardwareInput) -> Optional[HardwareInfo]:
    if hardware_info is None or isinstance(hardware_info, HardwareInfo):
        return hardware_info
    return HardwareInfo.from_dict(dict(hardware_info))


class LicenseManager:
    """
    Application service for the license state machine.

    Lookups by id that miss return False or None rather than raising, and
    validation failures come back as a ``ValidationResult``. Nothing is
    cached between calls; every check reads the store.
    """

    def __init__(
        self,
        license_repository: LicenseRepository,
        audit_log: AuditLog,
        event_bus: EventBus,
        max_key_attempts: int = DEFAULT_MAX_KEY_ATTEMPTS,
    ):
        """Initialize service with its collaborators."""
        self.license_repository = license_repository
        self.audit_log = audit_log
        self.event_bus = event_bus
        self.max_key_attempts = max_key_attempts

    async def issue(
        self,
        user_id: uuid.UUID,
        product_id: str,
        duration_days: Optional[int] = None,
        actor_id: Optional[str] = None,
    ) -> License:
        """
        Mint and store a new ACTIVE license.

        Key generation is retried with a fresh nonce when the store reports
        a duplicate key, up to ``max_key_attempts`` times.

        Args:
            user_id: Owning user UUID
            product_id: Product identifier
            duration_days: Lifetime in days (None for perpetual)
            actor_id: Who triggered the issue, for the audit trail

        Returns:
            The stored License entity

        Raises:
            PersistenceFailureError: If no unique key could be stored
        """
        for attempt in range(1, self.max_key_attempts + 1):
            license = License.create(
                license_key=LicenseKeyGenerator.generate(product_id, user_id),
                user_id=user_id,
                product_id=product_id,
                duration_days=duration_days,
            )
            try:
                saved = await self.license_repository.insert(license)
                break
            except LicenseKeyConflictError:
                license_key_conflicts_total.inc()
                logger.warning(
                    "License key collision, regenerating",
                    extra={"attempt": attempt, "product_id": str(product_id)},
                )
        else:
            raise PersistenceFailureError(
                f"Could not generate a unique license key after {self.max_key_attempts} attempts"
            )

        licenses_issued_total.labels(product_id=str(product_id)).inc()
        logger.info(
            "License issued",
            extra={"license_id": str(saved.id), "product_id": saved.product_id},
        )
        await self.audit_log.record(
            AuditEvent(
                actor_id=actor_id or str(user_id),
                action="LICENSE_ISSUED",
                details={"license_id": str(saved.id), "product_id": saved.product_id},
            )
        )
        await self.event_bus.publish(
            LicenseIssued(
                license_id=saved.id,
                user_id=saved.user_id,
                product_id=saved.product_id,
                expires_at=saved.expires_at,
                actor_id=actor_id,
            )
        )
        return saved

    async def validate(
        self,
        license_key: str,
        product_id: Optional[str] = None,
        hardware_info: HardwareInput = None,
    ) -> ValidationResult:
        """
        Validate a license key.

        A license found past its expiry is moved to EXPIRED as a side
        effect. An unbound license validates without being bound.

        Args:
            license_key: Key as supplied by the caller
            product_id: Product the caller expects, if any
            hardware_info: Caller's machine attributes, if any

        Returns:
            ValidationResult with the public projection or a failure kind
        """
        key = normalize_license_key(license_key)
        try:
            license = await self.license_repository.find_by_key(key) if is_well_formed(key) else None
        except PersistenceFailureError:
            logger.error("License lookup failed during validation", exc_info=True)
            return self._failed(ValidationFailure.PERSISTENCE_FAILURE, "License validation failed")

        if license is None:
            return self._failed(ValidationFailure.NOT_FOUND, "License key not found")

        now = utc_now()
        failure, message = LicenseValidator.validate_license(
            license, product_id, _coerce_hardware(hardware_info), now
        )

        status = license.status
        if failure == ValidationFailure.EXPIRED:
            await self._expire_lazily(license, now)
            status = LicenseStatus.EXPIRED

        if failure is not None:
            logger.info(
                "License validation failed",
                extra={"license_id": str(license.id), "failure": failure.value},
            )
            return self._failed(failure, message, status.value)

        license_validations_total.labels(outcome="valid").inc()
        return ValidationResult.success(license)

    async def bind(
        self,
        license_id: uuid.UUID,
        hardware_info: HardwareInput,
        allow_rebind: bool = True,
        actor_id: Optional[str] = None,
    ) -> bool:
        """
        Lock a license to a machine.

        Binding the same machine again is a silent success. Binding a
        different machine overwrites the stored fingerprint unless
        ``allow_rebind`` is False. A first binding is conditional on the
        license still being unbound, so concurrent first bindings of
        different machines have one winner.

        Args:
            license_id: License UUID
            hardware_info: Machine attributes
            allow_rebind: Whether an existing binding may be replaced
            actor_id: Who requested the binding

        Returns:
            True if the license is now bound to this machine
        """
        info = _coerce_hardware(hardware_info) or HardwareInfo()
        fingerprint = HardwareFingerprinter.fingerprint(info)
        try:
            license = await self.license_repository.find_by_id(license_id)
            if license is None:
                return False
            if license.hardware_fingerprint == fingerprint:
                return True
            rebind = license.is_bound
            if rebind and not allow_rebind:
                logger.info("Rebind refused", extra={"license_id": str(license_id)})
                return False

            bound = license.bind(fingerprint, info)
            if rebind:
                stored = await self.license_repository.update(
                    bound, ["hardware_fingerprint", "hardware_info"]
                )
            else:
                stored = await self.license_repository.bind_if_unbound(bound)
            if not stored:
                logger.info("Binding not stored", extra={"license_id": str(license_id)})
                return False
        except PersistenceFailureError:
            logger.error("Hardware binding failed for %s", license_id, exc_info=True)
            return False

        await self.audit_log.record(
            AuditEvent(
                actor_id=actor_id or str(license.user_id),
                action="LICENSE_REBOUND" if rebind else "LICENSE_BOUND",
                details={"license_id": str(license_id)},
            )
        )
        await self.event_bus.publish(LicenseBound(license_id=license_id, rebind=rebind, actor_id=actor_id))
        return True

    async def revoke(
        self,
        license_id: uuid.UUID,
        reason: Optional[str] = None,
        actor_id: Optional[str] = None,
    ) -> bool:
        """
        Revoke a license.

        Revoking an already revoked license succeeds without change.

        Args:
            license_id: License UUID
            reason: Optional revocation reason
            actor_id: Who revoked the license

        Returns:
            True if the license is revoked after the call
        """
        try:
            license = await self.license_repository.find_by_id(license_id)
            if license is None:
                return False
            if license.status == LicenseStatus.REVOKED:
                return True

            revoked = license.revoke(reason)
            if not await self.license_repository.update(
                revoked, ["status", "revoked_at", "revocation_reason"]
            ):
                return False
        except PersistenceFailureError:
            logger.error("License revocation failed for %s", license_id, exc_info=True)
            return False

        licenses_revoked_total.inc()
        logger.info("License revoked", extra={"license_id": str(license_id)})
        await self.audit_log.record(
            AuditEvent(
                actor_id=actor_id,
                action="LICENSE_REVOKED",
                details={
                    "license_id": str(license_id),
                    "reason": reason or "No reason provided",
                },
            )
        )
        await self.event_bus.publish(
            LicenseRevoked(
                license_id=license_id,
                user_id=revoked.user_id,
                product_id=revoked.product_id,
                reason=reason,
                actor_id=actor_id,
            )
        )
        return True

    async def extend(
        self,
        license_id: uuid.UUID,
        days: int,
        actor_id: Optional[str] = None,
    ) -> bool:
        """
        Push a license's expiry back by ``days``.

        Counts from the later of the current expiry and now. The status
        is not changed; an EXPIRED license stays EXPIRED until
        reactivated.

        Args:
            license_id: License UUID
            days: Positive number of days
            actor_id: Who extended the license

        Returns:
            True if the expiry was updated

        Raises:
            ValueError: If ``days`` is not a positive integer
        """
        if isinstance(days, bool) or not isinstance(days, int) or days < 1:
            raise ValueError("Extension days must be a positive integer")
        try:
            license = await self.license_repository.find_by_id(license_id)
            if license is None:
                return False
            extended = license.extend(days)
            if not await self.license_repository.update(extended, ["expires_at"]):
                return False
        except PersistenceFailureError:
            logger.error("License extension failed for %s", license_id, exc_info=True)
            return False

        await self.audit_log.record(
            AuditEvent(
                actor_id=actor_id,
                action="LICENSE_EXTENDED",
                details={"license_id": str(license_id), "days": days},
            )
        )
        await self.event_bus.publish(
            LicenseExtended(
                license_id=license_id,
                new_expiration=extended.expires_at,
                actor_id=actor_id,
            )
        )
        return True

    async def reactivate(self, license_id: uuid.UUID, actor_id: Optional[str] = None) -> bool:
        """
        Return an EXPIRED or REVOKED license to ACTIVE.

        This is the only way out of REVOKED. A license whose expiry is
        still in the past will lapse again on its next validation unless
        it is also extended.

        Args:
            license_id: License UUID
            actor_id: Administrator performing the change

        Returns:
            True if the license is active after the call
        """
        try:
            license = await self.license_repository.find_by_id(license_id)
            if license is None:
                return False
            if license.status == LicenseStatus.ACTIVE:
                return True
            reactivated = license.reactivate()
            if not await self.license_repository.update(
                reactivated, ["status", "revoked_at", "revocation_reason"]
            ):
                return False
        except PersistenceFailureError:
            logger.error("License reactivation failed for %s", license_id, exc_info=True)
            return False

        await self.audit_log.record(
            AuditEvent(
                actor_id=actor_id,
                action="LICENSE_REACTIVATED",
                details={"license_id": str(license_id), "previous_status": license.status.value},
            )
        )
        await self.event_bus.publish(LicenseReactivated(license_id=license_id, actor_id=actor_id))
        return True

    async def sweep_expired(self) -> int:
        """
        Move every overdue ACTIVE license to EXPIRED.

        Safe to run alongside lazy expiry in ``validate``.

        Returns:
            Number of licenses transitioned
        """
        count = await self.license_repository.expire_overdue(utc_now())
        if count:
            licenses_expired_total.labels(trigger="sweep").inc(count)
        logger.info("Marked %d licenses as expired", count)
        return count

    async def list_expiring_within(self, days: int) -> list:
        """
        List ACTIVE licenses expiring between now and ``days`` from now.

        Args:
            days: Horizon in days

        Returns:
            List of License entities, soonest first
        """
        now = utc_now()
        return await self.license_repository.find_expiring_between(now, now + timedelta(days=days))

    async def notify_expiring(self, days: int, urgent: bool = False) -> int:
        """
        Publish an expiry warning for each license expiring within ``days``.

        Args:
            days: Horizon in days
            urgent: Mark the warnings as the final reminder

        Returns:
            Number of warnings published
        """
        expiring = await self.list_expiring_within(days)
        for license in expiring:
            await self.event_bus.publish(
                LicenseExpiring(
                    license_id=license.id,
                    user_id=license.user_id,
                    product_id=license.product_id,
                    expires_at=license.expires_at,
                    urgent=urgent,
                )
            )
        return len(expiring)

    async def get_license(self, license_id: uuid.UUID) -> Optional[License]:
        """Find a license by id, or None."""
        return await self.license_repository.find_by_id(license_id)

    async def list_for_user(self, user_id: uuid.UUID) -> list:
        """List a user's licenses, newest first."""
        return await self.license_repository.find_by_user(user_id)

    async def _expire_lazily(self, license: License, now) -> None:
        try:
            changed = await self.license_repository.expire_if_active(license.id, now)
        except PersistenceFailureError:
            logger.error("Lazy expiry failed for %s", license.id, exc_info=True)
            return
        if changed:
            licenses_expired_total.labels(trigger="validation").inc()
            await self.audit_log.record(
                AuditEvent(
                    actor_id=None,
                    action="LICENSE_EXPIRED",
                    details={"license_id": str(license.id)},
                )
            )

    @staticmethod
    def _failed(
        failure: ValidationFailure, message: str, status: Optional[str] = None
    ) -> ValidationResult:
        license_validations_total.labels(outcome=failure.value).inc()
        return ValidationResult.fail(failure, message, status)
