"""
Two-factor authentication service.

Setup is two-phase: ``begin_setup`` returns a secret without storing it and
``complete_setup`` stores it only after the user proves possession with a
valid code.
"""
import logging
import uuid
from typing import List, Optional

from accounts.domain.user import UserAccount
from accounts.ports.user_repository import UserRepository
from core.domain.events import EventBus
from core.domain.exceptions import InvalidStateError, NotFoundError
from core.domain.value_objects import TwoFactorMechanism
from core.metrics import two_factor_verifications_total
from core.ports.audit_log import AuditEvent, AuditLog
from two_factor.application.dto.two_factor_dto import TwoFactorSetup, TwoFactorVerification
from two_factor.domain.backup_codes import (
    DEFAULT_BACKUP_CODE_COUNT,
    generate_backup_codes,
    hash_backup_code,
    is_backup_code_shaped,
    normalize_backup_code,
)
from two_factor.domain.events import BackupCodesRegenerated, TwoFactorDisabled, TwoFactorEnabled
from two_factor.domain.totp import (
    ForTime,
    format_manual_entry_key,
    generate_totp_secret,
    is_valid_secret,
    provisioning_uri,
    qr_code_data_uri,
    verify_code,
)

logger = logging.getLogger(__name__)

DEFAULT_ISSUER = "Credential Service"


class TwoFactorService:
    """
    Application service for TOTP two-factor authentication.

    The secret and backup codes are written, replaced and cleared only
    through single-transaction repository calls.
    """

    def __init__(
        self,
        user_repository: UserRepository,
        audit_log: AuditLog,
        event_bus: EventBus,
        issuer: str = DEFAULT_ISSUER,
        backup_code_count: int = DEFAULT_BACKUP_CODE_COUNT,
        valid_window: int = 1,
    ):
        """Initialize service with collaborators and TOTP settings."""
        self.user_repository = user_repository
        self.audit_log = audit_log
        self.event_bus = event_bus
        self.issuer = issuer
        self.backup_code_count = backup_code_count
        self.valid_window = valid_window

    async def begin_setup(self, user_id: uuid.UUID, account_label: Optional[str] = None) -> TwoFactorSetup:
        """
        Generate setup material for a user.

        Nothing is persisted; the caller keeps the secret and backup codes
        until ``complete_setup``.

        Args:
            user_id: User UUID
            account_label: Label shown in the authenticator app
                (defaults to the user's email)

        Returns:
            TwoFactorSetup with secret, URI, QR image and backup codes

        Raises:
            NotFoundError: If the user does not exist
            InvalidStateError: If two-factor is already enabled
        """
        user = await self._require_user(user_id)
        if user.two_factor_enabled:
            raise InvalidStateError("Two-factor authentication is already enabled")

        secret = generate_totp_secret()
        uri = provisioning_uri(secret, account_label or str(user.email), self.issuer)
        return TwoFactorSetup(
            secret=secret,
            provisioning_uri=uri,
            qr_code=qr_code_data_uri(uri),
            backup_codes=generate_backup_codes(self.backup_code_count),
            manual_entry_key=format_manual_entry_key(secret),
        )

    async def complete_setup(
        self,
        user_id: uuid.UUID,
        candidate_secret: str,
        code: str,
        backup_codes: List[str],
        for_time: ForTime = None,
    ) -> bool:
        """
        Enable two-factor once ``code`` checks out against the pending secret.

        Args:
            user_id: User UUID
            candidate_secret: Secret returned by ``begin_setup``
            code: Code read from the user's authenticator
            backup_codes: Backup codes returned by ``begin_setup``
            for_time: Verification time (defaults to now)

        Returns:
            True if two-factor is now enabled; False if the secret, the code
            or the backup codes are rejected, or two-factor was already on
        """
        if not is_valid_secret(candidate_secret):
            logger.info("Two-factor setup rejected malformed secret", extra={"user_id": str(user_id)})
            return False

        if not self._is_issued_backup_code_set(backup_codes):
            logger.info("Two-factor setup rejected backup codes", extra={"user_id": str(user_id)})
            return False

        if not verify_code(candidate_secret, code, for_time, self.valid_window):
            two_factor_verifications_total.labels(mechanism="setup", outcome="failure").inc()
            logger.info("Two-factor setup code rejected", extra={"user_id": str(user_id)})
            return False

        hashes = [hash_backup_code(c) for c in backup_codes]
        if not await self.user_repository.enable_two_factor(user_id, candidate_secret, hashes):
            logger.warning(
                "Two-factor setup refused for missing or already enrolled user",
                extra={"user_id": str(user_id)},
            )
            return False

        two_factor_verifications_total.labels(mechanism="setup", outcome="success").inc()
        logger.info("Two-factor enabled", extra={"user_id": str(user_id)})
        await self.audit_log.record(
            AuditEvent(actor_id=str(user_id), action="TWO_FACTOR_ENABLED", details={})
        )
        await self.event_bus.publish(TwoFactorEnabled(user_id=user_id, actor_id=str(user_id)))
        return True

    async def verify(
        self, user_id: uuid.UUID, submitted_code: str, for_time: ForTime = None
    ) -> TwoFactorVerification:
        """
        Check a login code, trying TOTP first and then the backup codes.

        A matching backup code is removed before success is returned.

        Args:
            user_id: User UUID
            submitted_code: TOTP or backup code as typed
            for_time: Verification time for TOTP (defaults to now)

        Returns:
            TwoFactorVerification with the mechanism that matched
        """
        user = await self.user_repository.find_by_id(user_id)
        if user is None or not user.two_factor_enabled:
            return TwoFactorVerification.failed()

        if verify_code(user.two_factor_secret, submitted_code, for_time, self.valid_window):
            return await self._verified(user_id, TwoFactorMechanism.TOTP)

        if is_backup_code_shaped(submitted_code) and await self.user_repository.consume_backup_code(
            user_id, hash_backup_code(submitted_code)
        ):
            return await self._verified(user_id, TwoFactorMechanism.BACKUP)

        two_factor_verifications_total.labels(mechanism="any", outcome="failure").inc()
        logger.info("Two-factor verification failed", extra={"user_id": str(user_id)})
        await self.audit_log.record(
            AuditEvent(actor_id=str(user_id), action="TWO_FACTOR_FAILED", details={})
        )
        return TwoFactorVerification.failed()

    async def disable(self, user_id: uuid.UUID, actor_id: Optional[str] = None) -> bool:
        """
        Turn off two-factor, clearing secret and backup codes together.

        Args:
            user_id: User UUID
            actor_id: Who disabled it (defaults to the user)

        Returns:
            True if the user exists; disabling twice is harmless
        """
        if not await self.user_repository.disable_two_factor(user_id):
            return False

        actor = actor_id or str(user_id)
        logger.info("Two-factor disabled", extra={"user_id": str(user_id)})
        await self.audit_log.record(
            AuditEvent(actor_id=actor, action="TWO_FACTOR_DISABLED", details={})
        )
        await self.event_bus.publish(TwoFactorDisabled(user_id=user_id, actor_id=actor))
        return True

    async def regenerate_backup_codes(self, user_id: uuid.UUID) -> List[str]:
        """
        Replace the user's backup codes.

        Every previously issued code stops working.

        Args:
            user_id: User UUID

        Returns:
            The new plaintext codes, shown to the user once

        Raises:
            NotFoundError: If the user does not exist
            InvalidStateError: If two-factor is not enabled
        """
        user = await self._require_user(user_id)
        if not user.two_factor_enabled:
            raise InvalidStateError("Two-factor authentication is not enabled")

        codes = generate_backup_codes(self.backup_code_count)
        if not await self.user_repository.replace_backup_codes(
            user_id, [hash_backup_code(c) for c in codes]
        ):
            # Disabled or deleted since the read above
            await self._require_user(user_id)
            raise InvalidStateError("Two-factor authentication is not enabled")

        await self.audit_log.record(
            AuditEvent(
                actor_id=str(user_id),
                action="BACKUP_CODES_REGENERATED",
                details={"count": len(codes)},
            )
        )
        await self.event_bus.publish(
            BackupCodesRegenerated(user_id=user_id, count=len(codes), actor_id=str(user_id))
        )
        return codes

    async def is_enabled(self, user_id: uuid.UUID) -> bool:
        """Whether the user has two-factor turned on."""
        user = await self.user_repository.find_by_id(user_id)
        return bool(user and user.two_factor_enabled)

    async def backup_codes_remaining(self, user_id: uuid.UUID) -> int:
        """Number of unused backup codes."""
        return await self.user_repository.count_backup_codes(user_id)

    async def _verified(
        self, user_id: uuid.UUID, mechanism: TwoFactorMechanism
    ) -> TwoFactorVerification:
        two_factor_verifications_total.labels(mechanism=mechanism.value, outcome="success").inc()
        await self.audit_log.record(
            AuditEvent(
                actor_id=str(user_id),
                action="TWO_FACTOR_VERIFIED",
                details={"mechanism": mechanism.value},
            )
        )
        return TwoFactorVerification(success=True, mechanism=mechanism)

    def _is_issued_backup_code_set(self, backup_codes: List[str]) -> bool:
        normalized = {normalize_backup_code(c) for c in backup_codes}
        return (
            len(backup_codes) == self.backup_code_count
            and len(normalized) == self.backup_code_count
            and all(is_backup_code_shaped(c) for c in backup_codes)
        )

    async def _require_user(self, user_id: uuid.UUID) -> UserAccount:
        user = await self.user_repository.find_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user
