"""
Django implementation of UserRepository port.

This adapter converts between domain entities and Django ORM models.
"""
import logging
import uuid
from typing import List, Optional

from asgiref.sync import sync_to_async
from django.db import DatabaseError, transaction
from django.utils import timezone

from accounts.domain.effects import MarkEmailVerified, SetPassword, UserEffect
from accounts.domain.user import UserAccount
from accounts.infrastructure.models import BackupCode as BackupCodeModel
from accounts.infrastructure.models import User as UserModel
from accounts.ports.user_repository import UserRepository
from core.domain.exceptions import PersistenceFailureError
from core.domain.value_objects import Email

logger = logging.getLogger(__name__)


def user_to_domain(model: UserModel) -> UserAccount:
    """
    Convert Django model to domain entity.

    Args:
        model: Django User model

    Returns:
        UserAccount domain entity
    """
    return UserAccount(
        id=model.id,
        email=Email(model.email),
        name=model.name or "",
        is_active=model.is_active,
        email_verified_at=model.email_verified_at,
        two_factor_enabled=model.two_factor_enabled,
        two_factor_secret=model.two_factor_secret if model.two_factor_enabled else None,
    )


def apply_user_effect(model: UserModel, effect: UserEffect) -> None:
    """
    Apply a token-authorized effect to a user row.

    Must be called inside the transaction that consumes the token.

    Args:
        model: Locked Django User model
        effect: Effect to apply
    """
    if isinstance(effect, MarkEmailVerified):
        if model.email_verified_at is None:
            model.email_verified_at = timezone.now()
            model.save(update_fields=["email_verified_at"])
    elif isinstance(effect, SetPassword):
        model.set_password(effect.raw_password)
        model.save(update_fields=["password"])
    else:
        raise TypeError(f"Unsupported user effect: {type(effect).__name__}")


class DjangoUserRepository(UserRepository):
    """
    Django ORM implementation of UserRepository.

    Multi-row writes lock the user row with ``select_for_update`` so
    concurrent two-factor changes for one user are serialized.
    """

    @sync_to_async
    def find_by_id(self, user_id: uuid.UUID) -> Optional[UserAccount]:
        """
        Find a user by ID.

        Args:
            user_id: User UUID

        Returns:
            UserAccount entity or None if not found
        """
        try:
            return user_to_domain(UserModel.objects.get(id=user_id))
        except UserModel.DoesNotExist:
            return None
        except DatabaseError as e:
            logger.error("Failed to load user %s", user_id, exc_info=True)
            raise PersistenceFailureError("User lookup failed") from e

    @sync_to_async
    def enable_two_factor(
        self, user_id: uuid.UUID, secret: str, backup_code_hashes: List[str]
    ) -> bool:
        """Set flag, secret and backup codes in one transaction, unless already on."""
        try:
            with transaction.atomic():
                model = UserModel.objects.select_for_update().filter(id=user_id).first()
                if model is None or model.two_factor_enabled:
                    return False
                model.two_factor_enabled = True
                model.two_factor_secret = secret
                model.save(update_fields=["two_factor_enabled", "two_factor_secret"])
                self._replace_codes(model, backup_code_hashes)
                return True
        except DatabaseError as e:
            logger.error("Failed to enable two-factor for user %s", user_id, exc_info=True)
            raise PersistenceFailureError("Could not enable two-factor") from e

    @sync_to_async
    def disable_two_factor(self, user_id: uuid.UUID) -> bool:
        """Clear flag, secret and backup codes in one transaction."""
        try:
            with transaction.atomic():
                model = UserModel.objects.select_for_update().filter(id=user_id).first()
                if model is None:
                    return False
                model.two_factor_enabled = False
                model.two_factor_secret = None
                model.save(update_fields=["two_factor_enabled", "two_factor_secret"])
                BackupCodeModel.objects.filter(user=model).delete()
                return True
        except DatabaseError as e:
            logger.error("Failed to disable two-factor for user %s", user_id, exc_info=True)
            raise PersistenceFailureError("Could not disable two-factor") from e

    @sync_to_async
    def replace_backup_codes(
        self, user_id: uuid.UUID, backup_code_hashes: List[str]
    ) -> bool:
        """Swap the backup-code set in one transaction while two-factor is on."""
        try:
            with transaction.atomic():
                model = UserModel.objects.select_for_update().filter(id=user_id).first()
                if model is None or not model.two_factor_enabled:
                    return False
                self._replace_codes(model, backup_code_hashes)
                return True
        except DatabaseError as e:
            logger.error("Failed to replace backup codes for user %s", user_id, exc_info=True)
            raise PersistenceFailureError("Could not replace backup codes") from e

    @sync_to_async
    def consume_backup_code(self, user_id: uuid.UUID, code_hash: str) -> bool:
        """Delete the matching code; only the caller that deletes it wins."""
        try:
            deleted, _ = BackupCodeModel.objects.filter(
                user_id=user_id, code_hash=code_hash
            ).delete()
            return deleted > 0
        except DatabaseError as e:
            logger.error("Failed to consume backup code for user %s", user_id, exc_info=True)
            raise PersistenceFailureError("Could not consume backup code") from e

    @sync_to_async
    def count_backup_codes(self, user_id: uuid.UUID) -> int:
        """Count unused backup codes."""
        return BackupCodeModel.objects.filter(user_id=user_id).count()

    @staticmethod
    def _replace_codes(model: UserModel, backup_code_hashes: List[str]) -> None:
        BackupCodeModel.objects.filter(user=model).delete()
        BackupCodeModel.objects.bulk_create(
            [BackupCodeModel(user=model, code_hash=h) for h in dict.fromkeys(backup_code_hashes)]
        )
