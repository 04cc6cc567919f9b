"""
Django implementation of TokenRepository port.

This adapter converts between domain entities and Django ORM models.
"""
import logging
import uuid
from datetime import datetime
from typing import Optional

from asgiref.sync import sync_to_async
from django.contrib.auth import get_user_model
from django.db import DatabaseError, transaction

from accounts.domain.effects import UserEffect
from accounts.infrastructure.repositories.django_user_repository import apply_user_effect
from core.domain.exceptions import NotFoundError, PersistenceFailureError
from core.domain.value_objects import TokenType
from verification.domain.token import VerificationToken
from verification.infrastructure.models import VerificationToken as TokenModel
from verification.ports.token_repository import TokenRepository

logger = logging.getLogger(__name__)


class DjangoTokenRepository(TokenRepository):
    """
    Django ORM implementation of TokenRepository.

    Issue locks the owning user row so concurrent issues for one user
    are serialized. Redemption relies on a conditional delete whose
    affected-row count decides the single winner.
    """

    def _to_domain(self, model: TokenModel) -> VerificationToken:
        return VerificationToken(
            id=model.id,
            user_id=model.user_id,
            token=model.token,
            type=TokenType(model.type),
            expires_at=model.expires_at,
            created_at=model.created_at,
        )

    @sync_to_async
    def replace_live(self, token: VerificationToken) -> VerificationToken:
        """
        Delete prior tokens of the (user, type) and insert the new one.

        Args:
            token: Token to store

        Returns:
            Stored token
        """
        User = get_user_model()
        try:
            with transaction.atomic():
                user = User.objects.select_for_update().filter(id=token.user_id).first()
                if user is None:
                    raise NotFoundError("User not found")
                TokenModel.objects.filter(user=user, type=token.type.value).delete()
                model = TokenModel.objects.create(
                    id=token.id,
                    user=user,
                    token=token.token,
                    type=token.type.value,
                    expires_at=token.expires_at,
                    created_at=token.created_at,
                )
        except DatabaseError as e:
            logger.error(
                "Failed to store %s token for user %s",
                token.type.value,
                token.user_id,
                exc_info=True,
            )
            raise PersistenceFailureError("Could not store verification token") from e
        return self._to_domain(model)

    @sync_to_async
    def consume(
        self,
        value: str,
        token_type: TokenType,
        now: datetime,
        effect: Optional[UserEffect] = None,
    ) -> Optional[uuid.UUID]:
        """
        Conditionally delete a live token and apply its effect.

        Args:
            value: Exact token string
            token_type: Type the token must have
            now: Current time
            effect: Write to apply to the owning user, if any

        Returns:
            Owning user UUID, or None if no live token matched
        """
        try:
            with transaction.atomic():
                model = (
                    TokenModel.objects.select_for_update()
                    .select_related("user")
                    .filter(token=value, type=token_type.value, expires_at__gt=now)
                    .first()
                )
                if model is None:
                    return None
                deleted, _ = TokenModel.objects.filter(id=model.id).delete()
                if deleted == 0:
                    return None
                if effect is not None:
                    apply_user_effect(model.user, effect)
                return model.user_id
        except DatabaseError as e:
            logger.error("Failed to redeem %s token", token_type.value, exc_info=True)
            raise PersistenceFailureError("Could not redeem verification token") from e

    @sync_to_async
    def peek(self, value: str, token_type: TokenType, now: datetime) -> Optional[uuid.UUID]:
        """Return the owner of a live token without consuming it."""
        return (
            TokenModel.objects.filter(token=value, type=token_type.value, expires_at__gt=now)
            .values_list("user_id", flat=True)
            .first()
        )

    @sync_to_async
    def delete_expired(self, now: datetime) -> int:
        """Delete every token past expiry."""
        try:
            deleted, _ = TokenModel.objects.filter(expires_at__lte=now).delete()
            return deleted
        except DatabaseError as e:
            logger.error("Expired token sweep failed", exc_info=True)
            raise PersistenceFailureError("Expired token sweep failed") from e
