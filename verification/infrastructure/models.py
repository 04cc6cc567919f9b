"""
VerificationToken model.
"""
import uuid

from django.conf import settings
from django.db import models


class VerificationToken(models.Model):
    """
    A live single-use token.

    Rows are deleted on redemption and by the expiry sweep.
    """

    TYPE_CHOICES = [
        ("email_verification", "Email verification"),
        ("password_reset", "Password reset"),
        ("two_factor_setup", "Two-factor setup"),
        ("two_factor_backup", "Two-factor backup"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="verification_tokens",
    )
    token = models.CharField(max_length=64, unique=True)
    type = models.CharField(max_length=32, choices=TYPE_CHOICES)
    expires_at = models.DateTimeField(db_index=True)
    created_at = models.DateTimeField()

    class Meta:
        db_table = "verification_tokens"
        indexes = [
            models.Index(fields=["user", "type"]),
        ]

    def __str__(self):
        return f"{self.type} token for {self.user_id}"
