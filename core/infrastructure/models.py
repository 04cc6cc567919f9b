"""
Security log model.
"""
import uuid

from django.db import models


class SecurityLog(models.Model):
    """
    Append-only record of a security-relevant action.

    ``actor_id`` is free text: a user id, an administrator id, or empty
    for system actions such as the expiry sweep.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    actor_id = models.CharField(max_length=64, null=True, blank=True, db_index=True)
    action = models.CharField(max_length=64, db_index=True)
    details = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField()

    class Meta:
        db_table = "security_logs"
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.action} by {self.actor_id or 'system'}"
