"""
App configuration for verification.
"""
from django.apps import AppConfig


class VerificationConfig(AppConfig):
    """App configuration for verification tokens."""

    name = "verification"
    verbose_name = "Verification"
    default_auto_field = "django.db.models.BigAutoField"
