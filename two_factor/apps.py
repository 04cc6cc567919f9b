"""
App configuration for two_factor.
"""
from django.apps import AppConfig


class TwoFactorConfig(AppConfig):
    """App configuration for two-factor authentication."""

    name = "two_factor"
    verbose_name = "Two-factor authentication"
    default_auto_field = "django.db.models.BigAutoField"
