"""
App configuration for accounts.
"""
from django.apps import AppConfig


class AccountsConfig(AppConfig):
    """App configuration for accounts."""

    name = "accounts"
    verbose_name = "Accounts"
    default_auto_field = "django.db.models.BigAutoField"
