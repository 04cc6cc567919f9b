"""
App configuration for core.
"""
from django.apps import AppConfig


class CoreConfig(AppConfig):
    """App configuration for the shared kernel."""

    name = "core"
    verbose_name = "Core"
    default_auto_field = "django.db.models.BigAutoField"
