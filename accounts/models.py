"""
Expose infrastructure models to Django's app registry.
"""
from accounts.infrastructure.models import BackupCode, User  # noqa: F401
