"""
Expose infrastructure models to Django's app registry.
"""
from licenses.infrastructure.models import License  # noqa: F401
