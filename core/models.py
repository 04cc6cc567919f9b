from core.infrastructure.models import SecurityLog  # noqa: F401
