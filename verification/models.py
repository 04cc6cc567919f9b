from verification.infrastructure.models import VerificationToken  # noqa: F401
