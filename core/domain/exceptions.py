"""
Domain exceptions.

Domain exceptions represent business rule violations
and domain-specific error conditions.

Routine outcomes (an expired license, a mismatched device) are normally
returned as results rather than raised. Callers that prefer exceptions
turn a failed result into one of the classes below with the result's
``raise_for_failure``.
"""


class DomainException(Exception):
    """Base exception for all domain exceptions."""

    def __init__(self, message: str, code: str = None):
        """
        Initialize domain exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code
        """
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class NotFoundError(DomainException):
    """Raised when a license, token or user is absent."""

    def __init__(self, message: str = "Not found"):
        super().__init__(message, code="NOT_FOUND")


class InvalidStateError(DomainException):
    """Raised when a license is not in the ACTIVE state."""

    def __init__(self, message: str = "Invalid license status"):
        super().__init__(message, code="INVALID_STATE")


class ExpiredError(DomainException):
    """Raised when a license or token is past its expiry."""

    def __init__(self, message: str = "License has expired"):
        super().__init__(message, code="EXPIRED")


class ProductMismatchError(DomainException):
    """Raised when a license is presented for a different product."""

    def __init__(self, message: str = "License is not valid for this product"):
        super().__init__(message, code="PRODUCT_MISMATCH")


class HardwareMismatchError(DomainException):
    """Raised when a license is bound to different hardware."""

    def __init__(self, message: str = "License is bound to different hardware"):
        super().__init__(message, code="HARDWARE_MISMATCH")


class InvalidCodeError(DomainException):
    """Raised when a TOTP or backup code does not match."""

    def __init__(self, message: str = "Invalid verification code"):
        super().__init__(message, code="INVALID_CODE")


class InvalidOrExpiredTokenError(DomainException):
    """
    Raised when a verification token cannot be redeemed.

    The message is deliberately the same whether the token never
    existed, has the wrong type, or has expired.
    """

    def __init__(self, message: str = "Invalid or expired token"):
        super().__init__(message, code="INVALID_OR_EXPIRED")


class PersistenceFailureError(DomainException):
    """Raised when the store is unavailable or rejects a write."""

    def __init__(self, message: str = "Persistence failure"):
        super().__init__(message, code="PERSISTENCE_FAILURE")


class LicenseKeyConflictError(PersistenceFailureError):
    """Raised when a generated license key already exists."""

    def __init__(self, message: str = "License key already exists"):
        super().__init__(message)
        self.code = "LICENSE_KEY_CONFLICT"


class RateLimitExceededError(DomainException):
    """Raised when a caller exceeds its request budget."""

    def __init__(self, message: str = "Rate limit exceeded", retry_after: int = 0):
        super().__init__(message, code="RATE_LIMIT_EXCEEDED")
        self.retry_after = retry_after
