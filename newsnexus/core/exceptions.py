"""Custom exception hierarchy.

Every error carries a machine-readable ``code`` and the HTTP status the API
layer answers with. Handlers in ``newsnexus.api.errors`` do the translation.
"""

from typing import Any, Optional


class AppError(Exception):
    """Base exception for application errors."""

    code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(
        self,
        message: str,
        original_error: Exception = None,
        details: Optional[Any] = None,
    ):
        super().__init__(message)
        self.message = message
        self.original_error = original_error
        self.details = details


class ValidationError(AppError):
    """Raised when input validation fails."""

    code = "VALIDATION_ERROR"
    status_code = 400


class NotFoundError(AppError):
    """Raised when a referenced entity does not exist."""

    code = "NOT_FOUND"
    status_code = 404


class AmbiguousDataError(AppError):
    """Raised when a lookup that must be unique matches several rows.

    Signals an upstream invariant violation; nothing is written when raised.
    """

    code = "AMBIGUOUS_DATA"
    status_code = 400


DataIntegrityError = AmbiguousDataError


class ConflictError(AppError):
    """Raised when a transition targets a state that already holds."""

    code = "CONFLICT"
    status_code = 409


class AlreadyApprovedError(ConflictError):
    """Raised when approving content that a human already approved."""

    code = "ALREADY_APPROVED"


class PersistenceError(AppError):
    """Raised when a database operation fails."""

    code = "PERSISTENCE_ERROR"
    status_code = 500

    def __init__(
        self,
        message: str,
        original_error: Exception = None,
        details: Optional[Any] = None,
        transient: bool = False,
    ):
        super().__init__(message, original_error=original_error, details=details)
        self.transient = transient


class APIClientError(AppError):
    """Raised when an external aggregator call fails."""

    code = "UPSTREAM_ERROR"
    status_code = 502


class APITimeoutError(APIClientError):
    """Raised when an external aggregator call times out."""

    code = "UPSTREAM_TIMEOUT"
    status_code = 504


class RateLimitedError(APIClientError):
    """Raised when an aggregator asks us to back off."""

    code = "UPSTREAM_RATE_LIMITED"
    status_code = 503


class ConfigurationError(AppError):
    """Raised when configuration is invalid or missing."""

    code = "CONFIGURATION_ERROR"
    status_code = 500


class AuthenticationError(AppError):
    """Raised when the bearer token is missing or invalid."""

    code = "UNAUTHORIZED"
    status_code = 401


class PermissionDeniedError(AppError):
    """Raised when an authenticated user lacks the required role."""

    code = "FORBIDDEN"
    status_code = 403
