"""
Unified exception hierarchy for the historical DB API.

Provides typed exceptions with an error category so callers can tell
configuration mistakes from authentication failures, plus the message
based detector used to recognise expired access tokens on live connections.
"""


# Import ErrorCategory from canonical source to avoid duplicate enum issues
# (comparing enums from different classes always returns False)
from core.types import ErrorCategory


class AppError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message: Human-readable error description
        category: Error classification for handling decisions
        cause: Original exception if wrapping
        context: Additional context dict for debugging
    """

    category: ErrorCategory = ErrorCategory.UNKNOWN

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
        context: dict | None = None,
    ):
        self.message = message
        self.cause = cause
        self.context = context or {}
        super().__init__(message)

    def __str__(self) -> str:
        parts = [self.message]
        if self.cause:
            parts.append(f"Caused by: {self.cause}")
        return " | ".join(parts)


# =============================================================================
# Authentication Errors
# =============================================================================


class AuthError(AppError):
    """Base class for authentication errors."""

    category = ErrorCategory.AUTH


class TokenAcquisitionError(AuthError):
    """Credential source returned no usable token (or no expiry)."""

    pass


# =============================================================================
# Permanent Errors (Don't Retry)
# =============================================================================


class PermanentError(AppError):
    """Base class for permanent/non-retriable errors."""

    category = ErrorCategory.PERMANENT


class ConfigurationError(PermanentError):
    """Connection coordinates cannot be determined from configuration."""

    pass


class SecretNotFoundError(PermanentError):
    """Named secret is absent or has an empty value."""

    def __init__(
        self,
        secret_name: str,
        cause: Exception | None = None,
    ):
        super().__init__(
            f"Secret {secret_name} returned no value.",
            cause,
            {"secret_name": secret_name},
        )
        self.secret_name = secret_name


# =============================================================================
# Error Classification Utilities
# =============================================================================

# Both words must appear in the failure text. Driver messages are not
# localised consistently, so this stays a heuristic.
TOKEN_EXPIRY_MARKERS = ("token", "expire")


def is_token_expiry_error(exc: BaseException) -> bool:
    """
    Check if a driver failure looks like an expired access token.

    Case-insensitive match on both "token" and "expire" in the error text.
    """
    error_str = str(exc).lower()
    return all(marker in error_str for marker in TOKEN_EXPIRY_MARKERS)


def classify_exception(exc: Exception) -> ErrorCategory:
    """Classify an exception into error category."""
    # Already classified
    if isinstance(exc, AppError):
        return exc.category

    if is_token_expiry_error(exc):
        return ErrorCategory.TRANSIENT

    return ErrorCategory.UNKNOWN
