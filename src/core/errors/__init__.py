"""
Error classification and exception hierarchy.

Provides:
- ErrorCategory enum for classifying errors
- AppError hierarchy for typed exceptions
- Token expiry detection for connection-level retries
"""

from core.errors.exceptions import (
    AppError,
    AuthError,
    ConfigurationError,
    # Enums
    ErrorCategory,
    PermanentError,
    SecretNotFoundError,
    TokenAcquisitionError,
    # Classification utilities
    classify_exception,
    is_token_expiry_error,
)

__all__ = [
    # Enums
    "ErrorCategory",
    # Base classes
    "AppError",
    "AuthError",
    "PermanentError",
    # Domain errors
    "ConfigurationError",
    "SecretNotFoundError",
    "TokenAcquisitionError",
    # Classification utilities
    "classify_exception",
    "is_token_expiry_error",
]
