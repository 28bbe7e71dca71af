"""
Core types and protocols used across modules.

This module provides base types, enums, and protocol definitions that are
shared across the core library to ensure consistency and type safety.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol


class ErrorCategory(Enum):
    """
    Classification of error types for handling decisions.

    Categories:
        TRANSIENT: Temporary failures that may succeed if attempted again
                   (e.g., an expired access token on a pooled connection)
        AUTH: Authentication failures (e.g., no usable token from Azure AD)
        PERMANENT: Non-retriable failures that won't succeed on retry
                   (e.g., missing secrets, incomplete configuration)
        UNKNOWN: Unclassified errors
    """

    TRANSIENT = "transient"
    AUTH = "auth"
    PERMANENT = "permanent"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class AccessTokenInfo:
    """
    Bearer token as reported by a credential source.

    Attributes:
        token: The access token string
        expires_at_epoch_ms: Provider-asserted expiry, milliseconds since epoch
    """

    token: str
    expires_at_epoch_ms: int


class CredentialSource(Protocol):
    """
    Protocol for Azure AD style credential sources.

    Implementations return a token for a single scope, or None when the
    underlying provider produced nothing usable.
    """

    async def get_token(self, scope: str) -> Optional[AccessTokenInfo]:
        ...


class SecretValue(Protocol):
    """Secret as returned by a secret store. ``value`` may be missing."""

    value: Optional[str]


class SecretStore(Protocol):
    """Protocol for named-secret stores (e.g., Azure Key Vault)."""

    async def get_secret(self, name: str) -> SecretValue:
        ...


class TokenProvider(Protocol):
    """
    Protocol for cached bearer token providers.

    The connection gateway only needs an awaitable token; TokenCache
    implements this protocol.
    """

    async def get_access_token(self) -> str:
        ...


__all__ = [
    "AccessTokenInfo",
    "CredentialSource",
    "ErrorCategory",
    "SecretStore",
    "SecretValue",
    "TokenProvider",
]
