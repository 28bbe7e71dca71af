"""
Authentication module.

Provides Azure AD access tokens for SQL connections.

Components:
    - TokenCache: Expiry-aware cache of the SQL bearer token
    - AzureCredentialSource: azure-identity adapter (SPN secret or
      DefaultAzureCredential chain)
"""

from .credentials import AzureCredentialSource
from .token_cache import (
    DEFAULT_REFRESH_BUFFER_MS,
    SQL_SCOPE,
    CachedToken,
    TokenCache,
    epoch_ms,
)

__all__ = [
    "TokenCache",
    "CachedToken",
    "SQL_SCOPE",
    "DEFAULT_REFRESH_BUFFER_MS",
    "epoch_ms",
    "AzureCredentialSource",
]
