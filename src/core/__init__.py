"""
Core library: Reusable, infrastructure-agnostic components.

Modules:
    auth        - Azure AD access tokens for SQL (credential source, token cache)
    secrets     - Key Vault secret store and TTL secret cache
    logging     - Structured JSON logging with request correlation
    errors      - Error classification and exception hierarchy

Design Principles:
    - Collaborators are passed in explicitly; no module-level singletons
    - Never reads the process environment (see config.load_config)
    - Async-first
"""

from .types import AccessTokenInfo, CredentialSource, ErrorCategory, SecretStore, TokenProvider

__version__ = "0.1.0"

__all__ = [
    "AccessTokenInfo",
    "CredentialSource",
    "ErrorCategory",
    "SecretStore",
    "TokenProvider",
]
