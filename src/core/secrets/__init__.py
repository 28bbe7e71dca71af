"""
Secrets module.

Components:
    - SecretCache: TTL cache of named secret values
    - KeyVaultSecretStore: Azure Key Vault backed SecretStore
"""

from .key_vault import KeyVaultSecretStore
from .secret_cache import DEFAULT_CACHE_TTL_MS, CachedSecret, SecretCache

__all__ = [
    "SecretCache",
    "CachedSecret",
    "DEFAULT_CACHE_TTL_MS",
    "KeyVaultSecretStore",
]
