"""
Per-name TTL cache in front of a secret store.

Key Vault never reports when a secret should be considered stale, so each
entry is stamped with ``fetch time + TTL`` when it is stored. Until then the
cached value is returned without touching the store.

Example:
    >>> secrets = SecretCache(KeyVaultSecretStore("https://my-vault.vault.azure.net/"))
    >>> host = await secrets.get_secret_value("SqlServerHost")
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from core.auth.token_cache import epoch_ms
from core.errors.exceptions import SecretNotFoundError
from core.types import SecretStore

logger = logging.getLogger(__name__)

DEFAULT_CACHE_TTL_MS = 10 * 60 * 1000


@dataclass(frozen=True)
class CachedSecret:
    """
    Secret value with the time it stops being served from cache.

    Attributes:
        value: Secret value (never empty)
        expires_at_epoch_ms: Fetch time plus the cache TTL
    """

    value: str
    expires_at_epoch_ms: int

    def is_fresh(self, now_ms: int) -> bool:
        return now_ms < self.expires_at_epoch_ms


class SecretCache:
    """In-memory, per-instance cache of named secret values."""

    def __init__(
        self,
        store: SecretStore,
        cache_ttl_ms: int = DEFAULT_CACHE_TTL_MS,
        clock: Callable[[], int] = epoch_ms,
    ):
        self._store = store
        self.cache_ttl_ms = cache_ttl_ms
        self._clock = clock
        self._entries: Dict[str, CachedSecret] = {}

    async def get_secret_value(self, name: str) -> str:
        """
        Get a secret value, fetching from the store when not cached or stale.

        Args:
            name: Secret name

        Returns:
            Non-empty secret value

        Raises:
            SecretNotFoundError: If the store returns no value for ``name``
        """
        cached = self._entries.get(name)
        if cached is not None and cached.is_fresh(self._clock()):
            return cached.value

        secret = await self._store.get_secret(name)
        value = getattr(secret, "value", None) if secret is not None else None
        if not value:
            raise SecretNotFoundError(name)

        self._entries[name] = CachedSecret(
            value=value,
            expires_at_epoch_ms=self._clock() + self.cache_ttl_ms,
        )
        logger.debug("Fetched secret", extra={"secret_name": name})
        return value

    def clear(self, name: Optional[str] = None) -> None:
        """
        Invalidate one cached secret or all of them.

        Args:
            name: Secret to drop. If None, clears every entry.
        """
        if name:
            self._entries.pop(name, None)
        else:
            self._entries.clear()


__all__ = ["SecretCache", "CachedSecret", "DEFAULT_CACHE_TTL_MS"]
