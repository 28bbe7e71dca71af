"""
Bearer token cache with provider-asserted expiry.

This module caches the single Azure AD access token used to open SQL
connections. The credential source reports when each token expires; the
cache hands out the stored token until it comes within a refresh buffer of
that expiry, then fetches a new one.

Concurrency:
    Runs on one asyncio event loop. Concurrent callers that find the token
    stale share a single in-flight credential call (the pending task is
    cached and awaited by everyone) instead of each fetching their own.

Example:
    >>> cache = TokenCache(AzureCredentialSource())
    >>> token = await cache.get_access_token()
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from core.errors.exceptions import TokenAcquisitionError
from core.types import CredentialSource

logger = logging.getLogger(__name__)

# Azure SQL resource scope
SQL_SCOPE = "https://database.windows.net/.default"

# Refresh this long before the provider-asserted expiry
DEFAULT_REFRESH_BUFFER_MS = 2 * 60 * 1000


def epoch_ms() -> int:
    """Current UTC time in milliseconds since the epoch."""
    return int(datetime.now(timezone.utc).timestamp() * 1000)


@dataclass(frozen=True)
class CachedToken:
    """
    Token with its expiry for refresh decisions.

    Attributes:
        value: The access token string (never empty)
        expires_at_epoch_ms: Expiry reported by the credential source
    """

    value: str
    expires_at_epoch_ms: int

    def needs_refresh(self, now_ms: int, buffer_ms: int = DEFAULT_REFRESH_BUFFER_MS) -> bool:
        """
        Check whether the token is inside the refresh buffer.

        Args:
            now_ms: Current time in epoch milliseconds
            buffer_ms: Safety margin before real expiry

        Returns:
            True once ``now_ms >= expires_at_epoch_ms - buffer_ms``
        """
        return now_ms >= self.expires_at_epoch_ms - buffer_ms


class TokenCache:
    """
    Cache for the SQL access token.

    Holds at most one CachedToken. A refresh replaces it wholesale; it is
    never mutated in place.

    Attributes:
        scope: OAuth scope requested from the credential source
        refresh_buffer_ms: Margin before expiry at which a refresh is forced
    """

    def __init__(
        self,
        credential: CredentialSource,
        scope: str = SQL_SCOPE,
        refresh_buffer_ms: int = DEFAULT_REFRESH_BUFFER_MS,
        clock: Callable[[], int] = epoch_ms,
    ):
        """
        Initialize empty token cache.

        Args:
            credential: Source of fresh tokens (e.g., AzureCredentialSource)
            scope: OAuth scope to request
            refresh_buffer_ms: Refresh margin in milliseconds
            clock: Returns current epoch milliseconds (injectable for tests)
        """
        self._credential = credential
        self.scope = scope
        self.refresh_buffer_ms = refresh_buffer_ms
        self._clock = clock
        self._cached: Optional[CachedToken] = None
        self._refreshing: Optional[asyncio.Task] = None

    async def get_access_token(self) -> str:
        """
        Get a token that is not within the refresh buffer of expiry.

        Returns:
            Access token string

        Raises:
            TokenAcquisitionError: If the credential source returns no
                usable token or no expiry
        """
        cached = self._cached
        if cached is not None and not cached.needs_refresh(
            self._clock(), self.refresh_buffer_ms
        ):
            return cached.value

        task = self._refreshing
        if task is None:
            task = asyncio.create_task(self._refresh())
            task.add_done_callback(self._refresh_finished)
            self._refreshing = task
        # A cancelled caller must not cancel the refresh other callers share
        return await asyncio.shield(task)

    def _refresh_finished(self, task: asyncio.Task) -> None:
        if self._refreshing is task:
            self._refreshing = None

    async def _refresh(self) -> str:
        token = await self._credential.get_token(self.scope)
        if token is None or not token.token or not token.expires_at_epoch_ms:
            raise TokenAcquisitionError(
                "Failed to acquire Azure SQL access token.",
                context={"scope": self.scope},
            )

        self._cached = CachedToken(
            value=token.token,
            expires_at_epoch_ms=token.expires_at_epoch_ms,
        )
        logger.debug(
            "Acquired access token",
            extra={"resource": self.scope, "expires_at_epoch_ms": token.expires_at_epoch_ms},
        )
        return self._cached.value

    def clear(self) -> None:
        """Drop the cached token so the next call fetches a fresh one."""
        self._cached = None

    @property
    def cached_token(self) -> Optional[CachedToken]:
        """Currently cached token, for diagnostics."""
        return self._cached


__all__ = [
    "TokenCache",
    "CachedToken",
    "SQL_SCOPE",
    "DEFAULT_REFRESH_BUFFER_MS",
    "epoch_ms",
]
