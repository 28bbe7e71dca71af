"""Tests for SecretCache - per-name TTL cache over a secret store."""

from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from core.errors.exceptions import SecretNotFoundError
from core.secrets.secret_cache import DEFAULT_CACHE_TTL_MS, CachedSecret, SecretCache


class FakeClock:
    def __init__(self, now_ms: int = 0):
        self.now_ms = now_ms

    def __call__(self) -> int:
        return self.now_ms


def make_store(values):
    """Store returning SimpleNamespace(value=...) per name from ``values``."""
    store = AsyncMock()

    async def get_secret(name):
        value = values[name]
        return None if value is None else SimpleNamespace(value=value)

    store.get_secret.side_effect = get_secret
    return store


class TestCachedSecret:

    def test_fresh_until_expiry(self):
        secret = CachedSecret("v", expires_at_epoch_ms=1_000)
        assert secret.is_fresh(999)
        assert not secret.is_fresh(1_000)


class TestSecretCache:

    @pytest.mark.asyncio
    async def test_fetches_and_caches(self):
        store = make_store({"SqlServerHost": "srv.database.windows.net"})
        cache = SecretCache(store, clock=FakeClock(0))

        assert await cache.get_secret_value("SqlServerHost") == "srv.database.windows.net"
        assert await cache.get_secret_value("SqlServerHost") == "srv.database.windows.net"
        assert store.get_secret.await_count == 1

    @pytest.mark.asyncio
    async def test_refetches_after_ttl(self):
        clock = FakeClock(0)
        store = make_store({"db": "historical"})
        cache = SecretCache(store, clock=clock)

        await cache.get_secret_value("db")
        clock.now_ms = DEFAULT_CACHE_TTL_MS - 1
        await cache.get_secret_value("db")
        assert store.get_secret.await_count == 1

        clock.now_ms = DEFAULT_CACHE_TTL_MS
        await cache.get_secret_value("db")
        assert store.get_secret.await_count == 2

    @pytest.mark.asyncio
    async def test_entries_are_per_name(self):
        store = make_store({"a": "1", "b": "2"})
        cache = SecretCache(store, cache_ttl_ms=1_000, clock=FakeClock(0))

        assert await cache.get_secret_value("a") == "1"
        assert await cache.get_secret_value("b") == "2"
        assert store.get_secret.await_count == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize("value", [None, ""])
    async def test_missing_value_raises(self, value):
        cache = SecretCache(make_store({"missing": value}), clock=FakeClock(0))

        with pytest.raises(SecretNotFoundError, match="Secret missing returned no value."):
            await cache.get_secret_value("missing")

    @pytest.mark.asyncio
    async def test_store_errors_propagate(self):
        store = AsyncMock()
        store.get_secret.side_effect = ConnectionError("vault unreachable")
        cache = SecretCache(store, clock=FakeClock(0))

        with pytest.raises(ConnectionError):
            await cache.get_secret_value("x")

    @pytest.mark.asyncio
    async def test_clear_one_and_all(self):
        store = make_store({"a": "1", "b": "2"})
        cache = SecretCache(store, clock=FakeClock(0))
        await cache.get_secret_value("a")
        await cache.get_secret_value("b")

        cache.clear("a")
        await cache.get_secret_value("a")
        await cache.get_secret_value("b")
        assert store.get_secret.await_count == 3

        cache.clear()
        await cache.get_secret_value("b")
        assert store.get_secret.await_count == 4
