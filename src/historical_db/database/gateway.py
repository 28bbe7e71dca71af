"""
SQL gateway with lazy pooling and one-shot token refresh.

The gateway owns at most one pool. It is created on the first query,
reused while connected, and rebuilt once when a query fails because the
Azure AD token baked into the pool's connections has expired.

Pool lifecycle:
    Absent -> Connecting -> Connected -> (close) -> Absent
    Connecting -> (failure) -> Absent, error propagated

Concurrent queries that arrive while the pool is being built await the same
connect task rather than opening pools of their own.
"""

import asyncio
import logging
import time
from typing import Any, Dict, List, Mapping, Optional

from config.config import DEFAULT_ODBC_DRIVER
from core.errors.exceptions import classify_exception
from core.types import ErrorCategory, TokenProvider
from historical_db.database.connection_info import ConnectionInfo, ConnectionInfoResolver
from historical_db.database.pool import OdbcPool, PoolFactory, PoolOptions, SqlPool

logger = logging.getLogger(__name__)


class ConnectionGateway:
    """
    Executes parameterized statements against Azure SQL.

    Auth mode is picked on every pool build: SQL-native when both a user and
    a password are configured, otherwise an access token from
    ``token_provider``. Transport is always encrypted and the server
    certificate is always validated.
    """

    def __init__(
        self,
        resolver: ConnectionInfoResolver,
        token_provider: TokenProvider,
        pool_factory: PoolFactory = OdbcPool,
        driver: str = DEFAULT_ODBC_DRIVER,
    ):
        self._resolver = resolver
        self._token_provider = token_provider
        self._pool_factory = pool_factory
        self._driver = driver
        self._info: Optional[ConnectionInfo] = None
        self._pool: Optional[SqlPool] = None
        self._connecting: Optional[asyncio.Task] = None

    @property
    def connected(self) -> bool:
        return self._pool is not None and self._pool.connected

    @property
    def auth_mode(self) -> Optional[str]:
        """Either "sql" or "token" once connection info is known, else None."""
        if self._info is None:
            return None
        return "sql" if self._info.uses_sql_auth else "token"

    async def query(
        self,
        statement: str,
        parameters: Optional[Mapping[str, Any]] = None,
    ) -> List[Dict[str, Any]]:
        """
        Execute ``statement`` with ``@name`` parameters bound from ``parameters``.

        Returns:
            Result rows as dicts (empty list when the statement returns none)
        """
        return await self._execute_with_retry(statement, parameters or {}, allow_retry=True)

    async def dispose(self) -> None:
        """
        Close the pool if one exists. Safe to call repeatedly.

        A connect still in flight is waited for first, so the pool it
        produces is closed here rather than outliving the gateway.
        """
        connecting = self._connecting
        if connecting is not None:
            await asyncio.wait({connecting})

        if self._pool is None:
            return
        pool, self._pool = self._pool, None
        await pool.close()
        logger.debug("SQL pool disposed")

    async def _execute_with_retry(
        self,
        statement: str,
        parameters: Mapping[str, Any],
        allow_retry: bool,
    ) -> List[Dict[str, Any]]:
        start_time = time.perf_counter()
        pool: Optional[SqlPool] = None
        try:
            pool = await self._get_pool()
            rows = await pool.execute(statement, parameters)
        except Exception as e:
            if allow_retry and self._should_retry(e):
                logger.warning(
                    "Access token expired on pooled connection, rebuilding pool",
                    extra={"error": str(e)[:200], "attempt": 1},
                )
                await self._reset_pool(pool)
                return await self._execute_with_retry(statement, parameters, allow_retry=False)
            raise

        logger.debug(
            "Query executed",
            extra={
                "query_length": len(statement),
                "parameter_count": len(parameters),
                "row_count": len(rows or []),
                "duration_ms": round((time.perf_counter() - start_time) * 1000, 2),
            },
        )
        return list(rows or [])

    async def _get_pool(self) -> SqlPool:
        if self._pool is not None and self._pool.connected:
            return self._pool

        task = self._connecting
        if task is None:
            task = asyncio.create_task(self._create_pool())
            task.add_done_callback(self._connect_finished)
            self._connecting = task
        # Waiters share the connect; cancelling one of them must not abort it
        return await asyncio.shield(task)

    def _connect_finished(self, task: asyncio.Task) -> None:
        if self._connecting is task:
            self._connecting = None

    async def _create_pool(self) -> SqlPool:
        # A handle that lost its connection is dropped before building anew
        if self._pool is not None:
            await self._discard_pool()

        info = await self._resolver.resolve_connection_info()
        self._info = info

        if info.uses_sql_auth:
            options = PoolOptions(
                server=info.server,
                database=info.database,
                encrypt=True,
                trust_server_certificate=False,
                user=info.user,
                password=info.password,
                driver=self._driver,
            )
        else:
            options = PoolOptions(
                server=info.server,
                database=info.database,
                encrypt=True,
                trust_server_certificate=False,
                access_token=await self._token_provider.get_access_token(),
                driver=self._driver,
            )

        logger.info(
            "Connecting to SQL",
            extra={
                "server": info.server,
                "database": info.database,
                "auth_mode": options.auth_mode,
            },
        )
        pool = self._pool_factory(options)
        await pool.connect()
        self._pool = pool
        return pool

    async def _discard_pool(self) -> None:
        pool, self._pool = self._pool, None
        if pool is None:
            return
        try:
            await pool.close()
        except Exception as e:
            logger.warning(
                "Error closing SQL pool: %s",
                str(e)[:100],
                extra={"error_type": type(e).__name__},
            )

    async def _reset_pool(self, failed_pool: Optional[SqlPool]) -> None:
        """
        Drop the pool a query failed on and the token it was built with.

        When another caller already replaced that pool, the current one is
        left alone and the retry runs on it.
        """
        if failed_pool is not None and self._pool is not failed_pool:
            return

        await self._discard_pool()

        # Make the rebuild ask the credential source for a new token
        clear = getattr(self._token_provider, "clear", None)
        if callable(clear):
            clear()

    def _should_retry(self, exc: Exception) -> bool:
        # Only an expired access token is worth a second attempt
        return self._uses_token_auth() and classify_exception(exc) is ErrorCategory.TRANSIENT

    def _uses_token_auth(self) -> bool:
        return self._info is not None and not self._info.uses_sql_auth


__all__ = ["ConnectionGateway"]
