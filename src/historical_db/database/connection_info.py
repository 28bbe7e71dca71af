"""
Connection coordinates for the SQL gateway.

The server and database names come either straight from configuration or
from two Key Vault secrets. Which of the two applies is decided on the
first call and the result is kept for the life of the resolver.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from config.config import DatabaseConfig
from core.errors.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class SecretLookup(Protocol):
    async def get_secret_value(self, name: str) -> str:
        ...


@dataclass(frozen=True)
class ConnectionInfo:
    """Resolved SQL coordinates plus optional SQL-native credentials."""

    server: str
    database: str
    user: Optional[str] = None
    password: Optional[str] = None

    @property
    def uses_sql_auth(self) -> bool:
        return bool(self.user and self.password)

    def __repr__(self) -> str:
        return (
            f"ConnectionInfo(server={self.server!r}, database={self.database!r}, "
            f"user={self.user!r})"
        )


class ConnectionInfoResolver:
    """
    Memoizing resolver for ConnectionInfo.

    Concurrent first calls share one in-flight resolution. A failed
    resolution is not remembered, so a later call tries again. A caller
    cancelled while waiting leaves the shared resolution running.
    """

    def __init__(
        self,
        config: DatabaseConfig,
        secrets: Optional[SecretLookup] = None,
        secrets_factory: Optional[Callable[[], SecretLookup]] = None,
    ):
        """
        Args:
            config: Database section of the application config
            secrets: Secret cache used for Key Vault lookups
            secrets_factory: Builds the secret cache on first need when
                ``secrets`` is not given
        """
        self._config = config
        self._secrets = secrets
        self._secrets_factory = secrets_factory
        self._info: Optional[ConnectionInfo] = None
        self._resolving: Optional[asyncio.Task] = None

    async def resolve_connection_info(self) -> ConnectionInfo:
        """
        Return the connection coordinates, resolving them on first use.

        Raises:
            ConfigurationError: If neither direct values nor both secret
                names are configured
            SecretNotFoundError: If a named secret has no value
        """
        if self._info is not None:
            return self._info

        task = self._resolving
        if task is None:
            task = asyncio.create_task(self._resolve())
            task.add_done_callback(self._resolution_finished)
            self._resolving = task
        return await asyncio.shield(task)

    def _resolution_finished(self, task: asyncio.Task) -> None:
        if self._resolving is task:
            self._resolving = None

    async def _resolve(self) -> ConnectionInfo:
        info = await self._read_connection_info()
        self._info = info
        return info

    async def _read_connection_info(self) -> ConnectionInfo:
        config = self._config

        if config.server and config.database:
            logger.debug(
                "Using direct SQL connection settings",
                extra={"server": config.server, "database": config.database},
            )
            return ConnectionInfo(
                server=config.server,
                database=config.database,
                user=config.sql_auth_user,
                password=config.sql_auth_password,
            )

        if config.server_secret_name and config.database_secret_name:
            secrets = self._ensure_secrets()
            server, database = await asyncio.gather(
                secrets.get_secret_value(config.server_secret_name),
                secrets.get_secret_value(config.database_secret_name),
            )
            logger.info(
                "Resolved SQL connection settings from Key Vault",
                extra={"server": server, "database": database},
            )
            return ConnectionInfo(
                server=server,
                database=database,
                user=config.sql_auth_user,
                password=config.sql_auth_password,
            )

        raise ConfigurationError(
            "SQL connection configuration is incomplete. "
            "Provide direct values or Key Vault secret names."
        )

    def _ensure_secrets(self) -> SecretLookup:
        if self._secrets is None:
            if self._secrets_factory is None:
                raise ConfigurationError(
                    "Key Vault secret names are configured but no secret store is available."
                )
            self._secrets = self._secrets_factory()
        return self._secrets


__all__ = ["ConnectionInfo", "ConnectionInfoResolver", "SecretLookup"]
