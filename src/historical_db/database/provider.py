"""
Composition root for database access.

Wires configuration, Azure credential, token cache, Key Vault secret cache
and the SQL gateway together. Production collaborators are created here
and only here; everything below takes its collaborators as arguments.
"""

import logging
from typing import Optional

from config.config import AppConfig
from core.auth.credentials import AzureCredentialSource
from core.auth.token_cache import TokenCache
from core.secrets.key_vault import KeyVaultSecretStore
from core.secrets.secret_cache import SecretCache
from core.types import CredentialSource, TokenProvider
from historical_db.database.connection_info import ConnectionInfoResolver, SecretLookup
from historical_db.database.gateway import ConnectionGateway
from historical_db.database.pool import OdbcPool, PoolFactory

logger = logging.getLogger(__name__)


class DatabaseProvider:
    """
    Owns the single ConnectionGateway used by the application.

    The Key Vault client is only built if connection info actually has to
    come from secrets.

    Example:
        provider = DatabaseProvider(load_config())
        gateway = provider.get_gateway()
        rows = await gateway.query("SELECT 1 AS one")
        await provider.dispose()
    """

    def __init__(
        self,
        config: AppConfig,
        credential: Optional[CredentialSource] = None,
        token_provider: Optional[TokenProvider] = None,
        secrets: Optional[SecretLookup] = None,
        pool_factory: PoolFactory = OdbcPool,
    ):
        self.config = config
        self._credential = credential or AzureCredentialSource(
            client_id=config.azure.client_id,
            client_secret=config.azure.client_secret,
            tenant_id=config.azure.tenant_id,
        )
        self._token_provider = token_provider or TokenCache(self._credential)
        self._secret_store: Optional[KeyVaultSecretStore] = None
        self._resolver = ConnectionInfoResolver(
            config.database,
            secrets=secrets,
            secrets_factory=self._create_secret_cache,
        )
        self._pool_factory = pool_factory
        self._gateway: Optional[ConnectionGateway] = None

    def get_gateway(self) -> ConnectionGateway:
        """Return the gateway, creating it on first call."""
        if self._gateway is None:
            self._gateway = ConnectionGateway(
                resolver=self._resolver,
                token_provider=self._token_provider,
                pool_factory=self._pool_factory,
                driver=self.config.database.odbc_driver,
            )
        return self._gateway

    async def dispose(self) -> None:
        """Close the gateway's pool and any Azure clients this provider created."""
        if self._gateway is not None:
            await self._gateway.dispose()
            self._gateway = None

        if self._secret_store is not None:
            await self._secret_store.close()
            self._secret_store = None

        close = getattr(self._credential, "close", None)
        if callable(close):
            await close()

    def _create_secret_cache(self) -> SecretCache:
        self._secret_store = KeyVaultSecretStore(self.config.database.key_vault_uri)
        logger.debug("Created Key Vault secret store")
        return SecretCache(self._secret_store)


__all__ = ["DatabaseProvider"]
