"""Azure Key Vault adapter for the SecretStore protocol."""

import logging
from typing import Optional

from azure.core.exceptions import ResourceNotFoundError
from azure.identity.aio import DefaultAzureCredential
from azure.keyvault.secrets.aio import SecretClient

from core.errors.exceptions import ConfigurationError, SecretNotFoundError

logger = logging.getLogger(__name__)


class KeyVaultSecretStore:
    """
    Reads secrets from Azure Key Vault using an async SecretClient.

    Either ``client`` or ``vault_url`` must be supplied. When only a URL is
    given, the client authenticates with ``credential`` or, failing that,
    DefaultAzureCredential.
    """

    def __init__(
        self,
        vault_url: Optional[str] = None,
        credential=None,
        client: Optional[SecretClient] = None,
    ):
        if client is None and not vault_url:
            raise ConfigurationError(
                "KeyVault URI is required when a client instance is not provided."
            )

        self.vault_url = vault_url
        self._owns_credential = client is None and credential is None
        self._credential = credential
        if client is None:
            if self._credential is None:
                self._credential = DefaultAzureCredential()
            client = SecretClient(vault_url=vault_url, credential=self._credential)
        self._client = client

    async def get_secret(self, name: str):
        """
        Fetch the current version of a secret.

        Raises:
            SecretNotFoundError: If the vault has no secret with this name
        """
        try:
            return await self._client.get_secret(name)
        except ResourceNotFoundError as e:
            raise SecretNotFoundError(name, cause=e) from e

    async def close(self) -> None:
        await self._client.close()
        if self._owns_credential and self._credential is not None:
            await self._credential.close()


__all__ = ["KeyVaultSecretStore"]
