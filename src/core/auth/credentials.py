"""
Azure credential source for SQL access tokens.

Adapts azure-identity's async credentials to the CredentialSource protocol
used by TokenCache.

Supported Authentication Methods:
    - Service Principal (Secret): client ID/secret/tenant from configuration
    - Default Azure Credential: azure-identity's credential chain
      (managed identity, environment variables, Azure CLI, etc.)

Configuration is passed in explicitly; this module never reads the process
environment itself.

Example:
    >>> source = AzureCredentialSource(client_id="...", client_secret="...", tenant_id="...")
    >>> token = await source.get_token("https://database.windows.net/.default")
    >>> await source.close()
"""

import logging
from typing import Optional

from azure.identity.aio import ClientSecretCredential, DefaultAzureCredential

from core.errors.exceptions import TokenAcquisitionError
from core.types import AccessTokenInfo

logger = logging.getLogger(__name__)


class AzureCredentialSource:
    """
    Credential source backed by azure-identity.

    The underlying credential object is created on first use and reused.

    Attributes:
        client_id: Azure AD client ID (for SPN auth)
        client_secret: Client secret (for SPN auth)
        tenant_id: Azure AD tenant ID
    """

    def __init__(
        self,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        tenant_id: Optional[str] = None,
        credential=None,
    ):
        """
        Initialize credential source.

        Args:
            client_id: Azure AD client ID (for SPN)
            client_secret: Client secret (for SPN)
            tenant_id: Azure AD tenant ID
            credential: Pre-built async azure-identity credential (optional)
        """
        self.client_id = client_id
        self.client_secret = client_secret
        self.tenant_id = tenant_id
        self._credential = credential

    @property
    def has_spn_credentials(self) -> bool:
        """True if client ID, secret and tenant are all configured."""
        return all([self.client_id, self.client_secret, self.tenant_id])

    @property
    def auth_mode(self) -> str:
        """Active auth mode for diagnostics: "spn_secret" or "default"."""
        if self.has_spn_credentials:
            return "spn_secret"
        return "default"

    def _get_azure_credential(self):
        if self._credential is not None:
            return self._credential

        if self.has_spn_credentials:
            logger.debug(
                "Using client secret Service Principal authentication",
                extra={"tenant_id": self.tenant_id, "client_id": self.client_id},
            )
            self._credential = ClientSecretCredential(
                tenant_id=self.tenant_id,
                client_id=self.client_id,
                client_secret=self.client_secret,
            )
        else:
            logger.info("Using DefaultAzureCredential (managed identity, env vars, etc.)")
            self._credential = DefaultAzureCredential()
        return self._credential

    async def get_token(self, scope: str) -> Optional[AccessTokenInfo]:
        """
        Get access token for the given scope.

        Args:
            scope: OAuth scope (e.g., "https://database.windows.net/.default")

        Returns:
            AccessTokenInfo with expiry in epoch milliseconds, or None if the
            credential produced nothing

        Raises:
            TokenAcquisitionError: If the credential chain fails
        """
        credential = self._get_azure_credential()
        try:
            access_token = await credential.get_token(scope)
        except Exception as e:
            raise TokenAcquisitionError(
                f"Failed to acquire token for {scope}",
                cause=e,
                context={"auth_mode": self.auth_mode},
            ) from e

        if access_token is None:
            return None

        # azure-identity reports expires_on in epoch seconds
        return AccessTokenInfo(
            token=access_token.token,
            expires_at_epoch_ms=int(access_token.expires_on) * 1000,
        )

    async def close(self) -> None:
        """Close the underlying credential's transport, if one was created."""
        if self._credential is not None:
            await self._credential.close()
            self._credential = None


__all__ = ["AzureCredentialSource"]
