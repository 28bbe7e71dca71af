"""Configuration loading for the historical DB API.

Usage:
    >>> from config import load_config
    >>> config = load_config()
    >>> config.database.server

Settings are merged in the following priority (highest to lowest):

1. Environment variables (SQL_SERVER_HOST, KEY_VAULT_URI, ...)
2. config/config.yaml
3. Dataclass defaults
"""

from config.config import (
    AppConfig,
    AzureAuthConfig,
    DatabaseConfig,
    load_config,
    parse_allowed_origins,
    parse_port,
)

__all__ = [
    "load_config",
    "parse_allowed_origins",
    "parse_port",
    "AppConfig",
    "AzureAuthConfig",
    "DatabaseConfig",
]
