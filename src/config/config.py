"""Application configuration from YAML file and environment.

Loads once at process start into immutable dataclasses that are passed down
explicitly; nothing below the entry point reads the environment.

Environment variables ARE supported using ${VAR_NAME} syntax in YAML files,
and the well-known variables listed on each dataclass override YAML values.
"""

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

# Configure module logger
logger = logging.getLogger(__name__)

DEFAULT_PORT = 3000
DEFAULT_ODBC_DRIVER = "ODBC Driver 18 for SQL Server"

# Default config file: config/config.yaml in src/ directory
DEFAULT_CONFIG_FILE = Path(__file__).parent.parent / "config" / "config.yaml"


def load_yaml(path: Path) -> Dict[str, Any]:
    """Load YAML file and return dict."""
    if not path.exists():
        return {}
    with open(path, "r") as f:
        return yaml.safe_load(f) or {}


def _expand_env_vars(data: Any, environ: Mapping[str, str]) -> Any:
    """Recursively expand ${VAR_NAME} and ${VAR_NAME:-default} environment variables in config data."""
    if isinstance(data, dict):
        return {key: _expand_env_vars(value, environ) for key, value in data.items()}
    elif isinstance(data, list):
        return [_expand_env_vars(item, environ) for item in data]
    elif isinstance(data, str):
        # Support both ${VAR} and ${VAR:-default} syntax
        pattern = r"\$\{([^}:]+)(?::-(([^}]*))?)?\}"

        def replacer(match):
            var_name = match.group(1)
            default_value = match.group(2) if match.group(2) is not None else match.group(0)
            return environ.get(var_name, default_value)

        return re.sub(pattern, replacer, data)
    else:
        return data


def _clean(value: Any) -> Optional[str]:
    """Normalise blank/missing values to None."""
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def parse_allowed_origins(raw: Optional[str]) -> Optional[List[str]]:
    """Split a comma-separated origin list. Empty input gives None."""
    if not raw:
        return None

    origins = [entry.strip() for entry in raw.split(",")]
    origins = [entry for entry in origins if entry]
    return origins or None


def parse_port(raw: Any) -> int:
    """Parse listen port, falling back to the default on bad input."""
    try:
        return int(raw)
    except (TypeError, ValueError):
        return DEFAULT_PORT


@dataclass(frozen=True)
class DatabaseConfig:
    """SQL connection settings.

    Either direct ``server``/``database`` values or a pair of Key Vault secret
    names holding them must be set.

    Environment variables:
        SQL_SERVER_HOST, SQL_DATABASE_NAME,
        KEY_VAULT_SQL_SERVER_SECRET, KEY_VAULT_SQL_DATABASE_SECRET,
        SQL_AUTH_USER, SQL_AUTH_PASSWORD, KEY_VAULT_URI, SQL_ODBC_DRIVER
    """

    server: Optional[str] = None
    database: Optional[str] = None
    server_secret_name: Optional[str] = None
    database_secret_name: Optional[str] = None
    sql_auth_user: Optional[str] = None
    sql_auth_password: Optional[str] = None
    key_vault_uri: Optional[str] = None
    odbc_driver: str = DEFAULT_ODBC_DRIVER

    def __repr__(self) -> str:
        # Password must never end up in logs
        return (
            f"DatabaseConfig(server={self.server!r}, database={self.database!r}, "
            f"server_secret_name={self.server_secret_name!r}, "
            f"database_secret_name={self.database_secret_name!r}, "
            f"sql_auth_user={self.sql_auth_user!r}, key_vault_uri={self.key_vault_uri!r})"
        )


@dataclass(frozen=True)
class AzureAuthConfig:
    """Service principal settings. All unset means DefaultAzureCredential.

    Environment variables:
        AZURE_CLIENT_ID, AZURE_CLIENT_SECRET, AZURE_TENANT_ID
    """

    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    tenant_id: Optional[str] = None

    def __repr__(self) -> str:
        return f"AzureAuthConfig(client_id={self.client_id!r}, tenant_id={self.tenant_id!r})"


@dataclass(frozen=True)
class AppConfig:
    """Top-level application configuration.

    Environment variables:
        APP_ALLOWED_ORIGINS (comma-separated), PORT, LOG_LEVEL, LOG_JSON
    """

    allowed_origins: Optional[List[str]] = None
    port: int = DEFAULT_PORT
    log_level: str = "INFO"
    log_json: bool = False
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    azure: AzureAuthConfig = field(default_factory=AzureAuthConfig)


_DATABASE_ENV = {
    "server": "SQL_SERVER_HOST",
    "database": "SQL_DATABASE_NAME",
    "server_secret_name": "KEY_VAULT_SQL_SERVER_SECRET",
    "database_secret_name": "KEY_VAULT_SQL_DATABASE_SECRET",
    "sql_auth_user": "SQL_AUTH_USER",
    "sql_auth_password": "SQL_AUTH_PASSWORD",
    "key_vault_uri": "KEY_VAULT_URI",
    "odbc_driver": "SQL_ODBC_DRIVER",
}

_AZURE_ENV = {
    "client_id": "AZURE_CLIENT_ID",
    "client_secret": "AZURE_CLIENT_SECRET",
    "tenant_id": "AZURE_TENANT_ID",
}


def _apply_env_overrides(
    data: Dict[str, Any],
    mapping: Dict[str, str],
    environ: Mapping[str, str],
) -> Dict[str, Any]:
    result = dict(data)
    for key, env_name in mapping.items():
        value = environ.get(env_name)
        if value is not None:
            result[key] = value
    return result


def load_config(
    config_path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> AppConfig:
    """Load application configuration.

    Configuration priority (highest to lowest):
    1. Environment variables
    2. config.yaml file (``app:``, ``database:`` and ``azure:`` sections)
    3. Dataclass defaults

    Args:
        config_path: YAML file to read (default: src/config/config.yaml).
            A missing file is not an error.
        environ: Environment mapping (default: os.environ)
    """
    config_path = config_path or DEFAULT_CONFIG_FILE
    environ = os.environ if environ is None else environ

    yaml_data = _expand_env_vars(load_yaml(config_path), environ)
    if yaml_data:
        logger.info("Loading configuration from file: %s", config_path)

    app_data = _apply_env_overrides(
        yaml_data.get("app", {}) or {},
        {
            "allowed_origins": "APP_ALLOWED_ORIGINS",
            "port": "PORT",
            "log_level": "LOG_LEVEL",
            "log_json": "LOG_JSON",
        },
        environ,
    )
    db_data = _apply_env_overrides(yaml_data.get("database", {}) or {}, _DATABASE_ENV, environ)
    azure_data = _apply_env_overrides(yaml_data.get("azure", {}) or {}, _AZURE_ENV, environ)

    allowed_origins = app_data.get("allowed_origins")
    if isinstance(allowed_origins, list):
        allowed_origins = ",".join(str(origin) for origin in allowed_origins)

    database = DatabaseConfig(
        **{key: _clean(db_data.get(key)) for key in _DATABASE_ENV if key != "odbc_driver"},
        odbc_driver=_clean(db_data.get("odbc_driver")) or DEFAULT_ODBC_DRIVER,
    )
    azure = AzureAuthConfig(**{key: _clean(azure_data.get(key)) for key in _AZURE_ENV})

    config = AppConfig(
        allowed_origins=parse_allowed_origins(allowed_origins),
        port=parse_port(app_data.get("port", DEFAULT_PORT)),
        log_level=str(app_data.get("log_level") or "INFO").upper(),
        log_json=str(app_data.get("log_json", "false")).lower() in ("1", "true", "yes"),
        database=database,
        azure=azure,
    )

    logger.debug(
        "Configuration loaded",
        extra={"server": database.server, "database": database.database},
    )
    return config
