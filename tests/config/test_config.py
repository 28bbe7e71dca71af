from pathlib import Path

import pytest

from config.config import (
    DEFAULT_ODBC_DRIVER,
    DEFAULT_PORT,
    AppConfig,
    AzureAuthConfig,
    DatabaseConfig,
    _expand_env_vars,
    load_config,
    load_yaml,
    parse_allowed_origins,
    parse_port,
)

# =========================================================================
# load_yaml / _expand_env_vars
# =========================================================================


class TestLoadYaml:
    def test_returns_empty_dict_for_nonexistent_file(self):
        assert load_yaml(Path("/nonexistent/path/config.yaml")) == {}

    def test_loads_yaml_file(self, tmp_path):
        config_file = tmp_path / "test.yaml"
        config_file.write_text("key: value\nnested:\n  a: 1\n")
        assert load_yaml(config_file) == {"key": "value", "nested": {"a": 1}}

    def test_returns_empty_dict_for_empty_file(self, tmp_path):
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("")
        assert load_yaml(config_file) == {}


class TestExpandEnvVars:
    def test_expands_variable(self):
        assert _expand_env_vars("${HOST}", {"HOST": "srv"}) == "srv"

    def test_uses_default_when_unset(self):
        assert _expand_env_vars("${HOST:-fallback}", {}) == "fallback"

    def test_empty_default(self):
        assert _expand_env_vars("${HOST:-}", {}) == ""

    def test_leaves_unset_variable_without_default(self):
        assert _expand_env_vars("${HOST}", {}) == "${HOST}"

    def test_recurses_into_containers(self):
        data = {"a": ["${X}", {"b": "${Y:-y}"}], "n": 1}
        assert _expand_env_vars(data, {"X": "x"}) == {"a": ["x", {"b": "y"}], "n": 1}


# =========================================================================
# Parsers
# =========================================================================


class TestParseAllowedOrigins:
    def test_none_and_empty(self):
        assert parse_allowed_origins(None) is None
        assert parse_allowed_origins("") is None
        assert parse_allowed_origins(" , ,") is None

    def test_splits_and_trims(self):
        assert parse_allowed_origins("http://a.com, http://b.com ,") == [
            "http://a.com",
            "http://b.com",
        ]


class TestParsePort:
    def test_parses_number(self):
        assert parse_port("8080") == 8080

    @pytest.mark.parametrize("raw", [None, "", "abc"])
    def test_falls_back_to_default(self, raw):
        assert parse_port(raw) == DEFAULT_PORT


# =========================================================================
# load_config
# =========================================================================


class TestLoadConfig:
    def test_defaults_with_empty_environment(self, tmp_path):
        config = load_config(tmp_path / "missing.yaml", environ={})

        assert config == AppConfig()
        assert config.port == 3000
        assert config.database.odbc_driver == DEFAULT_ODBC_DRIVER

    def test_bundled_yaml_with_empty_environment(self):
        config = load_config(environ={})

        assert config.allowed_origins is None
        assert config.port == 3000
        assert config.log_json is False
        assert config.database == DatabaseConfig()
        assert config.azure == AzureAuthConfig()

    def test_environment_overrides(self):
        environ = {
            "SQL_SERVER_HOST": "srv.database.windows.net",
            "SQL_DATABASE_NAME": "M3",
            "SQL_AUTH_USER": "app",
            "SQL_AUTH_PASSWORD": "secret",
            "AZURE_CLIENT_ID": "cid",
            "APP_ALLOWED_ORIGINS": "http://localhost:5173",
            "PORT": "4000",
            "LOG_LEVEL": "debug",
            "LOG_JSON": "true",
        }
        config = load_config(environ=environ)

        assert config.database.server == "srv.database.windows.net"
        assert config.database.database == "M3"
        assert config.database.sql_auth_user == "app"
        assert config.database.sql_auth_password == "secret"
        assert config.azure.client_id == "cid"
        assert config.allowed_origins == ["http://localhost:5173"]
        assert config.port == 4000
        assert config.log_level == "DEBUG"
        assert config.log_json is True

    def test_yaml_values_and_blank_env(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            "app:\n"
            "  allowed_origins: [http://a.com, http://b.com]\n"
            "database:\n"
            "  key_vault_uri: https://vault.vault.azure.net/\n"
            "  server_secret_name: SqlServerHost\n"
            "  database_secret_name: SqlDatabaseName\n"
        )

        config = load_config(config_file, environ={"SQL_SERVER_HOST": "   "})

        assert config.allowed_origins == ["http://a.com", "http://b.com"]
        assert config.database.key_vault_uri == "https://vault.vault.azure.net/"
        assert config.database.server_secret_name == "SqlServerHost"
        assert config.database.server is None

    def test_repr_hides_secrets(self):
        config = load_config(
            environ={"SQL_AUTH_PASSWORD": "p@ss", "AZURE_CLIENT_SECRET": "cs-secret"}
        )

        assert "p@ss" not in repr(config)
        assert "cs-secret" not in repr(config)
