"""
ODBC connection pool for Azure SQL.

Wraps an aioodbc pool (pyodbc on a thread executor) behind the small
SqlPool protocol the gateway depends on:

    pool = OdbcPool(PoolOptions(server=..., database=..., access_token=...))
    await pool.connect()
    rows = await pool.execute("SELECT @id AS id", {"id": 42})
    await pool.close()

Statements use T-SQL style ``@name`` placeholders. pyodbc only understands
positional ``?`` markers, so placeholders are rewritten in order of
appearance and the matching values are bound positionally.
"""

import logging
import re
import struct
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol, Sequence, Tuple

import aioodbc

from config.config import DEFAULT_ODBC_DRIVER

logger = logging.getLogger(__name__)

# msodbcsql pre-connect attribute carrying an Azure AD access token
SQL_COPT_SS_ACCESS_TOKEN = 1256

DEFAULT_POOL_MIN_SIZE = 1
DEFAULT_POOL_MAX_SIZE = 10

# @name, but not @@ROWCOUNT style system functions or e-mail addresses
_PLACEHOLDER_PATTERN = re.compile(r"(?<![@\w])@([A-Za-z_]\w*)")


@dataclass(frozen=True)
class PoolOptions:
    """
    Everything needed to open a pool.

    Exactly one auth mode applies: ``user``/``password`` for SQL-native
    auth, or ``access_token`` for Azure AD token auth.
    """

    server: str
    database: str
    encrypt: bool = True
    trust_server_certificate: bool = False
    user: Optional[str] = None
    password: Optional[str] = None
    access_token: Optional[str] = None
    driver: str = DEFAULT_ODBC_DRIVER

    @property
    def auth_mode(self) -> str:
        return "token" if self.access_token else "sql"

    def __repr__(self) -> str:
        return (
            f"PoolOptions(server={self.server!r}, database={self.database!r}, "
            f"auth_mode={self.auth_mode!r})"
        )


class SqlPool(Protocol):
    """Pool handle owned by ConnectionGateway."""

    @property
    def connected(self) -> bool:
        ...

    async def connect(self) -> None:
        ...

    async def execute(
        self, statement: str, parameters: Mapping[str, Any]
    ) -> List[Dict[str, Any]]:
        ...

    async def close(self) -> None:
        ...


PoolFactory = Callable[[PoolOptions], SqlPool]


def bind_named_parameters(
    statement: str, parameters: Mapping[str, Any]
) -> Tuple[str, Tuple[Any, ...]]:
    """
    Rewrite ``@name`` placeholders to ``?`` and collect values in order.

    A name used twice is bound twice. Parameters not referenced by the
    statement are ignored. Placeholders inside string literals are not
    detected; statements are expected to keep values out of literals.

    Raises:
        ValueError: If a placeholder has no entry in ``parameters``
    """
    values: List[Any] = []

    def replace(match: re.Match) -> str:
        name = match.group(1)
        if name not in parameters:
            raise ValueError(f"No value supplied for SQL parameter @{name}")
        values.append(parameters[name])
        return "?"

    return _PLACEHOLDER_PATTERN.sub(replace, statement), tuple(values)


def encode_access_token(token: str) -> bytes:
    """Pack an access token the way msodbcsql expects (length-prefixed UTF-16-LE)."""
    token_bytes = token.encode("UTF-16-LE")
    return struct.pack(f"<I{len(token_bytes)}s", len(token_bytes), token_bytes)


def _quote(value: str) -> str:
    # ODBC connection string values containing separators must be braced
    if any(ch in value for ch in ";{}=") or value != value.strip():
        return "{" + value.replace("}", "}}") + "}"
    return value


def build_connection_string(options: PoolOptions) -> str:
    """Build the ODBC connection string for ``options``."""
    parts = [
        f"Driver={{{options.driver}}}",
        f"Server={_quote(options.server)}",
        f"Database={_quote(options.database)}",
        f"Encrypt={'yes' if options.encrypt else 'no'}",
        f"TrustServerCertificate={'yes' if options.trust_server_certificate else 'no'}",
    ]
    if options.access_token is None and options.user and options.password:
        parts.append(f"UID={_quote(options.user)}")
        parts.append(f"PWD={_quote(options.password)}")
    return ";".join(parts) + ";"


def _rows_to_dicts(description: Optional[Sequence], rows: Sequence) -> List[Dict[str, Any]]:
    if not description:
        return []
    columns = [column[0] for column in description]
    return [dict(zip(columns, row)) for row in rows]


class OdbcPool:
    """aioodbc-backed SqlPool implementation."""

    def __init__(
        self,
        options: PoolOptions,
        min_size: int = DEFAULT_POOL_MIN_SIZE,
        max_size: int = DEFAULT_POOL_MAX_SIZE,
    ):
        self.options = options
        self.min_size = min_size
        self.max_size = max_size
        self._pool: Optional[aioodbc.Pool] = None

    @property
    def connected(self) -> bool:
        return self._pool is not None and not self._pool.closed

    async def connect(self) -> None:
        if self.connected:
            return

        connect_kwargs: Dict[str, Any] = {}
        if self.options.access_token:
            connect_kwargs["attrs_before"] = {
                SQL_COPT_SS_ACCESS_TOKEN: encode_access_token(self.options.access_token)
            }

        self._pool = await aioodbc.create_pool(
            dsn=build_connection_string(self.options),
            minsize=self.min_size,
            maxsize=self.max_size,
            autocommit=True,
            **connect_kwargs,
        )
        logger.debug(
            "ODBC pool created",
            extra={
                "server": self.options.server,
                "database": self.options.database,
                "auth_mode": self.options.auth_mode,
            },
        )

    async def execute(
        self, statement: str, parameters: Mapping[str, Any]
    ) -> List[Dict[str, Any]]:
        if self._pool is None:
            raise RuntimeError("Pool is not connected")

        sql, values = bind_named_parameters(statement, parameters)
        async with self._pool.acquire() as conn:
            async with conn.cursor() as cursor:
                await cursor.execute(sql, *values)
                if not cursor.description:
                    return []
                rows = await cursor.fetchall()
                return _rows_to_dicts(cursor.description, rows)

    async def close(self) -> None:
        if self._pool is None:
            return
        pool, self._pool = self._pool, None
        pool.close()
        await pool.wait_closed()


__all__ = [
    "OdbcPool",
    "PoolFactory",
    "PoolOptions",
    "SqlPool",
    "SQL_COPT_SS_ACCESS_TOKEN",
    "bind_named_parameters",
    "build_connection_string",
    "encode_access_token",
]
