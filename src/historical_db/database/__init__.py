"""
Database access: connection info resolution, pooled SQL gateway, wiring.

Components:
    - ConnectionInfoResolver: direct config or Key Vault secrets, memoized
    - ConnectionGateway: lazy pool, single-flight connect, one retry on
      expired access tokens
    - OdbcPool: aioodbc pool for Azure SQL
    - DatabaseProvider: composition root
"""

from historical_db.database.connection_info import ConnectionInfo, ConnectionInfoResolver
from historical_db.database.gateway import ConnectionGateway
from historical_db.database.pool import OdbcPool, PoolOptions, SqlPool
from historical_db.database.provider import DatabaseProvider

__all__ = [
    "ConnectionInfo",
    "ConnectionInfoResolver",
    "ConnectionGateway",
    "DatabaseProvider",
    "OdbcPool",
    "PoolOptions",
    "SqlPool",
]
