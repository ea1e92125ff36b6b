"""
PostgreSQL Client Wrapper

Centralized asyncpg pool wrapper with service discovery integration and a
consistent database access pattern.

Usage:
    from core.postgres_client import PostgresClientWrapper

    db = PostgresClientWrapper("campaign_approval_service")
    await db.connect()

    rows = await db.query("SELECT * FROM campaign_approval.campaigns WHERE status = $1", ["active"])

    async with db.transaction() as tx:
        await tx.execute("UPDATE ...", [...])
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

import asyncpg

logger = logging.getLogger(__name__)


class _QueryMixin:
    """Row-as-dict helpers shared by the pool and a transaction connection"""

    async def _fetch(self, sql: str, params: List[Any]) -> List[asyncpg.Record]:
        raise NotImplementedError

    async def _fetchrow(self, sql: str, params: List[Any]) -> Optional[asyncpg.Record]:
        raise NotImplementedError

    async def _execute(self, sql: str, params: List[Any]) -> str:
        raise NotImplementedError

    async def query(self, sql: str, params: Optional[List[Any]] = None) -> List[Dict[str, Any]]:
        """Execute query and return results"""
        rows = await self._fetch(sql, params or [])
        return [dict(row) for row in rows]

    async def query_row(self, sql: str, params: Optional[List[Any]] = None) -> Optional[Dict[str, Any]]:
        """Execute query and return single row"""
        row = await self._fetchrow(sql, params or [])
        return dict(row) if row is not None else None

    async def execute(self, sql: str, params: Optional[List[Any]] = None) -> int:
        """Execute SQL statement and return the number of affected rows"""
        status = await self._execute(sql, params or [])
        return _affected_rows(status)


def _affected_rows(status: str) -> int:
    # asyncpg returns the command tag, e.g. "UPDATE 1" or "INSERT 0 1"
    try:
        return int(status.split()[-1])
    except (AttributeError, IndexError, ValueError):
        return 0


class TransactionConnection(_QueryMixin):
    """Connection bound to an open transaction"""

    def __init__(self, connection: asyncpg.Connection):
        self._conn = connection

    async def _fetch(self, sql, params):
        return await self._conn.fetch(sql, *params)

    async def _fetchrow(self, sql, params):
        return await self._conn.fetchrow(sql, *params)

    async def _execute(self, sql, params):
        return await self._conn.execute(sql, *params)


class PostgresClientWrapper(_QueryMixin):
    """
    PostgreSQL client wrapper with service discovery integration.

    Provides:
    - Service discovery for host/port configuration
    - A lazily created asyncpg connection pool
    - Transactions exposing the same query/query_row/execute surface
    """

    def __init__(
        self,
        service_name: str,
        host: Optional[str] = None,
        port: Optional[int] = None,
        database: Optional[str] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        min_size: Optional[int] = None,
        max_size: Optional[int] = None,
    ):
        """
        Initialize PostgreSQL client wrapper.

        Args:
            service_name: Name of the service using this client
            host: PostgreSQL host (defaults to env/service discovery)
            port: PostgreSQL port (defaults to 5432)
            database: Database name (defaults to 'postgres')
            username: Database username
            password: Database password
            min_size: Minimum pool size
            max_size: Maximum pool size
        """
        from core.config_manager import ConfigManager

        self.service_name = service_name

        config = ConfigManager(service_name)
        infra = config.infra
        discovered_host, discovered_port = config.discover_service(
            service_name="postgres_service",
            default_host=infra.postgres_host,
            default_port=infra.postgres_port,
            env_host_key="POSTGRES_HOST",
            env_port_key="POSTGRES_PORT",
        )

        self.host = host or discovered_host
        self.port = port or discovered_port
        self.database = database or infra.postgres_db
        self.username = username or infra.postgres_user
        self.password = password or infra.postgres_password
        self.min_size = min_size or infra.postgres_min_pool
        self.max_size = max_size or infra.postgres_max_pool

        self._pool: Optional[asyncpg.Pool] = None

        logger.info(f"PostgreSQL client initialized for {service_name}: {self.host}:{self.port}/{self.database}")

    async def connect(self) -> None:
        """Create the connection pool"""
        if self._pool is not None:
            return
        self._pool = await asyncpg.create_pool(
            host=self.host,
            port=self.port,
            database=self.database,
            user=self.username,
            password=self.password,
            min_size=self.min_size,
            max_size=self.max_size,
        )
        logger.info(f"PostgreSQL pool ready ({self.min_size}-{self.max_size} connections)")

    @property
    def pool(self) -> asyncpg.Pool:
        if self._pool is None:
            raise RuntimeError("PostgreSQL pool not connected. Call connect() first.")
        return self._pool

    async def _fetch(self, sql, params):
        return await self.pool.fetch(sql, *params)

    async def _fetchrow(self, sql, params):
        return await self.pool.fetchrow(sql, *params)

    async def _execute(self, sql, params):
        return await self.pool.execute(sql, *params)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[TransactionConnection]:
        """Run statements on one connection inside a transaction"""
        async with self.pool.acquire() as conn:
            async with conn.transaction():
                yield TransactionConnection(conn)

    async def health_check(self) -> bool:
        """Check database health"""
        row = await self.query_row("SELECT 1 AS healthy")
        return bool(row and row.get("healthy") == 1)

    async def close(self):
        """Close connection pool"""
        if self._pool is not None:
            await self._pool.close()
            self._pool = None


__all__ = ["PostgresClientWrapper", "TransactionConnection"]
