"""
Database Connection Module

Provides async PostgreSQL connection pool using asyncpg.
The connection string comes from DATABASE_URL, which the multi-service
descriptor injects into the web process.

Usage:
    from app.db.connection import get_db_pool, Database

    # Get the singleton pool
    pool = await get_db_pool()

    # Or use the Database class for operations
    db = Database()
    await db.connect()
    info = await db.server_info()
    await db.close()
"""

import ssl
import asyncio
import logging
from typing import List, Optional, Any
from contextlib import asynccontextmanager

import asyncpg

from app.config import get_settings
from app.db.errors import DatabaseUnavailableError
from app.models.schemas import PoolSettings, ServerInfo


logger = logging.getLogger(__name__)

# Failures that mean "the database could not be reached or used".
# SQL errors in a query are not among them and propagate unchanged.
CONNECTION_ERRORS = (
    OSError,
    asyncio.TimeoutError,
    asyncpg.InterfaceError,
    asyncpg.exceptions.PostgresConnectionError,
    asyncpg.exceptions.CannotConnectNowError,  # server still starting up
    asyncpg.exceptions.TooManyConnectionsError,
    asyncpg.exceptions.InvalidAuthorizationSpecificationError,
    asyncpg.exceptions.InvalidCatalogNameError,
)

# Singleton pool instance
_pool: Optional[asyncpg.Pool] = None
_pool_lock = asyncio.Lock()


def build_ssl_context(verify: bool = True) -> ssl.SSLContext:
    """
    Build the TLS context handed to asyncpg.

    With verify=False the certificate chain and hostname are not checked,
    which hosted providers with self-signed certificates require.
    """
    context = ssl.create_default_context()
    if not verify:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    return context


def connect_kwargs(pool_settings: PoolSettings) -> dict:
    """Keyword arguments shared by asyncpg.connect and asyncpg.create_pool."""
    kwargs = {"command_timeout": pool_settings.command_timeout}
    if pool_settings.ssl:
        kwargs["ssl"] = build_ssl_context(pool_settings.ssl_verify)
    return kwargs


def pool_kwargs(pool_settings: PoolSettings) -> dict:
    """Translate PoolSettings into asyncpg.create_pool keyword arguments."""
    return {
        "min_size": pool_settings.min_size,
        "max_size": pool_settings.max_size,
        **connect_kwargs(pool_settings),
    }


async def get_db_pool(pool_settings: Optional[PoolSettings] = None) -> asyncpg.Pool:
    """
    Get or create the database connection pool.

    Uses singleton pattern - only one pool is created per process.

    Args:
        pool_settings: Pool configuration (defaults to one built from settings)

    Returns:
        asyncpg.Pool instance

    Raises:
        DatabaseNotConfiguredError: If no database URL is configured
        OSError, asyncpg.PostgresError: If the server cannot be reached
    """
    global _pool

    async with _pool_lock:
        if _pool is not None:
            return _pool

        if pool_settings is None:
            pool_settings = get_settings().pool_settings()

        logger.info("Opening connection pool to %s", pool_settings.redacted_dsn())
        _pool = await asyncpg.create_pool(
            pool_settings.dsn,
            **pool_kwargs(pool_settings),
        )

        return _pool


async def close_db_pool():
    """Close the database connection pool."""
    global _pool

    async with _pool_lock:
        if _pool is not None:
            await _pool.close()
            _pool = None
            logger.info("Connection pool closed")


class Database:
    """
    Database wrapper providing convenient async operations.

    Can use either a shared pool or be handed one explicitly.
    Driver failures surface as DatabaseUnavailableError.
    """

    def __init__(
        self,
        pool: Optional[asyncpg.Pool] = None,
        pool_settings: Optional[PoolSettings] = None,
    ):
        """
        Initialize database wrapper.

        Args:
            pool: Existing pool to use. If None, will get/create shared pool.
            pool_settings: Configuration used when the shared pool is created.
        """
        self._pool = pool
        self._pool_settings = pool_settings
        self._shared = pool is None

    @property
    def is_connected(self) -> bool:
        return self._pool is not None

    async def connect(self) -> "Database":
        """
        Connect to the database (get or create pool).

        Returns self for chaining.
        """
        if self._pool is None:
            try:
                self._pool = await get_db_pool(self._pool_settings)
            except CONNECTION_ERRORS as e:
                raise DatabaseUnavailableError(
                    f"Could not open connection pool: {e}"
                ) from e
        return self

    async def close(self):
        """Close the shared pool; a pool passed in stays open for its owner."""
        if self._pool is None:
            return
        if self._shared:
            await close_db_pool()
        self._pool = None

    @asynccontextmanager
    async def acquire(self):
        """Acquire a connection from the pool."""
        if self._pool is None:
            await self.connect()

        try:
            async with self._pool.acquire() as conn:
                yield conn
        except CONNECTION_ERRORS as e:
            raise DatabaseUnavailableError(str(e) or type(e).__name__) from e

    async def execute(self, query: str, *args) -> str:
        """
        Execute a query that doesn't return rows.

        Returns:
            Status string (e.g., "SELECT 1")
        """
        async with self.acquire() as conn:
            return await conn.execute(query, *args)

    async def fetch(self, query: str, *args) -> List[asyncpg.Record]:
        """Fetch multiple rows."""
        async with self.acquire() as conn:
            return await conn.fetch(query, *args)

    async def fetchrow(self, query: str, *args) -> Optional[asyncpg.Record]:
        """Fetch a single row, or None."""
        async with self.acquire() as conn:
            return await conn.fetchrow(query, *args)

    async def fetchval(self, query: str, *args) -> Any:
        """Fetch the first column of the first row."""
        async with self.acquire() as conn:
            return await conn.fetchval(query, *args)

    # ========================================================
    # Server Introspection
    # ========================================================

    async def server_info(self) -> ServerInfo:
        """Ask the server for its clock, version, database and role."""
        row = await self.fetchrow(
            """
            SELECT now() AS now,
                   version() AS version,
                   current_database() AS database,
                   current_user AS "user"
            """
        )
        return ServerInfo.from_record(row)

    async def health_check(self) -> bool:
        """Check database connectivity."""
        try:
            result = await self.fetchval("SELECT 1")
            return result == 1
        except Exception:
            logger.warning("Database health check failed", exc_info=True)
            return False
