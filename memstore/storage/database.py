"""
PostgreSQL database connection management.

Uses asyncpg for async database operations.
Provides a bounded connection pool, transaction management and
translation of driver errors into StorageFailure.
"""

import json
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from types import TracebackType
from typing import Any

import asyncpg

from memstore.config.settings import get_settings
from memstore.exceptions import StorageFailure

logger = logging.getLogger(__name__)

# Driver and network errors surfaced to callers as StorageFailure
_STORAGE_ERRORS: tuple[type[BaseException], ...] = (
    asyncpg.PostgresError,
    asyncpg.InterfaceError,
    OSError,
    TimeoutError,
)


async def _init_connection(conn: asyncpg.Connection) -> None:
    """Decode JSONB columns to Python objects on every pooled connection."""
    await conn.set_type_codec(
        "jsonb",
        encoder=json.dumps,
        decoder=json.loads,
        schema="pg_catalog",
    )


def _storage_failure(exc: BaseException) -> StorageFailure:
    if isinstance(exc, TimeoutError):
        message = "Database connection pool exhausted or query timed out"
    else:
        message = f"Database error: {exc.__class__.__name__}: {exc}"
    return StorageFailure(message)


class Database:
    """
    Async PostgreSQL database connection manager.

    Uses an asyncpg connection pool for connection reuse. The pool is
    bounded; acquiring a connection waits at most ``acquire_timeout``
    seconds and then fails with StorageFailure instead of blocking.
    Connections are always returned to the pool, on success or error.

    Usage:
        db = Database()
        await db.connect()

        async with db.transaction() as conn:
            await conn.execute("INSERT INTO ...")

        await db.close()
    """

    def __init__(
        self,
        database_url: str | None = None,
        min_size: int | None = None,
        max_size: int | None = None,
        acquire_timeout: float | None = None,
    ):
        """
        Initialize database connection manager.

        Args:
            database_url: PostgreSQL connection URL
            min_size: Minimum pool size
            max_size: Maximum pool size
            acquire_timeout: Seconds to wait for a free connection
        """
        settings = get_settings()

        self._database_url = database_url or str(settings.database_url)
        self._min_size = min_size or settings.db_pool_min_size
        self._max_size = max_size or settings.db_pool_max_size
        self._acquire_timeout = acquire_timeout or settings.db_acquire_timeout
        self._command_timeout = settings.db_command_timeout

        self._pool: asyncpg.Pool | None = None

    async def connect(self) -> None:
        """
        Establish database connection pool.

        Raises:
            StorageFailure: If the database is unreachable
        """
        try:
            self._pool = await asyncpg.create_pool(
                self._database_url,
                min_size=min(self._min_size, self._max_size),
                max_size=self._max_size,
                command_timeout=self._command_timeout,
                init=_init_connection,
            )
        except _STORAGE_ERRORS as e:
            logger.error(f"Failed to connect to database: {e}")
            raise _storage_failure(e) from e

        logger.info(f"Database connected (pool: {self._min_size}-{self._max_size})")

    async def close(self) -> None:
        """Close database connection pool."""
        if self._pool:
            await self._pool.close()
            self._pool = None
            logger.info("Database connection closed")

    async def __aenter__(self) -> "Database":
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    @property
    def pool(self) -> asyncpg.Pool:
        """Get connection pool, raising if not connected."""
        if self._pool is None:
            raise RuntimeError("Database not connected. Call connect() first.")
        return self._pool

    @property
    def is_connected(self) -> bool:
        return self._pool is not None

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[asyncpg.Connection]:
        """
        Acquire a connection from the pool.

        Usage:
            async with db.acquire() as conn:
                await conn.execute("...")
        """
        try:
            async with self.pool.acquire(timeout=self._acquire_timeout) as conn:
                yield conn
        except _STORAGE_ERRORS as e:
            raise _storage_failure(e) from e

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[asyncpg.Connection]:
        """
        Start a transaction.

        Usage:
            async with db.transaction() as conn:
                await conn.execute("INSERT INTO ...")
                await conn.execute("UPDATE ...")
        """
        async with self.acquire() as conn:
            async with conn.transaction():
                yield conn

    async def execute(self, query: str, *args: Any) -> str:
        """
        Execute a query without returning results.

        Returns:
            Status string from PostgreSQL (e.g. "DELETE 3")
        """
        async with self.acquire() as conn:
            return await conn.execute(query, *args)

    async def fetch(self, query: str, *args: Any) -> list[asyncpg.Record]:
        """Execute a query and fetch all results."""
        async with self.acquire() as conn:
            return await conn.fetch(query, *args)

    async def fetchrow(self, query: str, *args: Any) -> asyncpg.Record | None:
        """Execute a query and fetch one result."""
        async with self.acquire() as conn:
            return await conn.fetchrow(query, *args)

    async def fetchval(self, query: str, *args: Any) -> Any:
        """Execute a query and fetch a single value."""
        async with self.acquire() as conn:
            return await conn.fetchval(query, *args)

    async def health_check(self) -> bool:
        """
        Check if database is healthy.

        Returns:
            True if database is accessible
        """
        try:
            result = await self.fetchval("SELECT 1")
            return result == 1
        except (StorageFailure, RuntimeError):
            return False
