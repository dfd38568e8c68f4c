"""
PostgreSQL connection client.

Wraps an asyncpg pool behind the small surface the repositories need:
statement execution, scalar and list lookups, a streaming cursor, an
emptiness check and graceful shutdown. One client is shared by every
repository built from the same configuration.
"""

import asyncio
from typing import Any, AsyncIterator, List, Optional

import asyncpg
import structlog

logger = structlog.get_logger(__name__)

# Bounds connection and schema setup; normal calls use the caller's timeout
CONSTRUCT_TIMEOUT = 3.0

CURSOR_PREFETCH = 50


def affected_rows(status: str) -> int:
    """
    Extract the row count from a command status tag.

    ``INSERT 0 1`` -> 1, ``UPDATE 3`` -> 3, ``CREATE TABLE`` -> 0.
    """
    last = status.rsplit(" ", 1)[-1] if status else ""
    return int(last) if last.isdigit() else 0


class PgClient:
    """
    Shared PostgreSQL client.

    Repositories ``attach()`` when they start using the client and
    ``release()`` when they stop. The pool is closed once the last holder
    has released it, so each repository can be shut down independently.
    """

    def __init__(self, pool: asyncpg.Pool):
        """
        Initialize client.

        Args:
            pool: Connected asyncpg pool
        """
        self._pool = pool
        self._holders = 0
        self._closed = False

    @classmethod
    async def connect(
        cls,
        dsn: str,
        min_size: int = 2,
        max_size: int = 10,
        timeout: float = CONSTRUCT_TIMEOUT,
    ) -> "PgClient":
        """
        Create the connection pool.

        Args:
            dsn: PostgreSQL connection URL
            min_size: Minimum pool size
            max_size: Maximum pool size
            timeout: Seconds allowed for the initial connections

        Raises:
            asyncio.TimeoutError: If the pool is not ready in time. Connections
                opened so far are terminated before the error is raised.
        """
        logger.info("Creating database connection pool", min_size=min_size, max_size=max_size)
        pending = asyncpg.create_pool(
            dsn,
            min_size=min_size,
            max_size=max_size,
            statement_cache_size=0,
        )
        try:
            pool = await asyncio.wait_for(pending, timeout=timeout)
        except asyncio.TimeoutError:
            logger.error("Database connection pool not ready in time", timeout=timeout)
            pending.terminate()
            raise
        logger.info("Database connection pool created")
        return cls(pool)

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def holders(self) -> int:
        return self._holders

    def attach(self) -> None:
        """Register one more repository using this client."""
        self._holders += 1

    async def execute(self, query: str, *args: Any, timeout: Optional[float] = None) -> int:
        """
        Execute a statement.

        Returns:
            Number of affected rows (0 for DDL)
        """
        status = await self._pool.execute(query, *args, timeout=timeout)
        return affected_rows(status)

    async def fetch(self, query: str, *args: Any, timeout: Optional[float] = None) -> List[asyncpg.Record]:
        return await self._pool.fetch(query, *args, timeout=timeout)

    async def fetchval(self, query: str, *args: Any, timeout: Optional[float] = None) -> Any:
        return await self._pool.fetchval(query, *args, timeout=timeout)

    async def iterate(
        self,
        query: str,
        *args: Any,
        timeout: Optional[float] = None,
        prefetch: int = CURSOR_PREFETCH,
    ) -> AsyncIterator[asyncpg.Record]:
        """
        Stream rows through a server-side cursor.

        Rows are yielded in the order the server returns them. Closing the
        iterator early ends the transaction and returns the connection.
        """
        async with self._pool.acquire(timeout=timeout) as conn:
            async with conn.transaction(readonly=True):
                async for record in conn.cursor(query, *args, prefetch=prefetch, timeout=timeout):
                    yield record

    async def is_empty(self, table: str, timeout: Optional[float] = None) -> bool:
        """Report whether a table currently holds no rows."""
        exists = await self._pool.fetchval(
            f"SELECT EXISTS (SELECT 1 FROM {table})", timeout=timeout
        )
        return not exists

    async def release(self, timeout: Optional[float] = None) -> None:
        """Drop one holder; close the pool when none are left."""
        if self._holders > 0:
            self._holders -= 1
        if self._holders == 0:
            await self.stop(timeout)

    async def stop(self, timeout: Optional[float] = None) -> None:
        """
        Close the pool gracefully.

        Args:
            timeout: Seconds to wait for in-flight queries; None waits forever

        Raises:
            asyncio.TimeoutError: If connections did not close in time. The
                pool is terminated before the error is raised.
        """
        if self._closed:
            return
        self._closed = True
        logger.info("Closing database connection pool")
        try:
            await asyncio.wait_for(self._pool.close(), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning("Database pool did not close in time, terminating", timeout=timeout)
            self._pool.terminate()
            raise
        logger.info("Database connection pool closed")
