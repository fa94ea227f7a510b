"""PostgreSQL connection pool management."""

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

import asyncpg
from loguru import logger

from salon_booking.constants import Database as DatabaseDefaults
from salon_booking.core.exceptions import DatabaseNotConnectedError, DatabasePoolTimeoutError
from salon_booking.utils.masking import mask_database_url


class Database:
    """Manages the asyncpg pool lifecycle and hands out connections."""

    def __init__(
        self,
        database_url: Optional[str] = None,
        pool_size: Optional[int] = None,
        require_migrations: bool = False,
    ):
        """
        Initialize database connection manager.

        Args:
            database_url: PostgreSQL connection URL (defaults to settings.database_url)
            pool_size: Maximum number of concurrent connections
            require_migrations: Refuse to start when the Alembic version table is missing
        """
        if database_url is None or pool_size is None:
            from salon_booking.core.config import get_settings

            settings = get_settings()
            database_url = database_url or settings.database_url
            pool_size = pool_size or settings.db_pool_size

        self.database_url = database_url
        self.pool_size = pool_size
        self.require_migrations = require_migrations
        self.pool: Optional[asyncpg.Pool] = None
        self._pool_lock = asyncio.Lock()

    async def connect(self) -> None:
        """Establish database connection pool."""
        async with self._pool_lock:
            if self.pool is not None:
                return
            min_pool = max(1, (self.pool_size + 1) // 2)
            self.pool = await asyncpg.create_pool(
                self.database_url,
                min_size=min_pool,
                max_size=self.pool_size,
                timeout=DatabaseDefaults.CONNECTION_TIMEOUT,
                command_timeout=DatabaseDefaults.QUERY_TIMEOUT,
            )
            logger.info(
                f"Database connected with pool size {min_pool}-{self.pool_size}: "
                f"{mask_database_url(self.database_url)}"
            )
            try:
                await self._check_migrations()
            except Exception:
                await self.pool.close()
                self.pool = None
                raise

    async def _check_migrations(self) -> None:
        assert self.pool is not None
        async with self.pool.acquire() as conn:
            has_alembic = await conn.fetchval(
                "SELECT EXISTS(SELECT 1 FROM information_schema.tables "
                "WHERE table_name = 'alembic_version')"
            )
            if not has_alembic:
                message = (
                    "Alembic version table not found. "
                    "Run 'alembic upgrade head' to initialize the database schema."
                )
                if self.require_migrations:
                    raise RuntimeError(message)
                logger.warning(message)
                return
            revision = await conn.fetchval("SELECT version_num FROM alembic_version LIMIT 1")
            logger.info(f"Database schema at Alembic revision: {revision}")

    async def close(self) -> None:
        """Close database connection pool."""
        async with self._pool_lock:
            if self.pool:
                await self.pool.close()
                self.pool = None
            logger.info("Database connection pool closed")

    @asynccontextmanager
    async def get_connection(
        self, timeout: float = DatabaseDefaults.CONNECTION_TIMEOUT
    ) -> AsyncIterator[asyncpg.Connection]:
        """
        Get a connection from the pool with timeout.

        Args:
            timeout: Maximum time to wait for a connection

        Yields:
            Database connection from pool

        Raises:
            DatabaseNotConnectedError: If connect() has not been called
            DatabasePoolTimeoutError: If connection cannot be acquired within timeout
        """
        if self.pool is None:
            raise DatabaseNotConnectedError()

        try:
            conn = await self.pool.acquire(timeout=timeout)
        except asyncio.TimeoutError:
            logger.error(
                f"Database connection pool exhausted "
                f"(timeout: {timeout}s, pool_size: {self.pool_size})"
            )
            raise DatabasePoolTimeoutError(timeout=timeout, pool_size=self.pool_size)

        try:
            yield conn
        finally:
            await self.pool.release(conn)

    async def __aenter__(self) -> "Database":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def health_check(self) -> bool:
        """
        Perform a health check on the database connection.

        Returns:
            True if database is healthy
        """
        try:
            async with self.get_connection(timeout=5.0) as conn:
                result = await conn.fetchval("SELECT 1")
                return result is not None
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            return False

    def get_pool_stats(self) -> Dict[str, Any]:
        """Current pool size, idle and used connection counts."""
        if self.pool is None:
            return {"pool_size": self.pool_size, "pool_free": 0, "pool_used": 0}
        total = self.pool.get_size()
        idle = self.pool.get_idle_size()
        return {"pool_size": self.pool_size, "pool_free": idle, "pool_used": total - idle}
