"""asyncpg pool behind PostgresRemoteStore.

The pool is opened lazily on the first acquire(). Each new connection runs
the ``init`` hook first; PostgresRemoteStore uses it to register the JSON
codecs for jsonb columns.
"""

import asyncio
import os
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

import asyncpg

from pooladmin.db.errors import ConnectionError
from pooladmin.observability.logging import get_logger

logger = get_logger(__name__)

DSN_ENV_VARS = ("POOLADMIN_DATABASE_URL", "DATABASE_URL")

ConnectionInit = Callable[[asyncpg.Connection], Awaitable[None]]


def dsn_from_env() -> str | None:
    """First database URL set in the environment, if any."""
    for name in DSN_ENV_VARS:
        value = os.environ.get(name)
        if value:
            return value
    return None


class PostgresPool:
    """Lazily opened asyncpg pool.

    Args:
        dsn: Database URL; POOLADMIN_DATABASE_URL or DATABASE_URL when omitted
        min_size: Connections kept open
        max_size: Upper bound on open connections
        command_timeout: Default query timeout in seconds
        init: Coroutine run on every new connection
    """

    def __init__(
        self,
        dsn: str | None = None,
        *,
        min_size: int = 1,
        max_size: int = 10,
        command_timeout: float = 60.0,
        init: ConnectionInit | None = None,
    ) -> None:
        dsn = dsn or dsn_from_env()
        if not dsn:
            raise ConnectionError(
                "No database URL: set storage.url or POOLADMIN_DATABASE_URL"
            )
        self._dsn = dsn
        self._min_size = min_size
        self._max_size = max_size
        self._command_timeout = command_timeout
        self._init = init
        self._pool: asyncpg.Pool | None = None
        self._lock = asyncio.Lock()

    @property
    def dsn(self) -> str:
        return self._dsn

    async def connect(self) -> None:
        """Open the pool; a no-op once it is open."""
        async with self._lock:
            if self._pool is not None:
                return
            try:
                self._pool = await asyncpg.create_pool(
                    dsn=self._dsn,
                    min_size=self._min_size,
                    max_size=self._max_size,
                    command_timeout=self._command_timeout,
                    init=self._init,
                )
            except Exception as e:
                logger.error("postgres_pool_connection_failed", error=str(e))
                raise ConnectionError(f"Failed to connect to PostgreSQL: {e}", cause=e) from e
        logger.info("postgres_pool_connected", max_size=self._max_size)

    async def close(self) -> None:
        if self._pool is not None:
            await self._pool.close()
            self._pool = None
            logger.info("postgres_pool_closed")

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[asyncpg.Connection]:
        if self._pool is None:
            await self.connect()
        async with self._pool.acquire() as connection:
            yield connection
