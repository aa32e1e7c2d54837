"""Pool lifespan middleware - opens pool on startup, closes on shutdown."""

from collections.abc import Awaitable, Callable
from typing import Any

import structlog
from psycopg_pool import AsyncConnectionPool

logger = structlog.get_logger(__name__)


class PoolLifespanMiddleware:
    """Opens the connection pool on startup and closes it on shutdown.

    An optional ``on_startup`` coroutine (e.g. permission catalog seeding) runs
    once the pool is open.
    """

    def __init__(
        self,
        pool: AsyncConnectionPool,
        on_startup: Callable[[], Awaitable[Any]] | None = None,
    ) -> None:
        self._pool = pool
        self._on_startup = on_startup

    async def process_startup(
        self, scope: dict[str, Any], event: dict[str, Any]
    ) -> None:
        await self._pool.open()
        logger.info("Database pool opened")
        if self._on_startup is not None:
            await self._on_startup()

    async def process_shutdown(
        self, scope: dict[str, Any], event: dict[str, Any]
    ) -> None:
        await self._pool.close()
        logger.info("Database pool closed")
