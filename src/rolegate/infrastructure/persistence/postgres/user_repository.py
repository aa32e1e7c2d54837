"""PostgreSQL user repository - reads role and status only."""

import structlog
from psycopg import AsyncConnection

from rolegate.domain.entities import User
from rolegate.domain.value_objects import Role

logger = structlog.get_logger(__name__)


class PostgresUserRepository:
    """User repository implementation."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def get_by_id(self, user_id: int) -> User | None:
        """Get user by id. Rows with an unrecognized role are treated as missing."""
        cur = await self._conn.execute(
            "SELECT id, role, email, status FROM users WHERE id = %s",
            (user_id,),
        )
        r = await cur.fetchone()
        if not r:
            return None
        try:
            role = Role.parse(r[1])
        except ValueError:
            logger.warning("User has unknown role", user_id=r[0], role=r[1])
            return None
        return User(id=r[0], role=role, email=r[2], status=r[3])
