"""PostgreSQL permission definition repository."""

from datetime import UTC, datetime

from psycopg import AsyncConnection

from rolegate.domain.entities import Permission

_COLUMNS = "code, name, description, category, action"


def _row_to_permission(r: tuple) -> Permission:
    return Permission(code=r[0], name=r[1], description=r[2] or "", category=r[3], action=r[4])


class PostgresPermissionRepository:
    """Permission repository implementation."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def find_by_code(self, code: str) -> Permission | None:
        """Get permission by code."""
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM permission WHERE code = %s",
            (code,),
        )
        r = await cur.fetchone()
        return _row_to_permission(r) if r else None

    async def list_all(self) -> list[Permission]:
        """List all permissions ordered by category and code."""
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM permission ORDER BY category, code"
        )
        rows = await cur.fetchall()
        return [_row_to_permission(r) for r in rows]

    async def count(self) -> int:
        """Count stored permissions."""
        cur = await self._conn.execute("SELECT count(*) FROM permission")
        r = await cur.fetchone()
        return int(r[0]) if r else 0

    async def create_batch(self, permissions: list[Permission]) -> None:
        """Insert permissions, skipping codes that already exist."""
        now = datetime.now(UTC)
        async with self._conn.cursor() as cur:
            await cur.executemany(
                "INSERT INTO permission (code, name, description, category, action, created_at) "
                "VALUES (%s, %s, %s, %s, %s, %s) ON CONFLICT (code) DO NOTHING",
                [(p.code, p.name, p.description, p.category, p.action, now) for p in permissions],
            )
