"""PostgreSQL user permission override repository."""

from psycopg import AsyncConnection

from rolegate.domain.entities import UserPermissionOverride


class PostgresOverrideRepository:
    """Override repository implementation."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def find_for_user(self, user_id: int) -> list[UserPermissionOverride]:
        """List overrides for user."""
        cur = await self._conn.execute(
            "SELECT user_id, permission_code, granted, granted_at, granted_by "
            "FROM user_permission WHERE user_id = %s ORDER BY permission_code",
            (user_id,),
        )
        rows = await cur.fetchall()
        return [
            UserPermissionOverride(
                user_id=r[0],
                permission_code=r[1],
                granted=r[2],
                granted_at=r[3],
                granted_by=r[4],
            )
            for r in rows
        ]

    async def replace_for_user(
        self, user_id: int, overrides: list[UserPermissionOverride]
    ) -> None:
        """Delete all overrides for user and insert the given ones."""
        await self._conn.execute(
            "DELETE FROM user_permission WHERE user_id = %s",
            (user_id,),
        )
        if not overrides:
            return
        async with self._conn.cursor() as cur:
            await cur.executemany(
                "INSERT INTO user_permission "
                "(user_id, permission_code, granted, granted_at, granted_by) "
                "VALUES (%s, %s, %s, %s, %s)",
                [
                    (o.user_id, o.permission_code, o.granted, o.granted_at, o.granted_by)
                    for o in overrides
                ],
            )

    async def upsert(self, override: UserPermissionOverride) -> None:
        """Insert override or update the existing row for the same permission."""
        await self._conn.execute(
            "INSERT INTO user_permission "
            "(user_id, permission_code, granted, granted_at, granted_by) "
            "VALUES (%s, %s, %s, %s, %s) "
            "ON CONFLICT (user_id, permission_code) DO UPDATE SET "
            "granted = EXCLUDED.granted, granted_at = EXCLUDED.granted_at, "
            "granted_by = EXCLUDED.granted_by",
            (
                override.user_id,
                override.permission_code,
                override.granted,
                override.granted_at,
                override.granted_by,
            ),
        )

    async def delete(self, user_id: int, permission_code: str) -> bool:
        """Delete one override. Returns whether a row was removed."""
        cur = await self._conn.execute(
            "DELETE FROM user_permission WHERE user_id = %s AND permission_code = %s",
            (user_id, permission_code),
        )
        return cur.rowcount > 0
