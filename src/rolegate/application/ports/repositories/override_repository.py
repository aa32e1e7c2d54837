"""User permission override repository port."""

from typing import Protocol

from rolegate.domain.entities import UserPermissionOverride


class OverrideRepository(Protocol):
    """Port for per-user grant/deny rows."""

    async def find_for_user(self, user_id: int) -> list[UserPermissionOverride]: ...

    async def replace_for_user(
        self, user_id: int, overrides: list[UserPermissionOverride]
    ) -> None: ...

    async def upsert(self, override: UserPermissionOverride) -> None: ...

    async def delete(self, user_id: int, permission_code: str) -> bool: ...
