"""Permission source port - where the client facade gets permission snapshots."""

from collections.abc import Mapping
from typing import Any, Protocol


class PermissionSource(Protocol):
    """Port for fetching and updating a user's full permission list."""

    async def get_user_permissions(self, user_id: int) -> Mapping[str, Any]: ...

    async def update_user_permissions(self, user_id: int, permissions: list[str]) -> bool: ...
