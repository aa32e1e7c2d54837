"""Permission source that calls the resolution service in-process."""

from collections.abc import Mapping
from typing import Any

from rolegate.application.services.permission_resolution import PermissionResolutionService


class LocalPermissionSource:
    """Adapter for running the client facade next to the service (tools, tests)."""

    def __init__(self, permission_service: PermissionResolutionService) -> None:
        self._service = permission_service

    async def get_user_permissions(self, user_id: int) -> Mapping[str, Any]:
        effective = await self._service.get_user_permissions(user_id)
        return {
            "user_id": effective.user_id,
            "role": effective.role.value,
            "permissions": effective.sorted_codes(),
        }

    async def update_user_permissions(self, user_id: int, permissions: list[str]) -> bool:
        return await self._service.update_user_permissions(user_id, permissions)
