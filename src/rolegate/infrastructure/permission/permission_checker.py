"""Permission checker implementation - cached decisions from the resolution service."""

from rolegate.application.services.permission_resolution import PermissionResolutionService


class RoleGatePermissionChecker:
    """Checks user permissions through the resolution service and its cache."""

    def __init__(self, permission_service: PermissionResolutionService) -> None:
        self._service = permission_service

    async def check(self, user_id: int, code: str) -> bool:
        """Check if user holds permission code."""
        return await self._service.has_permission(user_id, str(code))
