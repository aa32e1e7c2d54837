"""Revoke permission use case."""

from rolegate.application.ports import PermissionChecker
from rolegate.application.services.permission_resolution import PermissionResolutionService
from rolegate.domain.exceptions import PermissionDenied
from rolegate.domain.value_objects import PermissionCode


class RevokePermissionUseCase:
    """Revoke a single permission from a user."""

    def __init__(
        self,
        permission_service: PermissionResolutionService,
        permission_checker: PermissionChecker,
    ) -> None:
        self._service = permission_service
        self._permission_checker = permission_checker

    async def execute(self, actor_id: int, user_id: int, code: str) -> bool:
        """Revoke code from user. Actor must hold permissions.manage."""
        can_manage = await self._permission_checker.check(
            actor_id, PermissionCode.PERMISSIONS_MANAGE
        )
        if not can_manage:
            raise PermissionDenied("User does not have permission to manage permissions")

        return await self._service.remove_user_permission(user_id, code, actor_id=actor_id)
