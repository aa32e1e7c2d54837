"""Permission catalog API resources."""

import falcon
import falcon.asgi

from rolegate.application.services.permission_resolution import PermissionResolutionService
from rolegate.domain.entities import Permission
from rolegate.domain.exceptions import NotFound, ValidationError
from rolegate.domain.value_objects import PermissionCode
from rolegate.interfaces.api.hooks import require_permission


def serialize_permission(p: Permission) -> dict:
    return {
        "code": p.code,
        "name": p.name,
        "description": p.description,
        "category": p.category,
        "action": p.action,
    }


@falcon.before(require_permission(PermissionCode.PERMISSIONS_VIEW))
class PermissionCatalogResource:
    """GET /v1/permissions - permission catalog, optionally filtered by category."""

    def __init__(self, permission_service: PermissionResolutionService, permission_checker) -> None:
        self._service = permission_service
        self.permission_checker = permission_checker

    async def on_get(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        category = req.get_param("category")
        items = self._service.list_permissions(category)
        resp.media = {
            "items": [serialize_permission(p) for p in items],
            "categories": self._service.registry.categories(),
        }
        resp.status = falcon.HTTP_200


@falcon.before(require_permission(PermissionCode.PERMISSIONS_VIEW))
class PermissionResource:
    """GET /v1/permissions/{code} - stored permission definition."""

    def __init__(self, permission_service: PermissionResolutionService, permission_checker) -> None:
        self._service = permission_service
        self.permission_checker = permission_checker

    async def on_get(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, code: str
    ) -> None:
        try:
            permission = await self._service.get_permission(code)
        except NotFound:
            resp.status = falcon.HTTP_404
            resp.media = {"error": f"Permission not found: {code}"}
            return
        resp.media = serialize_permission(permission)
        resp.status = falcon.HTTP_200


@falcon.before(require_permission(PermissionCode.PERMISSIONS_VIEW))
class RolePermissionsResource:
    """GET /v1/roles/{role}/permissions - default permissions of a role."""

    def __init__(self, permission_service: PermissionResolutionService, permission_checker) -> None:
        self._service = permission_service
        self.permission_checker = permission_checker

    async def on_get(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, role: str
    ) -> None:
        try:
            codes = self._service.get_default_permissions_for_role(role)
        except ValidationError as e:
            resp.status = falcon.HTTP_400
            resp.media = {"error": str(e)}
            return
        resp.media = {"role": role.strip().lower(), "permissions": sorted(codes)}
        resp.status = falcon.HTTP_200


@falcon.before(require_permission(PermissionCode.SYSTEM_ADMIN))
class PermissionCacheStatsResource:
    """GET /v1/permissions/cache/stats - decision cache statistics."""

    def __init__(self, permission_service: PermissionResolutionService, permission_checker) -> None:
        self._service = permission_service
        self.permission_checker = permission_checker

    async def on_get(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        resp.media = self._service.cache.stats()
        resp.status = falcon.HTTP_200
