"""User permission API resources."""

import falcon
import falcon.asgi
import structlog

from rolegate.application.services.permission_resolution import PermissionResolutionService
from rolegate.application.use_cases.permission.grant_permission import GrantPermissionUseCase
from rolegate.application.use_cases.permission.revoke_permission import RevokePermissionUseCase
from rolegate.application.use_cases.permission.update_user_permissions import (
    UpdateUserPermissionsUseCase,
)
from rolegate.domain.exceptions import NotFound, PermissionDenied, ValidationError
from rolegate.domain.value_objects import PermissionCode

logger = structlog.get_logger(__name__)


def _parse_user_id(resp: falcon.asgi.Response, user_id: str) -> int | None:
    try:
        return int(user_id)
    except ValueError:
        resp.status = falcon.HTTP_400
        resp.media = {"error": "Invalid user ID"}
        return None


def _write_error(resp: falcon.asgi.Response, e: Exception) -> None:
    """Map domain errors raised by permission writes onto the response."""
    if isinstance(e, ValidationError):
        resp.status = falcon.HTTP_400
        resp.media = {"error": str(e), "invalid_codes": e.invalid_codes}
    elif isinstance(e, PermissionDenied):
        resp.status = falcon.HTTP_403
        resp.media = {"error": "Permission denied"}
    elif isinstance(e, NotFound):
        resp.status = falcon.HTTP_404
        resp.media = {"error": "User not found"}
    else:
        raise e


async def _can_read(permission_checker, caller_id: int, user_id: int) -> bool:
    """Users may read their own permissions; others need permissions.view."""
    if caller_id == user_id:
        return True
    return await permission_checker.check(caller_id, PermissionCode.PERMISSIONS_VIEW)


class UserPermissionsResource:
    """GET/PUT /v1/users/{user_id}/permissions - effective permissions."""

    def __init__(
        self,
        permission_service: PermissionResolutionService,
        permission_checker,
        update_permissions: UpdateUserPermissionsUseCase,
    ) -> None:
        self._service = permission_service
        self._permission_checker = permission_checker
        self._update = update_permissions

    async def on_get(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, user_id: str
    ) -> None:
        """Effective permission set of user."""
        user = getattr(req.context, "user", None)
        if not user:
            resp.status = falcon.HTTP_401
            resp.media = {"error": "Unauthorized"}
            return

        uid = _parse_user_id(resp, user_id)
        if uid is None:
            return

        if not await _can_read(self._permission_checker, user.user_id, uid):
            resp.status = falcon.HTTP_403
            resp.media = {"error": "Permission denied"}
            return

        try:
            effective = await self._service.get_user_permissions(uid)
        except NotFound:
            resp.status = falcon.HTTP_404
            resp.media = {"error": "User not found"}
            return

        resp.media = {
            "user_id": effective.user_id,
            "role": effective.role.value,
            "permissions": effective.sorted_codes(),
        }
        resp.status = falcon.HTTP_200

    async def on_put(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, user_id: str
    ) -> None:
        """Replace user's permissions with the given list."""
        user = getattr(req.context, "user", None)
        if not user:
            resp.status = falcon.HTTP_401
            resp.media = {"error": "Unauthorized"}
            return

        uid = _parse_user_id(resp, user_id)
        if uid is None:
            return

        body = await req.get_media()
        permissions = body.get("permissions") if isinstance(body, dict) else None
        if not isinstance(permissions, list):
            resp.status = falcon.HTTP_400
            resp.media = {"error": "Permissions must be an array"}
            return

        try:
            await self._update.execute(user.user_id, uid, permissions)
        except (ValidationError, PermissionDenied, NotFound) as e:
            _write_error(resp, e)
            return

        effective = await self._service.get_user_permissions(uid)
        resp.media = {
            "user_id": effective.user_id,
            "role": effective.role.value,
            "permissions": effective.sorted_codes(),
        }
        resp.status = falcon.HTTP_200


class UserOverridesResource:
    """GET /v1/users/{user_id}/permissions/overrides - stored override rows."""

    def __init__(self, permission_service: PermissionResolutionService, permission_checker) -> None:
        self._service = permission_service
        self._permission_checker = permission_checker

    async def on_get(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, user_id: str
    ) -> None:
        user = getattr(req.context, "user", None)
        if not user:
            resp.status = falcon.HTTP_401
            resp.media = {"error": "Unauthorized"}
            return

        uid = _parse_user_id(resp, user_id)
        if uid is None:
            return

        if not await _can_read(self._permission_checker, user.user_id, uid):
            resp.status = falcon.HTTP_403
            resp.media = {"error": "Permission denied"}
            return

        try:
            overrides = await self._service.get_user_overrides(uid)
        except NotFound:
            resp.status = falcon.HTTP_404
            resp.media = {"error": "User not found"}
            return

        resp.media = {
            "items": [
                {
                    "permission_code": o.permission_code,
                    "granted": o.granted,
                    "granted_at": o.granted_at.isoformat(),
                    "granted_by": o.granted_by,
                }
                for o in overrides
            ]
        }
        resp.status = falcon.HTTP_200


class UserPermissionResource:
    """POST/DELETE /v1/users/{user_id}/permissions/{code} - grant or revoke one."""

    def __init__(
        self,
        grant_permission: GrantPermissionUseCase,
        revoke_permission: RevokePermissionUseCase,
    ) -> None:
        self._grant = grant_permission
        self._revoke = revoke_permission

    async def on_post(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, user_id: str, code: str
    ) -> None:
        user = getattr(req.context, "user", None)
        if not user:
            resp.status = falcon.HTTP_401
            resp.media = {"error": "Unauthorized"}
            return

        uid = _parse_user_id(resp, user_id)
        if uid is None:
            return

        try:
            changed = await self._grant.execute(user.user_id, uid, code)
        except (ValidationError, PermissionDenied, NotFound) as e:
            _write_error(resp, e)
            return

        resp.media = {"user_id": uid, "permission": code, "granted": True, "changed": changed}
        resp.status = falcon.HTTP_200

    async def on_delete(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, user_id: str, code: str
    ) -> None:
        user = getattr(req.context, "user", None)
        if not user:
            resp.status = falcon.HTTP_401
            resp.media = {"error": "Unauthorized"}
            return

        uid = _parse_user_id(resp, user_id)
        if uid is None:
            return

        try:
            changed = await self._revoke.execute(user.user_id, uid, code)
        except (ValidationError, PermissionDenied, NotFound) as e:
            _write_error(resp, e)
            return

        resp.media = {"user_id": uid, "permission": code, "granted": False, "changed": changed}
        resp.status = falcon.HTTP_200


class PermissionCheckResource:
    """GET /v1/users/{user_id}/permissions/check?permission= - one decision."""

    def __init__(self, permission_service: PermissionResolutionService, permission_checker) -> None:
        self._service = permission_service
        self._permission_checker = permission_checker

    async def on_get(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, user_id: str
    ) -> None:
        user = getattr(req.context, "user", None)
        if not user:
            resp.status = falcon.HTTP_401
            resp.media = {"error": "Unauthorized"}
            return

        uid = _parse_user_id(resp, user_id)
        if uid is None:
            return

        code = (req.get_param("permission") or "").strip()
        if not code:
            resp.status = falcon.HTTP_400
            resp.media = {"error": "Missing required parameter: permission"}
            return

        if not await _can_read(self._permission_checker, user.user_id, uid):
            resp.status = falcon.HTTP_403
            resp.media = {"error": "Permission denied"}
            return

        allowed = await self._service.has_permission(uid, code)
        resp.media = {"user_id": uid, "permission": code, "allowed": allowed}
        resp.status = falcon.HTTP_200
