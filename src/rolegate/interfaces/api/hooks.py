"""Falcon hooks for route authorization."""

import falcon
import falcon.asgi
import structlog

logger = structlog.get_logger(__name__)


def require_permission(code: str):
    """Build a ``falcon.before`` hook that admits callers holding code.

    The resource must expose a ``permission_checker``. Requests without an
    identity get 401, callers lacking the permission get 403.
    """

    async def hook(
        req: falcon.asgi.Request, resp: falcon.asgi.Response, resource, params
    ) -> None:
        user = getattr(req.context, "user", None)
        if not user:
            raise falcon.HTTPUnauthorized(title="Unauthorized")
        if not await resource.permission_checker.check(user.user_id, code):
            logger.info("Route access denied", user_id=user.user_id, permission=str(code))
            raise falcon.HTTPForbidden(title="Permission denied")

    return hook
