"""Fixtures for API tests."""

import falcon.asgi
import pytest

from rolegate.domain.value_objects import Role
from rolegate.infrastructure.permission.permission_checker import RoleGatePermissionChecker
from rolegate.interfaces.api.middleware.auth import RequestUser
from rolegate.main import add_routes

ADMIN_ID = 1
USER_ID = 2
MANAGER_ID = 3


class AuthBypassMiddleware:
    """Middleware that sets context.user from the X-Test-User header (default: admin)."""

    async def process_request(self, req, resp):
        raw = req.get_header("X-Test-User")
        if raw == "anonymous":
            req.context.user = None
            return
        req.context.user = RequestUser(user_id=int(raw or ADMIN_ID))


def as_user(user_id: int | str) -> dict[str, str]:
    return {"X-Test-User": str(user_id)}


@pytest.fixture
def app(fake_uow, permission_service):
    """Falcon ASGI app with API resources over in-memory repositories."""
    fake_uow.users.add_user(ADMIN_ID, Role.ADMIN)
    fake_uow.users.add_user(USER_ID, Role.USER)
    fake_uow.users.add_user(MANAGER_ID, Role.MANAGER)

    app = falcon.asgi.App(middleware=[AuthBypassMiddleware()])
    add_routes(app, permission_service, RoleGatePermissionChecker(permission_service))
    return app


@pytest.fixture
def client(app):
    """Falcon ASGI test client."""
    from falcon.testing import TestClient
    return TestClient(app)
