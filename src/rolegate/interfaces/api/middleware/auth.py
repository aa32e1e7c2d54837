"""Auth middleware - extracts the calling user from a Keycloak JWT."""

from dataclasses import dataclass

import falcon.asgi
import structlog

logger = structlog.get_logger(__name__)


@dataclass
class RequestUser:
    """User from request context."""

    user_id: int
    email: str | None = None
    username: str | None = None


class AuthMiddleware:
    """Middleware that validates JWT and sets req.context.user.

    Requests without a valid bearer token get ``req.context.user = None``;
    resources answer 401 for those.
    """

    def __init__(self, keycloak_provider=None) -> None:
        self._keycloak = keycloak_provider

    async def process_request(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response
    ) -> None:
        """Extract user from Authorization header."""
        req.context.user = None
        auth = req.get_header("Authorization")
        if not auth or not auth.startswith("Bearer "):
            return
        if not self._keycloak:
            logger.warning("Bearer token received but no identity provider is configured")
            return
        user = self._keycloak.decode_token(auth[7:])
        if user:
            req.context.user = RequestUser(
                user_id=user.user_id,
                email=user.email,
                username=user.username,
            )
