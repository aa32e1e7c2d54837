"""Keycloak OIDC provider for JWT validation."""

from dataclasses import dataclass

import structlog
from keycloak import KeycloakOpenID
from keycloak.exceptions import KeycloakError

logger = structlog.get_logger(__name__)


@dataclass
class OIDCUser:
    """Authenticated user from OIDC token."""

    user_id: int
    subject: str
    email: str | None
    username: str | None
    realm_roles: list[str]


class KeycloakProvider:
    """Keycloak OIDC - validates JWT and maps it to a local user id."""

    def __init__(
        self,
        server_url: str,
        realm: str,
        client_id: str,
        client_secret: str = "",
        user_id_claim: str = "user_id",
    ) -> None:
        self._keycloak = KeycloakOpenID(
            server_url=server_url,
            realm_name=realm,
            client_id=client_id,
            client_secret_key=client_secret,
        )
        self._user_id_claim = user_id_claim

    def decode_token(self, token: str) -> OIDCUser | None:
        """Introspect JWT, return user info or None if inactive or unmapped."""
        try:
            token_info = self._keycloak.introspect(token)
        except KeycloakError as e:
            logger.warning("Token introspection failed", error=str(e))
            return None
        if not token_info.get("active"):
            return None
        try:
            user_id = int(token_info[self._user_id_claim])
        except (KeyError, TypeError, ValueError):
            logger.warning(
                "Token has no usable user id claim",
                claim=self._user_id_claim,
                subject=token_info.get("sub"),
            )
            return None
        return OIDCUser(
            user_id=user_id,
            subject=token_info.get("sub", ""),
            email=token_info.get("email"),
            username=token_info.get("preferred_username"),
            realm_roles=token_info.get("realm_access", {}).get("roles", []),
        )
