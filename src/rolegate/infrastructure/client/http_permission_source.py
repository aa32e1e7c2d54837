"""Permission source backed by the RoleGate HTTP API."""

from collections.abc import Mapping
from typing import Any

import httpx

from rolegate.client.errors import PermissionFetchError, PermissionUpdateError


class HttpPermissionSource:
    """Fetches and writes user permissions over HTTP.

    The caller owns the AsyncClient (base URL, auth headers, timeouts).
    """

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def get_user_permissions(self, user_id: int) -> Mapping[str, Any]:
        r = await self._client.get(f"/v1/users/{user_id}/permissions")
        if r.status_code == 401:
            raise PermissionFetchError(
                "Authentication required for permissions",
                code="AUTH_REQUIRED",
                details={"user_id": user_id},
            )
        r.raise_for_status()
        return r.json()

    async def update_user_permissions(self, user_id: int, permissions: list[str]) -> bool:
        r = await self._client.put(
            f"/v1/users/{user_id}/permissions",
            json={"permissions": list(permissions)},
        )
        if r.is_success:
            return True
        try:
            body = r.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        raise PermissionUpdateError(
            body.get("error") or f"Failed to update user permissions (HTTP {r.status_code})",
            code="UPDATE_FAILED",
            details={
                "user_id": user_id,
                "status_code": r.status_code,
                "invalid_codes": body.get("invalid_codes", []),
            },
        )
