"""Errors raised by the client permission facade."""

from typing import Any

from rolegate.domain.exceptions import RoleGateError


class PermissionClientError(RoleGateError):
    """Client-side permission failure with a machine-readable code."""

    def __init__(self, message: str, code: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.details = details or {}


class PermissionFetchError(PermissionClientError):
    """Loading the permission list failed or returned an unusable payload."""

    pass


class PermissionUpdateError(PermissionClientError):
    """Writing a user's permissions failed."""

    pass
