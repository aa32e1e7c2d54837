"""Client-side permission state."""

from rolegate.client.coalescer import FetchCoalescer
from rolegate.client.errors import (
    PermissionClientError,
    PermissionFetchError,
    PermissionUpdateError,
)
from rolegate.client.permissions_facade import (
    AuthState,
    Identity,
    PermissionsFacade,
    PermissionsState,
)

__all__ = [
    "AuthState",
    "FetchCoalescer",
    "Identity",
    "PermissionClientError",
    "PermissionFetchError",
    "PermissionUpdateError",
    "PermissionsFacade",
    "PermissionsState",
]
