"""Repository ports."""

from rolegate.application.ports.repositories.override_repository import (
    OverrideRepository,
)
from rolegate.application.ports.repositories.permission_repository import (
    PermissionRepository,
)
from rolegate.application.ports.repositories.user_repository import UserRepository

__all__ = [
    "OverrideRepository",
    "PermissionRepository",
    "UserRepository",
]
