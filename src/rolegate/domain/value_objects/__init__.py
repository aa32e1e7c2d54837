"""Domain value objects."""

from rolegate.domain.value_objects.permission_code import (
    PermissionCategory,
    PermissionCode,
    PermissionVerb,
)
from rolegate.domain.value_objects.role import Role

__all__ = [
    "PermissionCategory",
    "PermissionCode",
    "PermissionVerb",
    "Role",
]
