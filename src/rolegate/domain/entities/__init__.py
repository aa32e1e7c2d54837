"""Domain entities."""

from rolegate.domain.entities.effective_permissions import EffectivePermissionSet
from rolegate.domain.entities.permission import Permission
from rolegate.domain.entities.permission_override import UserPermissionOverride
from rolegate.domain.entities.user import User

__all__ = [
    "EffectivePermissionSet",
    "Permission",
    "User",
    "UserPermissionOverride",
]
