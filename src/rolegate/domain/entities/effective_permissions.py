"""Effective permission set - derived, never persisted."""

from dataclasses import dataclass, field

from rolegate.domain.value_objects import Role


@dataclass(frozen=True)
class EffectivePermissionSet:
    """Resolved permissions of a user after applying overrides to the role default."""

    user_id: int
    role: Role
    permissions: frozenset[str] = field(default_factory=frozenset)

    def __contains__(self, code: object) -> bool:
        return code in self.permissions

    def sorted_codes(self) -> list[str]:
        return sorted(self.permissions)
