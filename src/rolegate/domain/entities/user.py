"""User entity - the identity whose permissions are resolved."""

from dataclasses import dataclass

from rolegate.domain.value_objects import Role


@dataclass
class User:
    """User record as seen by the permission core."""

    id: int
    role: Role
    email: str | None = None
    status: str = "active"

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN
