"""User roles."""

from enum import StrEnum


class Role(StrEnum):
    """Closed set of user roles."""

    ADMIN = "admin"
    MANAGER = "manager"
    EMPLOYEE = "employee"
    USER = "user"

    @classmethod
    def parse(cls, value: str) -> "Role":
        """Parse role name case-insensitively. Raises ValueError on unknown role."""
        return cls(value.strip().lower())
