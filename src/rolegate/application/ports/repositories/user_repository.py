"""User repository port - read-only view of the identity store."""

from typing import Protocol

from rolegate.domain.entities import User


class UserRepository(Protocol):
    """Port for looking up users and their role."""

    async def get_by_id(self, user_id: int) -> User | None: ...
