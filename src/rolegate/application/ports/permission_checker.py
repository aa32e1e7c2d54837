"""Permission checker port - boolean authorization decisions."""

from typing import Protocol


class PermissionChecker(Protocol):
    """Port for checking whether a user holds a permission."""

    async def check(self, user_id: int, code: str) -> bool: ...
