"""Permission cache port - boolean decisions keyed by (user, permission)."""

from typing import Protocol


class PermissionCache(Protocol):
    """Port for the decision cache. Implementations never raise."""

    def get(self, user_id: int, code: str) -> bool | None: ...

    def set(self, user_id: int, code: str, value: bool, ttl: float | None = None) -> None: ...

    def invalidate_user(self, user_id: int) -> None: ...

    def clear_all(self) -> None: ...

    def stats(self) -> dict[str, float | int | None]: ...
