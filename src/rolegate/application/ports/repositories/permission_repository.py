"""Permission definition repository port."""

from typing import Protocol

from rolegate.domain.entities import Permission


class PermissionRepository(Protocol):
    """Port for persisted permission definitions."""

    async def find_by_code(self, code: str) -> Permission | None: ...

    async def list_all(self) -> list[Permission]: ...

    async def count(self) -> int: ...

    async def create_batch(self, permissions: list[Permission]) -> None: ...
