"""Pytest fixtures for RoleGate tests."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import replace

import pytest

from rolegate.application.services.permission_resolution import PermissionResolutionService
from rolegate.domain.entities import Permission, User, UserPermissionOverride
from rolegate.domain.permission_registry import PermissionRegistry
from rolegate.domain.value_objects import Role
from rolegate.infrastructure.cache import InMemoryPermissionCache


# --- Fake repositories ---


class FakeUserRepository:
    """In-memory user repository."""

    def __init__(self) -> None:
        self._by_id: dict[int, User] = {}

    async def get_by_id(self, user_id: int) -> User | None:
        return self._by_id.get(user_id)

    def add_user(self, user_id: int, role: Role, email: str | None = None) -> User:
        """Helper to add user for tests."""
        user = User(id=user_id, role=role, email=email or f"user{user_id}@example.com")
        self._by_id[user_id] = user
        return user

    def set_role(self, user_id: int, role: Role) -> None:
        self._by_id[user_id] = replace(self._by_id[user_id], role=role)


class FakePermissionRepository:
    """In-memory permission definition repository."""

    def __init__(self) -> None:
        self._by_code: dict[str, Permission] = {}

    async def find_by_code(self, code: str) -> Permission | None:
        return self._by_code.get(code)

    async def list_all(self) -> list[Permission]:
        return sorted(self._by_code.values(), key=lambda p: p.code)

    async def count(self) -> int:
        return len(self._by_code)

    async def create_batch(self, permissions: list[Permission]) -> None:
        for p in permissions:
            self._by_code.setdefault(p.code, p)


class FakeOverrideRepository:
    """In-memory override repository keyed by (user_id, permission_code)."""

    def __init__(self) -> None:
        self._rows: dict[tuple[int, str], UserPermissionOverride] = {}
        self.fail_writes = False

    async def find_for_user(self, user_id: int) -> list[UserPermissionOverride]:
        return [o for (uid, _), o in self._rows.items() if uid == user_id]

    async def replace_for_user(
        self, user_id: int, overrides: list[UserPermissionOverride]
    ) -> None:
        if self.fail_writes:
            raise RuntimeError("database unavailable")
        for key in [k for k in self._rows if k[0] == user_id]:
            del self._rows[key]
        for o in overrides:
            self._rows[(user_id, o.permission_code)] = o

    async def upsert(self, override: UserPermissionOverride) -> None:
        if self.fail_writes:
            raise RuntimeError("database unavailable")
        self._rows[(override.user_id, override.permission_code)] = override

    async def delete(self, user_id: int, permission_code: str) -> bool:
        if self.fail_writes:
            raise RuntimeError("database unavailable")
        return self._rows.pop((user_id, permission_code), None) is not None


# --- Fake UnitOfWork ---


class FakeUnitOfWork:
    """In-memory Unit of Work with fake repositories."""

    def __init__(self) -> None:
        self.users = FakeUserRepository()
        self.permissions = FakePermissionRepository()
        self.overrides = FakeOverrideRepository()
        self.reads = 0

    async def commit(self) -> None:
        pass

    async def rollback(self) -> None:
        pass


# --- Fixtures ---


@pytest.fixture
def fake_uow() -> FakeUnitOfWork:
    """In-memory UnitOfWork shared by every factory call in a test."""
    return FakeUnitOfWork()


@pytest.fixture
def uow_factory(fake_uow: FakeUnitOfWork):
    """Factory returning async context manager yielding the shared FakeUnitOfWork."""

    @asynccontextmanager
    async def _factory() -> AsyncIterator[FakeUnitOfWork]:
        fake_uow.reads += 1
        yield fake_uow

    return _factory


@pytest.fixture
def registry() -> PermissionRegistry:
    return PermissionRegistry()


@pytest.fixture
def permission_cache() -> InMemoryPermissionCache:
    return InMemoryPermissionCache(max_size=1000, default_ttl=300.0)


@pytest.fixture
def permission_service(uow_factory, registry, permission_cache) -> PermissionResolutionService:
    return PermissionResolutionService(
        unit_of_work_factory=uow_factory,
        registry=registry,
        cache=permission_cache,
    )


@pytest.fixture
def mock_permission_checker():
    """AsyncMock for PermissionChecker - returns True by default."""
    from unittest.mock import AsyncMock

    mock = AsyncMock()
    mock.check.return_value = True
    return mock
