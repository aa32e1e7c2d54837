"""Unit tests for PostgreSQL repositories over a fake connection."""

from contextlib import asynccontextmanager

import pytest

from rolegate.application.services.permission_resolution import PermissionResolutionService
from rolegate.domain.value_objects import Role
from rolegate.infrastructure.persistence.postgres.user_repository import PostgresUserRepository
from tests.conftest import FakeUnitOfWork


class FakeCursor:
    def __init__(self, rows: list[tuple]) -> None:
        self._rows = rows

    async def fetchone(self) -> tuple | None:
        return self._rows[0] if self._rows else None


class FakeConnection:
    """Returns canned rows for every query."""

    def __init__(self, rows: list[tuple]) -> None:
        self.rows = rows
        self.queries: list[tuple[str, tuple]] = []

    async def execute(self, query: str, params: tuple = ()) -> FakeCursor:
        self.queries.append((query, params))
        return FakeCursor(self.rows)


@pytest.mark.asyncio
async def test_get_by_id_maps_row() -> None:
    conn = FakeConnection([(1, "Manager", "m@example.com", "active")])
    user = await PostgresUserRepository(conn).get_by_id(1)

    assert user.id == 1
    assert user.role == Role.MANAGER
    assert user.email == "m@example.com"
    assert conn.queries[0][1] == (1,)


@pytest.mark.asyncio
async def test_get_by_id_missing_row() -> None:
    assert await PostgresUserRepository(FakeConnection([])).get_by_id(1) is None


@pytest.mark.asyncio
async def test_get_by_id_unknown_role_is_treated_as_missing() -> None:
    conn = FakeConnection([(1, "customer", "c@example.com", "active")])
    assert await PostgresUserRepository(conn).get_by_id(1) is None


@pytest.mark.asyncio
async def test_unknown_stored_role_denies_permission(registry, permission_cache) -> None:
    uow = FakeUnitOfWork()
    uow.users = PostgresUserRepository(
        FakeConnection([(1, "customer", "c@example.com", "active")])
    )

    @asynccontextmanager
    async def factory():
        yield uow

    service = PermissionResolutionService(
        unit_of_work_factory=factory,
        registry=registry,
        cache=permission_cache,
    )

    assert await service.has_permission(1, "dashboard.view") is False
    assert permission_cache.keys() == []
