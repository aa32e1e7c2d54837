"""Unit tests for permission management use cases."""

import pytest

from rolegate.application.use_cases.permission.grant_permission import GrantPermissionUseCase
from rolegate.application.use_cases.permission.revoke_permission import RevokePermissionUseCase
from rolegate.application.use_cases.permission.update_user_permissions import (
    UpdateUserPermissionsUseCase,
)
from rolegate.domain.exceptions import PermissionDenied
from rolegate.domain.value_objects import PermissionCode, Role
from rolegate.infrastructure.permission.permission_checker import RoleGatePermissionChecker


@pytest.mark.asyncio
async def test_update_permissions_checks_actor(
    fake_uow, permission_service, mock_permission_checker
) -> None:
    fake_uow.users.add_user(2, Role.USER)
    use_case = UpdateUserPermissionsUseCase(permission_service, mock_permission_checker)

    ok = await use_case.execute(actor_id=1, user_id=2, permissions=["profile.view"])

    assert ok is True
    mock_permission_checker.check.assert_awaited_once_with(1, PermissionCode.PERMISSIONS_MANAGE)
    rows = await fake_uow.overrides.find_for_user(2)
    assert {r.granted_by for r in rows} == {1}


@pytest.mark.asyncio
async def test_update_permissions_denied(
    fake_uow, permission_service, mock_permission_checker
) -> None:
    fake_uow.users.add_user(2, Role.USER)
    mock_permission_checker.check.return_value = False
    use_case = UpdateUserPermissionsUseCase(permission_service, mock_permission_checker)

    with pytest.raises(PermissionDenied):
        await use_case.execute(actor_id=1, user_id=2, permissions=["profile.view"])

    assert await fake_uow.overrides.find_for_user(2) == []


@pytest.mark.asyncio
async def test_grant_permission(fake_uow, permission_service, mock_permission_checker) -> None:
    fake_uow.users.add_user(2, Role.USER)
    use_case = GrantPermissionUseCase(permission_service, mock_permission_checker)

    assert await use_case.execute(1, 2, "customers.view") is True
    assert await permission_service.has_permission(2, "customers.view") is True


@pytest.mark.asyncio
async def test_grant_permission_denied(
    fake_uow, permission_service, mock_permission_checker
) -> None:
    fake_uow.users.add_user(2, Role.USER)
    mock_permission_checker.check.return_value = False
    use_case = GrantPermissionUseCase(permission_service, mock_permission_checker)

    with pytest.raises(PermissionDenied):
        await use_case.execute(1, 2, "customers.view")


@pytest.mark.asyncio
async def test_revoke_permission(fake_uow, permission_service, mock_permission_checker) -> None:
    fake_uow.users.add_user(2, Role.USER)
    use_case = RevokePermissionUseCase(permission_service, mock_permission_checker)

    assert await use_case.execute(1, 2, "profile.edit") is True
    assert await permission_service.has_permission(2, "profile.edit") is False


@pytest.mark.asyncio
async def test_revoke_permission_denied(
    fake_uow, permission_service, mock_permission_checker
) -> None:
    fake_uow.users.add_user(2, Role.USER)
    mock_permission_checker.check.return_value = False
    use_case = RevokePermissionUseCase(permission_service, mock_permission_checker)

    with pytest.raises(PermissionDenied):
        await use_case.execute(1, 2, "profile.edit")


@pytest.mark.asyncio
async def test_real_checker_requires_permissions_manage(fake_uow, permission_service) -> None:
    """A manager cannot manage permissions until granted permissions.manage."""
    fake_uow.users.add_user(1, Role.MANAGER)
    fake_uow.users.add_user(2, Role.USER)
    checker = RoleGatePermissionChecker(permission_service)
    use_case = GrantPermissionUseCase(permission_service, checker)

    with pytest.raises(PermissionDenied):
        await use_case.execute(1, 2, "customers.view")

    fake_uow.users.add_user(3, Role.ADMIN)
    await GrantPermissionUseCase(permission_service, checker).execute(3, 1, "permissions.manage")

    assert await use_case.execute(1, 2, "customers.view") is True
