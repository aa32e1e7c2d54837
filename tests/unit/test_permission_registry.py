"""Unit tests for the permission registry."""

from rolegate.domain.permission_registry import SYSTEM_PERMISSIONS, PermissionRegistry
from rolegate.domain.value_objects import PermissionCode, Role


def test_lookup_returns_definition() -> None:
    registry = PermissionRegistry()
    permission = registry.lookup("customers.edit")
    assert permission is not None
    assert permission.name == "Edit Customers"
    assert permission.category == "Customers"
    assert permission.action == "edit"


def test_lookup_unknown_code_returns_none() -> None:
    assert PermissionRegistry().lookup("customers.fly") is None


def test_exists() -> None:
    registry = PermissionRegistry()
    assert registry.exists(PermissionCode.PERMISSIONS_MANAGE)
    assert not registry.exists("")
    assert not registry.exists("CUSTOMERS_EDIT")


def test_catalog_matches_code_enum() -> None:
    """Every enum member has exactly one definition."""
    codes = [p.code for p in SYSTEM_PERMISSIONS]
    assert len(codes) == len(set(codes))
    assert set(codes) == {c.value for c in PermissionCode}


def test_admin_holds_every_code() -> None:
    registry = PermissionRegistry()
    assert registry.permissions_for_role(Role.ADMIN) == registry.all_codes()


def test_user_role_defaults() -> None:
    registry = PermissionRegistry()
    assert registry.permissions_for_role(Role.USER) == {
        "dashboard.view",
        "profile.view",
        "profile.edit",
        "appointments.view",
    }


def test_role_defaults_are_subsets_of_catalog() -> None:
    registry = PermissionRegistry()
    for role in Role:
        assert registry.permissions_for_role(role) <= registry.all_codes()


def test_role_defaults_ignore_unknown_codes() -> None:
    registry = PermissionRegistry(
        role_defaults={Role.USER: frozenset({"profile.view", "made.up"})}
    )
    assert registry.permissions_for_role(Role.USER) == {"profile.view"}
    assert registry.permissions_for_role(Role.MANAGER) == frozenset()


def test_unknown_codes_preserves_order_without_duplicates() -> None:
    registry = PermissionRegistry()
    unknown = registry.unknown_codes(["b.x", "customers.view", "a.y", "b.x"])
    assert unknown == ["b.x", "a.y"]


def test_list_definitions_by_category_is_case_insensitive() -> None:
    registry = PermissionRegistry()
    items = registry.list_definitions("customers")
    assert {p.code for p in items} == {
        "customers.view",
        "customers.create",
        "customers.edit",
        "customers.delete",
        "customers.hard_delete",
    }
    assert registry.list_definitions("Nope") == []


def test_categories_sorted() -> None:
    categories = PermissionRegistry().categories()
    assert categories == sorted(categories)
    assert "Permissions" in categories


def test_role_parse_is_case_insensitive() -> None:
    assert Role.parse(" Manager ") == Role.MANAGER
