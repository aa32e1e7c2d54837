"""API resource tests."""

import asyncio

from tests.api.conftest import ADMIN_ID, MANAGER_ID, USER_ID, as_user


# --- catalog ---


def test_list_permissions(client) -> None:
    result = client.simulate_get("/v1/permissions")
    assert result.status_code == 200
    codes = {p["code"] for p in result.json["items"]}
    assert "customers.edit" in codes
    assert "Customers" in result.json["categories"]


def test_list_permissions_by_category(client) -> None:
    result = client.simulate_get("/v1/permissions", params={"category": "profile"})
    assert result.status_code == 200
    assert sorted(p["code"] for p in result.json["items"]) == ["profile.edit", "profile.view"]


def test_list_permissions_requires_identity(client) -> None:
    result = client.simulate_get("/v1/permissions", headers=as_user("anonymous"))
    assert result.status_code == 401


def test_list_permissions_requires_permissions_view(client) -> None:
    result = client.simulate_get("/v1/permissions", headers=as_user(USER_ID))
    assert result.status_code == 403


def test_get_permission_after_seed(client, permission_service) -> None:
    assert client.simulate_get("/v1/permissions/customers.edit").status_code == 404

    asyncio.run(permission_service.seed_default_permissions())

    result = client.simulate_get("/v1/permissions/customers.edit")
    assert result.status_code == 200
    assert result.json["name"] == "Edit Customers"
    assert result.json["action"] == "edit"


def test_role_defaults(client) -> None:
    result = client.simulate_get("/v1/roles/User/permissions")
    assert result.status_code == 200
    assert result.json == {
        "role": "user",
        "permissions": ["appointments.view", "dashboard.view", "profile.edit", "profile.view"],
    }


def test_role_defaults_unknown_role(client) -> None:
    result = client.simulate_get("/v1/roles/owner/permissions")
    assert result.status_code == 400
    assert "Invalid role" in result.json["error"]


def test_cache_stats_admin_only(client) -> None:
    client.simulate_get(f"/v1/users/{USER_ID}/permissions/check", params={"permission": "profile.view"})

    result = client.simulate_get("/v1/permissions/cache/stats")
    assert result.status_code == 200
    assert result.json["max_size"] == 1000
    assert result.json["sets"] >= 1

    assert client.simulate_get(
        "/v1/permissions/cache/stats", headers=as_user(USER_ID)
    ).status_code == 403


# --- user permissions ---


def test_user_reads_own_permissions(client) -> None:
    result = client.simulate_get(f"/v1/users/{USER_ID}/permissions", headers=as_user(USER_ID))
    assert result.status_code == 200
    assert result.json == {
        "user_id": USER_ID,
        "role": "user",
        "permissions": ["appointments.view", "dashboard.view", "profile.edit", "profile.view"],
    }


def test_reading_other_user_requires_permissions_view(client) -> None:
    result = client.simulate_get(f"/v1/users/{USER_ID}/permissions", headers=as_user(MANAGER_ID))
    assert result.status_code == 403


def test_get_permissions_unknown_user(client) -> None:
    assert client.simulate_get("/v1/users/999/permissions").status_code == 404


def test_get_permissions_invalid_user_id(client) -> None:
    result = client.simulate_get("/v1/users/abc/permissions")
    assert result.status_code == 400
    assert result.json["error"] == "Invalid user ID"


def test_put_permissions(client) -> None:
    result = client.simulate_put(
        f"/v1/users/{USER_ID}/permissions",
        json={"permissions": ["profile.view", "customers.view"]},
    )
    assert result.status_code == 200
    assert result.json["permissions"] == ["customers.view", "profile.view"]

    overrides = client.simulate_get(f"/v1/users/{USER_ID}/permissions/overrides")
    assert overrides.status_code == 200
    rows = {(o["permission_code"], o["granted"]) for o in overrides.json["items"]}
    assert rows == {
        ("customers.view", True),
        ("dashboard.view", False),
        ("profile.edit", False),
        ("appointments.view", False),
    }
    assert {o["granted_by"] for o in overrides.json["items"]} == {ADMIN_ID}


def test_put_permissions_unknown_codes(client) -> None:
    result = client.simulate_put(
        f"/v1/users/{USER_ID}/permissions",
        json={"permissions": ["profile.view", "NOT_A_REAL_CODE"]},
    )
    assert result.status_code == 400
    assert result.json["invalid_codes"] == ["NOT_A_REAL_CODE"]
    assert result.json["error"] == "Invalid permissions: NOT_A_REAL_CODE"

    unchanged = client.simulate_get(f"/v1/users/{USER_ID}/permissions")
    assert "profile.edit" in unchanged.json["permissions"]


def test_put_permissions_requires_list(client) -> None:
    result = client.simulate_put(
        f"/v1/users/{USER_ID}/permissions", json={"permissions": "profile.view"}
    )
    assert result.status_code == 400


def test_put_permissions_requires_permissions_manage(client) -> None:
    result = client.simulate_put(
        f"/v1/users/{USER_ID}/permissions",
        json={"permissions": ["profile.view"]},
        headers=as_user(MANAGER_ID),
    )
    assert result.status_code == 403


def test_put_permissions_for_admin_is_rejected(client) -> None:
    result = client.simulate_put(
        f"/v1/users/{ADMIN_ID}/permissions", json={"permissions": ["profile.view"]}
    )
    assert result.status_code == 400


def test_put_permissions_unknown_user(client) -> None:
    result = client.simulate_put("/v1/users/999/permissions", json={"permissions": []})
    assert result.status_code == 404


# --- grant / revoke / check ---


def test_grant_and_revoke_single_permission(client) -> None:
    check_path = f"/v1/users/{USER_ID}/permissions/check"
    params = {"permission": "customers.view"}
    assert client.simulate_get(check_path, params=params).json["allowed"] is False

    granted = client.simulate_post(f"/v1/users/{USER_ID}/permissions/customers.view")
    assert granted.status_code == 200
    assert granted.json["changed"] is True
    assert client.simulate_get(check_path, params=params).json["allowed"] is True

    again = client.simulate_post(f"/v1/users/{USER_ID}/permissions/customers.view")
    assert again.json["changed"] is False

    revoked = client.simulate_delete(f"/v1/users/{USER_ID}/permissions/customers.view")
    assert revoked.status_code == 200
    assert revoked.json["changed"] is True
    assert client.simulate_get(check_path, params=params).json["allowed"] is False


def test_grant_unknown_code(client) -> None:
    result = client.simulate_post(f"/v1/users/{USER_ID}/permissions/customers.fly")
    assert result.status_code == 400
    assert result.json["invalid_codes"] == ["customers.fly"]


def test_grant_requires_permissions_manage(client) -> None:
    result = client.simulate_post(
        f"/v1/users/{USER_ID}/permissions/customers.view", headers=as_user(USER_ID)
    )
    assert result.status_code == 403


def test_check_own_permission(client) -> None:
    result = client.simulate_get(
        f"/v1/users/{USER_ID}/permissions/check",
        params={"permission": "profile.view"},
        headers=as_user(USER_ID),
    )
    assert result.status_code == 200
    assert result.json == {"user_id": USER_ID, "permission": "profile.view", "allowed": True}


def test_check_requires_permission_param(client) -> None:
    result = client.simulate_get(f"/v1/users/{USER_ID}/permissions/check")
    assert result.status_code == 400


def test_unknown_user_check_is_denied(client) -> None:
    result = client.simulate_get(
        "/v1/users/999/permissions/check", params={"permission": "profile.view"}
    )
    assert result.status_code == 200
    assert result.json["allowed"] is False
