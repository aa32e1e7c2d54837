#!/usr/bin/env python3
"""Load a user's permissions through the API and check codes with the client facade.

Usage:
    export API_URL=http://localhost:8000 KEYCLOAK_URL=http://localhost:8080
    export KEYCLOAK_REALM=rolegate KEYCLOAK_CLIENT_ID=rolegate-api KEYCLOAK_CLIENT_SECRET=...
    export ROLEGATE_USER=alice ROLEGATE_PASSWORD=secret
    uv run python scripts/check_permissions.py --user-id 42 customers.view customers.edit
"""
from __future__ import annotations

import argparse
import asyncio
import os
import sys

import httpx

from rolegate.client import Identity, PermissionFetchError, PermissionsFacade
from rolegate.infrastructure.client.http_permission_source import HttpPermissionSource


def get_token(
    keycloak_url: str,
    realm: str,
    client_id: str,
    client_secret: str,
    username: str,
    password: str,
) -> str:
    url = f"{keycloak_url.rstrip('/')}/realms/{realm}/protocol/openid-connect/token"
    r = httpx.post(
        url,
        data={
            "grant_type": "password",
            "client_id": client_id,
            "client_secret": client_secret,
            "username": username,
            "password": password,
        },
        headers={"Content-Type": "application/x-www-form-urlencoded"},
        timeout=30.0,
    )
    r.raise_for_status()
    return r.json()["access_token"]


async def check(api_url: str, token: str, user_id: int, codes: list[str]) -> int:
    async with httpx.AsyncClient(
        base_url=api_url,
        headers={"Authorization": f"Bearer {token}"},
        timeout=30.0,
    ) as client:
        facade = PermissionsFacade(HttpPermissionSource(client))
        await facade.on_auth_ready(Identity(user_id=user_id))
        if facade.error is not None:
            print(f"Could not load permissions: {facade.error}", file=sys.stderr)
            return 1

    print(f"user {user_id} role={facade.role} permissions={len(facade.permissions)}")
    for code in codes:
        print(f"  {code:<28} {'allow' if facade.has_permission(code) else 'deny'}")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Check user permissions via the API")
    parser.add_argument("--user-id", type=int, required=True, help="User whose permissions to load")
    parser.add_argument("codes", nargs="*", help="Permission codes to check")
    args = parser.parse_args()

    api_url = os.environ.get("API_URL", "http://localhost:8000").rstrip("/")
    try:
        token = get_token(
            os.environ.get("KEYCLOAK_URL", "http://localhost:8080"),
            os.environ.get("KEYCLOAK_REALM", "rolegate"),
            os.environ.get("KEYCLOAK_CLIENT_ID", "rolegate-api"),
            os.environ.get("KEYCLOAK_CLIENT_SECRET", ""),
            os.environ.get("ROLEGATE_USER", ""),
            os.environ.get("ROLEGATE_PASSWORD", ""),
        )
    except httpx.HTTPError as e:
        print(f"Token request failed: {e}", file=sys.stderr)
        return 1

    try:
        return asyncio.run(check(api_url, token, args.user_id, args.codes))
    except PermissionFetchError as e:
        print(f"Could not load permissions: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
