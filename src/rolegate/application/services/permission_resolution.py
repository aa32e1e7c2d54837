"""Permission resolution service.

Computes effective permission sets from role defaults plus per-user overrides,
answers cached boolean checks, and owns every write path for overrides. Each
successful write invalidates the user's cached decisions before returning.
"""

from collections.abc import Iterable
from datetime import UTC, datetime

import structlog

from rolegate.application.ports import PermissionCache
from rolegate.domain.entities import (
    EffectivePermissionSet,
    Permission,
    User,
    UserPermissionOverride,
)
from rolegate.domain.exceptions import NotFound, ValidationError
from rolegate.domain.permission_registry import PermissionRegistry
from rolegate.domain.value_objects import Role

logger = structlog.get_logger(__name__)


def apply_overrides(
    role_defaults: frozenset[str],
    overrides: Iterable[UserPermissionOverride],
) -> frozenset[str]:
    """Role defaults, plus granted overrides, minus denied overrides."""
    granted = {o.permission_code for o in overrides if o.granted}
    denied = {o.permission_code for o in overrides if not o.granted}
    return frozenset((role_defaults | granted) - denied)


def minimal_overrides(
    user_id: int,
    role_defaults: frozenset[str],
    wanted: frozenset[str],
    granted_by: int | None,
    granted_at: datetime,
) -> list[UserPermissionOverride]:
    """Smallest override set that turns role_defaults into wanted."""
    grants = [
        UserPermissionOverride(
            user_id=user_id,
            permission_code=code,
            granted=True,
            granted_at=granted_at,
            granted_by=granted_by,
        )
        for code in sorted(wanted - role_defaults)
    ]
    denies = [
        UserPermissionOverride(
            user_id=user_id,
            permission_code=code,
            granted=False,
            granted_at=granted_at,
            granted_by=granted_by,
        )
        for code in sorted(role_defaults - wanted)
    ]
    return grants + denies


class PermissionResolutionService:
    """Resolves, checks and updates user permissions."""

    def __init__(
        self,
        unit_of_work_factory: type,
        registry: PermissionRegistry,
        cache: PermissionCache,
        cache_ttl: float | None = None,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._registry = registry
        self._cache = cache
        self._cache_ttl = cache_ttl
        # Bumped on invalidation while checks for the user are in flight, so a
        # check that started before a write cannot store its now-stale result.
        # Entries exist only while a check for that user is running.
        self._generations: dict[int, int] = {}
        self._in_flight: dict[int, int] = {}

    @property
    def registry(self) -> PermissionRegistry:
        return self._registry

    @property
    def cache(self) -> PermissionCache:
        return self._cache

    async def get_user_permissions(self, user_id: int) -> EffectivePermissionSet:
        """Effective permission set of user_id. Raises NotFound for unknown users."""
        async with self._uow_factory() as uow:
            user = await uow.users.get_by_id(user_id)
            if not user:
                raise NotFound("User", user_id)
            if user.is_admin:
                # Admin rows, if any exist from older data, are ignored.
                return EffectivePermissionSet(
                    user_id=user_id,
                    role=user.role,
                    permissions=self._registry.all_codes(),
                )
            overrides = await uow.overrides.find_for_user(user_id)

        defaults = self._registry.permissions_for_role(user.role)
        effective = apply_overrides(defaults, overrides) & self._registry.all_codes()
        logger.debug(
            "Resolved user permissions",
            user_id=user_id,
            role=user.role.value,
            from_role=len(defaults),
            overrides=len(overrides),
            total=len(effective),
        )
        return EffectivePermissionSet(user_id=user_id, role=user.role, permissions=effective)

    async def has_permission(self, user_id: int, code: str) -> bool:
        """Cached check. Unknown codes and unknown users are denied."""
        if not self._registry.exists(code):
            logger.debug("Denied unknown permission code", user_id=user_id, permission=code)
            return False

        cached = self._cache.get(user_id, code)
        if cached is not None:
            return cached

        generation = self._generations.setdefault(user_id, 0)
        self._in_flight[user_id] = self._in_flight.get(user_id, 0) + 1
        try:
            effective = await self.get_user_permissions(user_id)
        except NotFound:
            logger.warning("Permission check for unknown user", user_id=user_id, permission=code)
            return False
        else:
            result = code in effective
            if self._generations[user_id] == generation:
                self._cache.set(user_id, code, result, self._cache_ttl)
            return result
        finally:
            self._in_flight[user_id] -= 1
            if not self._in_flight[user_id]:
                del self._in_flight[user_id]
                del self._generations[user_id]

    async def update_user_permissions(
        self,
        user_id: int,
        permissions: Iterable[str],
        actor_id: int | None = None,
    ) -> bool:
        """Replace the user's overrides so their effective set equals permissions.

        All codes are validated before anything is written; one unknown code
        fails the whole update with ValidationError naming every offender.
        """
        wanted = self._validate_codes(permissions)

        async with self._uow_factory() as uow:
            user = await self._get_mutable_user(uow, user_id)
            defaults = self._registry.permissions_for_role(user.role)
            overrides = minimal_overrides(
                user_id, defaults, wanted, granted_by=actor_id, granted_at=datetime.now(UTC)
            )
            await uow.overrides.replace_for_user(user_id, overrides)

        self.invalidate_user(user_id)
        logger.info(
            "Updated user permissions",
            user_id=user_id,
            actor_id=actor_id,
            granted=sum(1 for o in overrides if o.granted),
            denied=sum(1 for o in overrides if not o.granted),
        )
        return True

    async def add_user_permission(
        self, user_id: int, code: str, actor_id: int | None = None
    ) -> bool:
        """Ensure user holds code. Returns whether stored overrides changed."""
        self._validate_codes([code])

        async with self._uow_factory() as uow:
            user = await self._get_mutable_user(uow, user_id)
            defaults = self._registry.permissions_for_role(user.role)
            current = await self._find_override(uow, user_id, code)
            if code in defaults:
                changed = current is not None and await uow.overrides.delete(user_id, code)
            elif current is not None and current.granted:
                changed = False
            else:
                await uow.overrides.upsert(
                    UserPermissionOverride(
                        user_id=user_id,
                        permission_code=code,
                        granted=True,
                        granted_at=datetime.now(UTC),
                        granted_by=actor_id,
                    )
                )
                changed = True

        if changed:
            self.invalidate_user(user_id)
            logger.info("Granted user permission", user_id=user_id, permission=code, actor_id=actor_id)
        return changed

    async def remove_user_permission(
        self, user_id: int, code: str, actor_id: int | None = None
    ) -> bool:
        """Ensure user lacks code. Returns whether stored overrides changed."""
        self._validate_codes([code])

        async with self._uow_factory() as uow:
            user = await self._get_mutable_user(uow, user_id)
            defaults = self._registry.permissions_for_role(user.role)
            current = await self._find_override(uow, user_id, code)
            if code not in defaults:
                changed = current is not None and await uow.overrides.delete(user_id, code)
            elif current is not None and not current.granted:
                changed = False
            else:
                await uow.overrides.upsert(
                    UserPermissionOverride(
                        user_id=user_id,
                        permission_code=code,
                        granted=False,
                        granted_at=datetime.now(UTC),
                        granted_by=actor_id,
                    )
                )
                changed = True

        if changed:
            self.invalidate_user(user_id)
            logger.info("Revoked user permission", user_id=user_id, permission=code, actor_id=actor_id)
        return changed

    async def get_user_overrides(self, user_id: int) -> list[UserPermissionOverride]:
        """Stored override rows for user_id."""
        async with self._uow_factory() as uow:
            user = await uow.users.get_by_id(user_id)
            if not user:
                raise NotFound("User", user_id)
            overrides = await uow.overrides.find_for_user(user_id)
        return sorted(overrides, key=lambda o: o.permission_code)

    def get_default_permissions_for_role(self, role: Role | str) -> frozenset[str]:
        """Role-default permission codes. Raises ValidationError for unknown roles."""
        if not isinstance(role, Role):
            try:
                role = Role.parse(role)
            except ValueError:
                valid = ", ".join(r.value for r in Role)
                raise ValidationError(f"Invalid role: {role}. Valid roles are: {valid}") from None
        return self._registry.permissions_for_role(role)

    def list_permissions(self, category: str | None = None) -> list[Permission]:
        return self._registry.list_definitions(category)

    async def get_permission(self, code: str) -> Permission:
        """Persisted permission definition by code."""
        async with self._uow_factory() as uow:
            permission = await uow.permissions.find_by_code(code)
        if not permission:
            raise NotFound("Permission", code)
        return permission

    async def seed_default_permissions(self) -> int:
        """Insert catalog definitions missing from storage. Returns rows inserted."""
        async with self._uow_factory() as uow:
            existing = {p.code for p in await uow.permissions.list_all()}
            missing = [p for p in self._registry.list_definitions() if p.code not in existing]
            if missing:
                await uow.permissions.create_batch(missing)

        if missing:
            logger.info("Seeded default permissions", inserted=len(missing))
        else:
            logger.debug("Permission catalog already seeded", existing=len(existing))
        return len(missing)

    def invalidate_user(self, user_id: int) -> None:
        """Drop cached decisions for user_id (e.g. after a role change)."""
        if user_id in self._generations:
            self._generations[user_id] += 1
        self._cache.invalidate_user(user_id)

    def _validate_codes(self, permissions: Iterable[str]) -> frozenset[str]:
        if isinstance(permissions, str | bytes) or not isinstance(
            permissions, list | tuple | set | frozenset
        ):
            raise ValidationError("Permissions must be a list of permission codes")
        codes = list(permissions)
        if any(not isinstance(c, str) for c in codes):
            raise ValidationError("Permission codes must be strings")
        unknown = self._registry.unknown_codes(codes)
        if unknown:
            raise ValidationError(
                f"Invalid permissions: {', '.join(unknown)}",
                invalid_codes=unknown,
            )
        return frozenset(codes)

    async def _get_mutable_user(self, uow, user_id: int) -> User:
        user = await uow.users.get_by_id(user_id)
        if not user:
            raise NotFound("User", user_id)
        if user.is_admin:
            raise ValidationError("Permissions of admin users cannot be overridden")
        return user

    async def _find_override(self, uow, user_id: int, code: str) -> UserPermissionOverride | None:
        for override in await uow.overrides.find_for_user(user_id):
            if override.permission_code == code:
                return override
        return None
