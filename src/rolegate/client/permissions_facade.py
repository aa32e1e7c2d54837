"""Client permission facade.

Reconciles two asynchronous readiness signals, "authentication resolved" and
"permission list fetched", into synchronous predicates that render-time code
can call without awaiting. Reads fail closed: while authentication is pending,
while permissions load, or after a failed load, every check of a non-admin
user is denied. Writes fail loud: ``update_permissions`` raises on failure.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

import structlog

from rolegate.application.ports import PermissionSource
from rolegate.client.coalescer import FetchCoalescer
from rolegate.client.errors import (
    PermissionClientError,
    PermissionFetchError,
    PermissionUpdateError,
)
from rolegate.domain.exceptions import AuthRequired, RoleGateError
from rolegate.domain.value_objects import Role

logger = structlog.get_logger(__name__)


class AuthState(StrEnum):
    PENDING = "auth_pending"
    READY = "auth_ready"


class PermissionsState(StrEnum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    ERROR = "error"


@dataclass(frozen=True)
class Identity:
    """Principal supplied by the authentication subsystem."""

    user_id: int
    role: Role | None = None


def _parse_role(value: Any) -> Role | None:
    if not isinstance(value, str):
        return None
    try:
        return Role.parse(value)
    except ValueError:
        return None


class PermissionsFacade:
    """Permission state for one client session.

    By default the facade loads and writes the signed-in user's permissions.
    Passing ``user_id`` targets another user instead (e.g. a permission
    editor); admin short-circuits still follow the signed-in viewer.
    """

    def __init__(
        self,
        source: PermissionSource,
        coalescer: FetchCoalescer | None = None,
        user_id: int | None = None,
    ) -> None:
        self._source = source
        self._coalescer = coalescer or FetchCoalescer()
        self._target_user_id = user_id
        # Bumped whenever the signed-in identity changes; results started
        # under an older session are dropped.
        self._session = 0
        self._auth_state = AuthState.PENDING
        self._identity: Identity | None = None
        self._state = PermissionsState.IDLE
        self._permissions: frozenset[str] = frozenset()
        self._role: Role | None = None
        self._error: RoleGateError | None = None

    @property
    def auth_state(self) -> AuthState:
        return self._auth_state

    @property
    def state(self) -> PermissionsState:
        return self._state

    @property
    def identity(self) -> Identity | None:
        return self._identity

    @property
    def permissions(self) -> frozenset[str]:
        return self._permissions

    @property
    def role(self) -> Role | None:
        return self._role

    @property
    def error(self) -> RoleGateError | None:
        return self._error

    @property
    def is_loading(self) -> bool:
        return self._auth_state == AuthState.PENDING or self._state == PermissionsState.LOADING

    @property
    def target_user_id(self) -> int | None:
        """User whose permissions are loaded: the explicit target or the viewer."""
        if self._target_user_id is not None:
            return self._target_user_id
        return self._identity.user_id if self._identity is not None else None

    @property
    def is_admin(self) -> bool:
        """Whether the signed-in viewer is an admin."""
        if self._identity is not None and self._identity.role == Role.ADMIN:
            return True
        # The loaded role only describes the viewer when no other user is targeted.
        return self._target_user_id is None and self._role == Role.ADMIN

    async def on_auth_ready(self, identity: Identity | None) -> None:
        """Authentication finished. Loads permissions for identity, if any."""
        self._auth_state = AuthState.READY
        await self._switch_identity(identity)

    async def on_identity_changed(self, identity: Identity | None) -> None:
        """Signed-in principal changed (sign-in, sign-out or user switch)."""
        if self._auth_state == AuthState.PENDING:
            self._identity = identity
            return
        await self._switch_identity(identity)

    async def refetch(self, force: bool = False) -> frozenset[str]:
        """Load the permission list of the target user.

        Concurrent calls for the same user share one request unless force is
        set. Raises AuthRequired without an identity and PermissionFetchError
        when loading fails; in both cases the facade is left in ERROR with no
        permissions.
        """
        if self._auth_state == AuthState.PENDING:
            raise AuthRequired("Authentication is not ready")
        identity = self._identity
        if identity is None:
            self._fail(AuthRequired("Authentication required for permissions"))
            raise self._error

        user_id = self.target_user_id
        session = self._session
        self._state = PermissionsState.LOADING
        self._error = None
        try:
            payload = await self._coalescer.run(
                user_id,
                lambda: self._source.get_user_permissions(user_id),
                force=force,
            )
        except Exception as e:
            if session != self._session:
                logger.debug("Dropped fetch failure for previous identity", user_id=user_id)
                return self._permissions
            logger.warning("Permission fetch failed", user_id=user_id, error=str(e))
            if isinstance(e, PermissionFetchError):
                self._fail(e)
                raise
            error = PermissionFetchError(
                f"Error fetching permissions: {e}",
                code="FETCH_ERROR",
                details={"user_id": user_id},
            )
            self._fail(error)
            raise error from e

        if session != self._session:
            # Identity changed while this fetch was running.
            return self._permissions

        try:
            permissions, role = self._parse_payload(user_id, payload)
        except PermissionFetchError as e:
            logger.warning("Permission payload rejected", user_id=user_id, error=str(e))
            self._fail(e)
            raise

        self._permissions = permissions
        if role is not None:
            self._role = role
        self._state = PermissionsState.LOADED
        self._error = None
        logger.debug(
            "Loaded permissions",
            user_id=user_id,
            count=len(permissions),
            role=self._role.value if self._role else None,
        )
        return permissions

    async def invalidate(self) -> frozenset[str]:
        """Explicit invalidation event: reload bypassing any in-flight fetch."""
        return await self.refetch(force=True)

    def has_permission(self, code: str) -> bool:
        """Synchronous check against current state. Never triggers a fetch."""
        if not code:
            logger.debug("Empty permission code denied")
            return False
        if self.is_admin:
            return True
        if self._auth_state == AuthState.PENDING or self._identity is None:
            return False
        if self._state != PermissionsState.LOADED:
            logger.debug(
                "Permission denied while not loaded",
                permission=code,
                state=self._state.value,
                error=str(self._error) if self._error else None,
            )
            return False
        return code in self._permissions

    def has_any_permission(self, codes: Iterable[str]) -> bool:
        codes = list(codes)
        if not codes:
            return False
        if self.is_admin:
            return True
        return any(self.has_permission(code) for code in codes)

    def has_all_permissions(self, codes: Iterable[str]) -> bool:
        codes = list(codes)
        if not codes:
            return False
        if self.is_admin:
            return True
        return all(self.has_permission(code) for code in codes)

    async def update_permissions(self, new_codes: Iterable[str]) -> bool:
        """Write the target user's permission list and adopt it locally on success.

        Failures raise PermissionUpdateError (or AuthRequired without an
        identity); local permissions are left as they were.
        """
        if self._identity is None:
            raise AuthRequired("Cannot update permissions: no user is signed in")

        user_id = self.target_user_id
        session = self._session
        codes = list(new_codes)
        try:
            ok = await self._source.update_user_permissions(user_id, codes)
        except PermissionClientError:
            raise
        except RoleGateError as e:
            raise PermissionUpdateError(
                f"Failed to update user permissions: {e}",
                code="UPDATE_FAILED",
                details={"user_id": user_id, "cause": type(e).__name__},
            ) from e
        except Exception as e:
            raise PermissionUpdateError(
                f"Error updating permissions: {e}",
                code="UPDATE_ERROR",
                details={"user_id": user_id},
            ) from e
        if not ok:
            raise PermissionUpdateError(
                "Failed to update user permissions",
                code="UPDATE_FAILED",
                details={"user_id": user_id},
            )

        if session == self._session:
            self._permissions = frozenset(codes)
            self._state = PermissionsState.LOADED
            self._error = None
        logger.info("Updated permissions", user_id=user_id, count=len(codes))
        return True

    async def _switch_identity(self, identity: Identity | None) -> None:
        previous = self._identity
        previous_target = self.target_user_id
        self._identity = identity
        if previous is None or identity is None or previous.user_id != identity.user_id:
            self._session += 1
            if previous_target is not None:
                # Fetches started for the previous viewer are no longer shared.
                self._coalescer.discard(previous_target)
        if identity is None:
            self._role = None
            self._fail(AuthRequired("Authentication required for permissions"))
            return
        own_role = identity.role if self._target_user_id is None else None
        if previous is None or previous.user_id != identity.user_id:
            self._permissions = frozenset()
            self._role = own_role
            self._state = PermissionsState.IDLE
        elif own_role is not None:
            self._role = own_role
        try:
            await self.refetch()
        except PermissionFetchError as e:
            logger.error("Error loading permissions", user_id=self.target_user_id, error=str(e))

    def _fail(self, error: RoleGateError) -> None:
        self._permissions = frozenset()
        self._state = PermissionsState.ERROR
        self._error = error

    @staticmethod
    def _parse_payload(
        user_id: int, payload: Mapping[str, Any] | None
    ) -> tuple[frozenset[str], Role | None]:
        if not isinstance(payload, Mapping):
            raise PermissionFetchError(
                f"No response received from permissions source for user {user_id}",
                code="NO_RESPONSE",
                details={"user_id": user_id},
            )
        permissions = payload.get("permissions")
        if not isinstance(permissions, list) or not all(isinstance(p, str) for p in permissions):
            raise PermissionFetchError(
                "Permission source returned invalid data: missing permissions array",
                code="INVALID_RESPONSE",
                details={"user_id": user_id},
            )
        return frozenset(permissions), _parse_role(payload.get("role"))
