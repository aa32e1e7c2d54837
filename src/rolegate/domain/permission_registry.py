"""Static permission catalog and role-default tables."""

from collections.abc import Iterable, Mapping

from rolegate.domain.entities import Permission
from rolegate.domain.value_objects import PermissionCategory as C
from rolegate.domain.value_objects import PermissionCode as P
from rolegate.domain.value_objects import PermissionVerb as V
from rolegate.domain.value_objects import Role


def _define(code: P, name: str, description: str, category: C, action: V) -> Permission:
    return Permission(
        code=code.value,
        name=name,
        description=description,
        category=category.value,
        action=action.value,
    )


SYSTEM_PERMISSIONS: tuple[Permission, ...] = (
    _define(P.SYSTEM_ACCESS, "System Access", "Can access the system", C.SYSTEM, V.ACCESS),
    _define(P.SYSTEM_ADMIN, "System Administration", "Full administrative access", C.SYSTEM, V.ADMIN),
    _define(P.SYSTEM_LOGS, "System Logs", "Can view system logs", C.SYSTEM, V.LOGS),
    _define(P.DASHBOARD_VIEW, "View Dashboard", "Can view the dashboard", C.DASHBOARD, V.VIEW),
    _define(P.USERS_VIEW, "View Users", "Can view user list and details", C.USERS, V.VIEW),
    _define(P.USERS_CREATE, "Create Users", "Can create new users", C.USERS, V.CREATE),
    _define(P.USERS_EDIT, "Edit Users", "Can edit existing users", C.USERS, V.EDIT),
    _define(P.USERS_DELETE, "Delete Users", "Can delete users", C.USERS, V.DELETE),
    _define(P.USERS_MANAGE, "Manage Users", "Has full management access to users", C.USERS, V.MANAGE),
    _define(P.ROLES_VIEW, "View Roles", "Can view roles and permissions", C.ROLES, V.VIEW),
    _define(P.ROLES_CREATE, "Create Roles", "Can create new roles", C.ROLES, V.CREATE),
    _define(P.ROLES_EDIT, "Edit Roles", "Can edit existing roles", C.ROLES, V.EDIT),
    _define(P.ROLES_DELETE, "Delete Roles", "Can delete roles", C.ROLES, V.DELETE),
    _define(P.CUSTOMERS_VIEW, "View Customers", "Can view customer list and details", C.CUSTOMERS, V.VIEW),
    _define(P.CUSTOMERS_CREATE, "Create Customers", "Can create new customers", C.CUSTOMERS, V.CREATE),
    _define(P.CUSTOMERS_EDIT, "Edit Customers", "Can edit existing customers", C.CUSTOMERS, V.EDIT),
    _define(P.CUSTOMERS_DELETE, "Delete Customers", "Can delete customers", C.CUSTOMERS, V.DELETE),
    _define(
        P.CUSTOMERS_HARD_DELETE,
        "Permanently Delete Customers",
        "Can permanently remove customers",
        C.CUSTOMERS,
        V.HARD_DELETE,
    ),
    _define(P.REQUESTS_VIEW, "View Requests", "Can view request list and details", C.REQUESTS, V.VIEW),
    _define(P.REQUESTS_CREATE, "Create Requests", "Can create new requests", C.REQUESTS, V.CREATE),
    _define(P.REQUESTS_EDIT, "Edit Requests", "Can edit existing requests", C.REQUESTS, V.EDIT),
    _define(P.REQUESTS_DELETE, "Delete Requests", "Can delete requests", C.REQUESTS, V.DELETE),
    _define(P.REQUESTS_APPROVE, "Approve Requests", "Can approve requests", C.REQUESTS, V.APPROVE),
    _define(P.REQUESTS_REJECT, "Reject Requests", "Can reject requests", C.REQUESTS, V.REJECT),
    _define(P.REQUESTS_ASSIGN, "Assign Requests", "Can assign requests to users", C.REQUESTS, V.ASSIGN),
    _define(P.REQUESTS_MANAGE, "Manage Requests", "Has full management access to requests", C.REQUESTS, V.MANAGE),
    _define(P.REQUESTS_CONVERT, "Convert Requests", "Can convert requests to customers", C.REQUESTS, V.CONVERT),
    _define(
        P.APPOINTMENTS_VIEW,
        "View Appointments",
        "Can view appointment list and details",
        C.APPOINTMENTS,
        V.VIEW,
    ),
    _define(P.APPOINTMENTS_CREATE, "Create Appointments", "Can create new appointments", C.APPOINTMENTS, V.CREATE),
    _define(P.APPOINTMENTS_EDIT, "Edit Appointments", "Can edit existing appointments", C.APPOINTMENTS, V.EDIT),
    _define(P.APPOINTMENTS_DELETE, "Delete Appointments", "Can delete appointments", C.APPOINTMENTS, V.DELETE),
    _define(P.NOTIFICATIONS_VIEW, "View Notifications", "Can view notifications", C.NOTIFICATIONS, V.VIEW),
    _define(P.NOTIFICATIONS_CREATE, "Create Notifications", "Can create notifications", C.NOTIFICATIONS, V.CREATE),
    _define(P.NOTIFICATIONS_EDIT, "Edit Notifications", "Can edit notifications", C.NOTIFICATIONS, V.EDIT),
    _define(P.NOTIFICATIONS_DELETE, "Delete Notifications", "Can delete notifications", C.NOTIFICATIONS, V.DELETE),
    _define(
        P.NOTIFICATIONS_MANAGE,
        "Manage Notifications",
        "Has full management access to notifications",
        C.NOTIFICATIONS,
        V.MANAGE,
    ),
    _define(P.SETTINGS_VIEW, "View Settings", "Can view system settings", C.SETTINGS, V.VIEW),
    _define(P.SETTINGS_EDIT, "Edit Settings", "Can change system settings", C.SETTINGS, V.EDIT),
    _define(P.PROFILE_VIEW, "View Profile", "Can view own profile", C.PROFILE, V.VIEW),
    _define(P.PROFILE_EDIT, "Edit Profile", "Can edit own profile", C.PROFILE, V.EDIT),
    _define(P.PERMISSIONS_VIEW, "View Permissions", "Can view user permissions", C.PERMISSIONS, V.VIEW),
    _define(
        P.PERMISSIONS_MANAGE,
        "Manage Permissions",
        "Can grant and revoke user permissions",
        C.PERMISSIONS,
        V.MANAGE,
    ),
)

# Admin is not listed: it implicitly holds every code.
ROLE_DEFAULTS: dict[Role, frozenset[str]] = {
    Role.MANAGER: frozenset(
        {
            P.DASHBOARD_VIEW,
            P.PROFILE_VIEW,
            P.PROFILE_EDIT,
            P.USERS_VIEW,
            P.USERS_EDIT,
            P.CUSTOMERS_VIEW,
            P.CUSTOMERS_CREATE,
            P.CUSTOMERS_EDIT,
            P.APPOINTMENTS_VIEW,
            P.APPOINTMENTS_CREATE,
            P.APPOINTMENTS_EDIT,
            P.REQUESTS_VIEW,
            P.REQUESTS_CREATE,
            P.REQUESTS_EDIT,
            P.REQUESTS_ASSIGN,
            P.NOTIFICATIONS_VIEW,
            P.NOTIFICATIONS_EDIT,
        }
    ),
    Role.EMPLOYEE: frozenset(
        {
            P.DASHBOARD_VIEW,
            P.PROFILE_VIEW,
            P.PROFILE_EDIT,
            P.CUSTOMERS_VIEW,
            P.APPOINTMENTS_VIEW,
            P.APPOINTMENTS_CREATE,
            P.REQUESTS_VIEW,
            P.NOTIFICATIONS_VIEW,
        }
    ),
    Role.USER: frozenset(
        {
            P.DASHBOARD_VIEW,
            P.PROFILE_VIEW,
            P.PROFILE_EDIT,
            P.APPOINTMENTS_VIEW,
        }
    ),
}


class PermissionRegistry:
    """Read-only lookup over permission definitions and role defaults."""

    def __init__(
        self,
        definitions: Iterable[Permission] = SYSTEM_PERMISSIONS,
        role_defaults: Mapping[Role, frozenset[str]] | None = None,
    ) -> None:
        self._by_code: dict[str, Permission] = {p.code: p for p in definitions}
        self._all_codes = frozenset(self._by_code)
        defaults = ROLE_DEFAULTS if role_defaults is None else role_defaults
        self._role_defaults: dict[Role, frozenset[str]] = {
            role: frozenset(str(code) for code in codes) & self._all_codes
            for role, codes in defaults.items()
        }

    def lookup(self, code: str) -> Permission | None:
        """Get permission definition by code. Unknown code returns None."""
        return self._by_code.get(code)

    def exists(self, code: str) -> bool:
        return code in self._by_code

    def all_codes(self) -> frozenset[str]:
        return self._all_codes

    def permissions_for_role(self, role: Role) -> frozenset[str]:
        """Role-default permission set. Admin holds every known code."""
        if role == Role.ADMIN:
            return self._all_codes
        return self._role_defaults.get(role, frozenset())

    def unknown_codes(self, codes: Iterable[str]) -> list[str]:
        """Codes not present in the catalog, in input order, without duplicates."""
        seen: set[str] = set()
        unknown: list[str] = []
        for code in codes:
            if code not in self._by_code and code not in seen:
                seen.add(code)
                unknown.append(code)
        return unknown

    def list_definitions(self, category: str | None = None) -> list[Permission]:
        items = list(self._by_code.values())
        if category:
            wanted = category.lower()
            items = [p for p in items if p.category.lower() == wanted]
        return items

    def categories(self) -> list[str]:
        return sorted({p.category for p in self._by_code.values()})
