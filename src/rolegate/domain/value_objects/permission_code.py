"""Permission codes, categories and actions."""

from enum import StrEnum


class PermissionCategory(StrEnum):
    """Grouping labels for permissions."""

    SYSTEM = "System"
    DASHBOARD = "Dashboard"
    USERS = "Users"
    ROLES = "Roles"
    CUSTOMERS = "Customers"
    REQUESTS = "Requests"
    APPOINTMENTS = "Appointments"
    NOTIFICATIONS = "Notifications"
    SETTINGS = "Settings"
    PROFILE = "Profile"
    PERMISSIONS = "Permissions"


class PermissionVerb(StrEnum):
    """Action part of a permission code."""

    VIEW = "view"
    CREATE = "create"
    EDIT = "edit"
    DELETE = "delete"
    MANAGE = "manage"
    ACCESS = "access"
    APPROVE = "approve"
    REJECT = "reject"
    ASSIGN = "assign"
    CONVERT = "convert"
    ADMIN = "admin"
    LOGS = "logs"
    HARD_DELETE = "hard_delete"


class PermissionCode(StrEnum):
    """Stable permission identifiers, formatted as {category}.{action}."""

    SYSTEM_ACCESS = "system.access"
    SYSTEM_ADMIN = "system.admin"
    SYSTEM_LOGS = "system.logs"
    DASHBOARD_VIEW = "dashboard.view"

    USERS_VIEW = "users.view"
    USERS_CREATE = "users.create"
    USERS_EDIT = "users.edit"
    USERS_DELETE = "users.delete"
    USERS_MANAGE = "users.manage"

    ROLES_VIEW = "roles.view"
    ROLES_CREATE = "roles.create"
    ROLES_EDIT = "roles.edit"
    ROLES_DELETE = "roles.delete"

    CUSTOMERS_VIEW = "customers.view"
    CUSTOMERS_CREATE = "customers.create"
    CUSTOMERS_EDIT = "customers.edit"
    CUSTOMERS_DELETE = "customers.delete"
    CUSTOMERS_HARD_DELETE = "customers.hard_delete"

    REQUESTS_VIEW = "requests.view"
    REQUESTS_CREATE = "requests.create"
    REQUESTS_EDIT = "requests.edit"
    REQUESTS_DELETE = "requests.delete"
    REQUESTS_APPROVE = "requests.approve"
    REQUESTS_REJECT = "requests.reject"
    REQUESTS_ASSIGN = "requests.assign"
    REQUESTS_MANAGE = "requests.manage"
    REQUESTS_CONVERT = "requests.convert"

    APPOINTMENTS_VIEW = "appointments.view"
    APPOINTMENTS_CREATE = "appointments.create"
    APPOINTMENTS_EDIT = "appointments.edit"
    APPOINTMENTS_DELETE = "appointments.delete"

    NOTIFICATIONS_VIEW = "notifications.view"
    NOTIFICATIONS_CREATE = "notifications.create"
    NOTIFICATIONS_EDIT = "notifications.edit"
    NOTIFICATIONS_DELETE = "notifications.delete"
    NOTIFICATIONS_MANAGE = "notifications.manage"

    SETTINGS_VIEW = "settings.view"
    SETTINGS_EDIT = "settings.edit"

    PROFILE_VIEW = "profile.view"
    PROFILE_EDIT = "profile.edit"

    PERMISSIONS_VIEW = "permissions.view"
    PERMISSIONS_MANAGE = "permissions.manage"
