"""Domain exceptions."""


class RoleGateError(Exception):
    """Base exception for RoleGate."""

    pass


class PermissionDenied(RoleGateError):
    """Acting user does not have permission for the requested action."""

    pass


class NotFound(RoleGateError):
    """Requested resource was not found."""

    pass


class ValidationError(RoleGateError):
    """Validation failed for input data."""

    def __init__(self, message: str, invalid_codes: list[str] | None = None) -> None:
        super().__init__(message)
        self.invalid_codes = invalid_codes or []


class TransientCacheError(RoleGateError):
    """Permission cache could not serve an operation. Always recovered locally."""

    pass


class AuthRequired(RoleGateError):
    """No authenticated identity is available for a permission check."""

    pass
