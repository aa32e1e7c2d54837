"""Application ports - interfaces for external adapters."""

from rolegate.application.ports.permission_cache import PermissionCache
from rolegate.application.ports.permission_checker import PermissionChecker
from rolegate.application.ports.permission_source import PermissionSource
from rolegate.application.ports.unit_of_work import UnitOfWork, UnitOfWorkFactory

__all__ = [
    "PermissionCache",
    "PermissionChecker",
    "PermissionSource",
    "UnitOfWork",
    "UnitOfWorkFactory",
]
