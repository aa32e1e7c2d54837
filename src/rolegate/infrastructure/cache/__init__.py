"""Permission decision caches."""

from rolegate.infrastructure.cache.memory_cache import (
    InMemoryPermissionCache,
    NullPermissionCache,
)

__all__ = ["InMemoryPermissionCache", "NullPermissionCache"]
