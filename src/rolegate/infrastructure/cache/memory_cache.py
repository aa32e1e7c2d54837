"""In-process permission decision cache with TTL and bounded size.

Entries are keyed by ``(user_id, permission_code)``. When the cache is full the
oldest inserted entry is evicted; reads do not reorder entries, so eviction
order is insertion order rather than strict recency of access.

Every public operation first takes an advisory lock named after the operation
and its target key. The lock never blocks: when it is already held the
operation gives up, a read reports a miss and a write is skipped. A stale
decision is bounded by the TTL and by explicit per-user invalidation on every
write path, so skipping is always safe. Internal failures are logged and
absorbed; callers only ever see a miss.
"""

import threading
import time
from collections import OrderedDict
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass

import structlog

from rolegate.domain.exceptions import TransientCacheError

logger = structlog.get_logger(__name__)

CacheKey = tuple[int, str]


@dataclass
class _CacheEntry:
    value: bool
    expires_at: float


@dataclass
class _CacheCounters:
    hits: int = 0
    misses: int = 0
    sets: int = 0
    deletes: int = 0
    evictions: int = 0
    clears: int = 0
    contended: int = 0


class _AdvisoryLocks:
    """Non-blocking named locks. A second holder is refused, never queued."""

    def __init__(self) -> None:
        self._held: set[str] = set()
        self._guard = threading.Lock()

    @contextmanager
    def hold(self, name: str) -> Iterator[None]:
        with self._guard:
            if name in self._held:
                raise TransientCacheError(f"Cache operation already in progress: {name}")
            self._held.add(name)
        try:
            yield
        finally:
            with self._guard:
                self._held.discard(name)


class InMemoryPermissionCache:
    """Bounded TTL cache of boolean permission decisions."""

    def __init__(
        self,
        max_size: int = 1000,
        default_ttl: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        if default_ttl <= 0:
            raise ValueError("default_ttl must be positive")
        self._max_size = max_size
        self._default_ttl = default_ttl
        self._clock = clock
        self._entries: OrderedDict[CacheKey, _CacheEntry] = OrderedDict()
        self._store_lock = threading.RLock()
        self._locks = _AdvisoryLocks()
        self._counters = _CacheCounters()
        self._started_at = time.monotonic()

    @property
    def max_size(self) -> int:
        return self._max_size

    @property
    def default_ttl(self) -> float:
        return self._default_ttl

    def get(self, user_id: int, code: str) -> bool | None:
        """Cached decision, or None on absent key, expiry, contention or failure."""
        key = (user_id, code)
        try:
            with self._locks.hold(f"get:{user_id}:{code}"):
                with self._store_lock:
                    entry = self._entries.get(key)
                    if entry is None:
                        self._counters.misses += 1
                        return None
                    if self._clock() >= entry.expires_at:
                        del self._entries[key]
                        self._counters.misses += 1
                        self._counters.deletes += 1
                        return None
                    self._counters.hits += 1
                    return entry.value
        except TransientCacheError as e:
            self._record_contention("get", e, user_id=user_id, permission=code)
            return None
        except Exception:
            logger.warning(
                "Permission cache get failed",
                user_id=user_id,
                permission=code,
                exc_info=True,
            )
            return None

    def set(self, user_id: int, code: str, value: bool, ttl: float | None = None) -> None:
        """Store a decision. Evicts the oldest inserted entry when full."""
        key = (user_id, code)
        lifetime = self._default_ttl if ttl is None else ttl
        try:
            with self._locks.hold(f"set:{user_id}:{code}"):
                with self._store_lock:
                    if key in self._entries:
                        del self._entries[key]
                    elif len(self._entries) >= self._max_size:
                        oldest, _ = self._entries.popitem(last=False)
                        self._counters.deletes += 1
                        self._counters.evictions += 1
                        logger.debug(
                            "Evicted permission cache entry",
                            user_id=oldest[0],
                            permission=oldest[1],
                        )
                    self._entries[key] = _CacheEntry(
                        value=bool(value),
                        expires_at=self._clock() + lifetime,
                    )
                    self._counters.sets += 1
        except TransientCacheError as e:
            self._record_contention("set", e, user_id=user_id, permission=code)
        except Exception:
            logger.warning(
                "Permission cache set failed",
                user_id=user_id,
                permission=code,
                exc_info=True,
            )

    def delete(self, user_id: int, code: str) -> bool:
        """Remove a single decision. Returns whether an entry was removed."""
        try:
            with self._locks.hold(f"delete:{user_id}:{code}"):
                with self._store_lock:
                    if self._entries.pop((user_id, code), None) is None:
                        return False
                    self._counters.deletes += 1
                    return True
        except TransientCacheError as e:
            self._record_contention("delete", e, user_id=user_id, permission=code)
            return False
        except Exception:
            logger.warning(
                "Permission cache delete failed",
                user_id=user_id,
                permission=code,
                exc_info=True,
            )
            return False

    def invalidate_user(self, user_id: int) -> None:
        """Drop every cached decision belonging to user_id."""
        try:
            with self._locks.hold(f"invalidate:{user_id}"):
                with self._store_lock:
                    keys = [k for k in self._entries if k[0] == user_id]
                    for k in keys:
                        del self._entries[k]
                    self._counters.deletes += len(keys)
            logger.debug("Invalidated permission cache", user_id=user_id, removed=len(keys))
        except TransientCacheError as e:
            self._record_contention("invalidate", e, user_id=user_id)
        except Exception:
            logger.warning(
                "Permission cache invalidation failed",
                user_id=user_id,
                exc_info=True,
            )

    def clear_all(self) -> None:
        try:
            with self._locks.hold("clear"):
                with self._store_lock:
                    self._entries.clear()
                    self._counters.clears += 1
            logger.debug("Cleared permission cache")
        except TransientCacheError as e:
            self._record_contention("clear", e)
        except Exception:
            logger.warning("Permission cache clear failed", exc_info=True)

    def keys(self) -> list[CacheKey]:
        with self._store_lock:
            return list(self._entries)

    def stats(self) -> dict[str, float | int | None]:
        with self._store_lock:
            c = self._counters
            lookups = c.hits + c.misses
            return {
                "size": len(self._entries),
                "max_size": self._max_size,
                "hits": c.hits,
                "misses": c.misses,
                "sets": c.sets,
                "deletes": c.deletes,
                "evictions": c.evictions,
                "clears": c.clears,
                "contended": c.contended,
                "hit_rate": c.hits / lookups if lookups else None,
                "miss_rate": c.misses / lookups if lookups else None,
                "uptime_seconds": time.monotonic() - self._started_at,
            }

    def reset_stats(self) -> None:
        with self._store_lock:
            self._counters = _CacheCounters()
            self._started_at = time.monotonic()

    def _record_contention(self, operation: str, error: TransientCacheError, **context: object) -> None:
        with self._store_lock:
            self._counters.contended += 1
            if operation == "get":
                self._counters.misses += 1
        logger.debug("Permission cache lock contended", operation=operation, reason=str(error), **context)


class NullPermissionCache:
    """Cache that stores nothing. Every lookup is a miss."""

    def __init__(self) -> None:
        self._misses = 0

    def get(self, user_id: int, code: str) -> bool | None:
        self._misses += 1
        return None

    def set(self, user_id: int, code: str, value: bool, ttl: float | None = None) -> None:
        return None

    def invalidate_user(self, user_id: int) -> None:
        return None

    def clear_all(self) -> None:
        return None

    def stats(self) -> dict[str, float | int | None]:
        return {
            "size": 0,
            "max_size": 0,
            "hits": 0,
            "misses": self._misses,
            "sets": 0,
            "deletes": 0,
            "hit_rate": 0.0 if self._misses else None,
        }
