"""In-memory TTL cache for upstream payloads.

Entries live only for the lifetime of the process. Expired entries are
invisible to readers: ``get`` evicts them lazily, and the cleanup scheduler
calls ``cleanup_expired`` to reclaim entries nobody reads again.

All methods are synchronous and hold the lock only for dict operations, so
the store is safe to share between asyncio tasks and threads alike.
"""

from __future__ import annotations

import threading
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

import structlog

from newsgate.models.cache import CacheEntry

if TYPE_CHECKING:
    from collections.abc import Callable

log = structlog.get_logger()

DEFAULT_TTL_SECONDS = 43200  # 12 hours


def utcnow() -> datetime:
    return datetime.now(UTC)


class CacheStore:
    """Time-bounded key/value store implementing CacheProtocol."""

    def __init__(
        self,
        default_ttl_seconds: int = DEFAULT_TTL_SECONDS,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._default_ttl = default_ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    @property
    def default_ttl_seconds(self) -> int:
        return self._default_ttl

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, key: str) -> CacheEntry | None:
        """Return the live entry for ``key``, or ``None`` if absent or expired."""
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if not entry.is_live(now):
                del self._entries[key]
                log.debug("cache_entry_expired", key=key)
                return None
            return entry

    def set(self, key: str, value: Any, ttl_seconds: int | None = None) -> CacheEntry:
        """Insert or overwrite ``key``. ``ttl_seconds=None`` uses the store default."""
        ttl = self._default_ttl if ttl_seconds is None else ttl_seconds
        now = self._clock()
        entry = CacheEntry(
            key=key,
            value=value,
            stored_at=now,
            expires_at=now + timedelta(seconds=ttl),
        )
        with self._lock:
            self._entries[key] = entry
        return entry

    def cleanup_expired(self) -> int:
        """Evict every expired entry. Returns the number removed."""
        now = self._clock()
        with self._lock:
            expired = [key for key, entry in self._entries.items() if not entry.is_live(now)]
            for key in expired:
                del self._entries[key]
            remaining = len(self._entries)
        log.info("cache_cleanup_complete", deleted=len(expired), remaining=remaining)
        return len(expired)
