"""Protocol interfaces for swappable components.

The coordinator and GatewayState reference these protocols, not the concrete
implementations, so tests can use lightweight fakes and a shared backend
could replace the in-memory stores without touching the coordinator.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from newsgate.models.cache import CacheEntry
    from newsgate.models.envelope import EncryptedEnvelope
    from newsgate.models.quota import QuotaDecision, QuotaSnapshot

    # Zero-argument coroutine producing the upstream payload
    Fetcher = Callable[[], Awaitable[Any]]


class CacheProtocol(Protocol):
    """Interface for the payload cache."""

    @property
    def default_ttl_seconds(self) -> int: ...

    def get(self, key: str) -> CacheEntry | None: ...

    def set(self, key: str, value: Any, ttl_seconds: int | None = None) -> CacheEntry: ...

    def cleanup_expired(self) -> int: ...


class QuotaProtocol(Protocol):
    """Interface for the per-bucket call budget."""

    @property
    def bucket_names(self) -> tuple[str, ...]: ...

    def try_acquire(self, bucket_name: str) -> QuotaDecision: ...

    def snapshot(self, bucket_name: str) -> QuotaSnapshot: ...


class CipherProtocol(Protocol):
    """Interface for the outbound envelope cipher."""

    def seal(self, payload: Any) -> EncryptedEnvelope: ...
