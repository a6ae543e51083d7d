"""Fixed-window call budgets, one per upstream bucket.

Each bucket tracks its own window. The window opens on the first call after
an idle period and is reset lazily, inside the same locked step that checks
and increments the count, so there is no background timer to race with.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

import structlog

from newsgate.cache import utcnow
from newsgate.errors import ConfigurationError
from newsgate.models.quota import QuotaDecision, QuotaSnapshot

if TYPE_CHECKING:
    from collections.abc import Callable, Collection, Iterable, Mapping

    from newsgate.config import BucketSettings

log = structlog.get_logger()


@dataclass(frozen=True)
class BucketPolicy:
    limit: int
    window_seconds: float


@dataclass
class _Bucket:
    policy: BucketPolicy
    count: int = 0
    window_start: datetime | None = None
    lock: threading.Lock = field(default_factory=threading.Lock)

    def window_expired(self, now: datetime) -> bool:
        if self.window_start is None:
            return True
        return now - self.window_start >= timedelta(seconds=self.policy.window_seconds)

    def seconds_remaining(self, now: datetime) -> float:
        if self.window_start is None:
            return 0.0
        window_end = self.window_start + timedelta(seconds=self.policy.window_seconds)
        return max((window_end - now).total_seconds(), 0.0)


class QuotaTracker:
    """Per-bucket fixed-window limiter implementing QuotaProtocol."""

    def __init__(
        self,
        policies: Mapping[str, BucketPolicy],
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        if not policies:
            raise ConfigurationError("At least one quota bucket must be configured")
        for name, policy in policies.items():
            if policy.limit < 0:
                raise ConfigurationError(f"Quota bucket '{name}' has a negative limit")
            if policy.window_seconds <= 0:
                raise ConfigurationError(f"Quota bucket '{name}' needs a positive window")
        self._clock = clock
        self._buckets = {name: _Bucket(policy=policy) for name, policy in policies.items()}

    @property
    def bucket_names(self) -> tuple[str, ...]:
        return tuple(self._buckets)

    def require(self, names: Iterable[str]) -> None:
        """Fail fast on bucket names that routes reference but config does not define."""
        unknown = sorted(set(names) - set(self._buckets))
        if unknown:
            raise ConfigurationError(f"Unknown quota bucket(s): {', '.join(unknown)}")

    def try_acquire(self, bucket_name: str) -> QuotaDecision:
        """Consume one call from ``bucket_name`` if the budget allows it.

        Denied calls do not touch the count. Bucket names are validated at
        wiring time via ``require``, so lookups here never miss.
        """
        bucket = self._buckets[bucket_name]
        with bucket.lock:
            now = self._clock()
            if bucket.window_expired(now):
                bucket.count = 0
                bucket.window_start = now
            if bucket.count < bucket.policy.limit:
                bucket.count += 1
                return QuotaDecision(allowed=True)
            remaining = bucket.seconds_remaining(now)

        log.info("quota_denied", bucket=bucket_name, seconds_remaining=remaining)
        return QuotaDecision(allowed=False, seconds_remaining=remaining)

    def snapshot(self, bucket_name: str) -> QuotaSnapshot:
        """Diagnostic view. An expired window is reported as reset but not mutated."""
        bucket = self._buckets[bucket_name]
        with bucket.lock:
            now = self._clock()
            if bucket.window_expired(now):
                count, remaining_seconds = 0, 0.0
            else:
                count, remaining_seconds = bucket.count, bucket.seconds_remaining(now)
        limit = bucket.policy.limit
        return QuotaSnapshot(
            count=count,
            limit=limit,
            remaining=max(limit - count, 0),
            remaining_seconds=remaining_seconds,
        )


def build_policies(
    default_limit: int,
    default_window_seconds: float,
    overrides: Mapping[str, BucketSettings],
    *,
    bucket_names: Collection[str] = (),
) -> dict[str, BucketPolicy]:
    """Resolve per-bucket policies from the quota settings section.

    Every name in ``bucket_names`` starts at the default limit and window;
    configured entries override those fields and may add further buckets.
    """
    policies = {
        name: BucketPolicy(limit=default_limit, window_seconds=default_window_seconds)
        for name in bucket_names
    }
    for name, override in overrides.items():
        policies[name] = BucketPolicy(
            limit=default_limit if override.limit is None else override.limit,
            window_seconds=(
                default_window_seconds
                if override.window_seconds is None
                else override.window_seconds
            ),
        )
    return policies
