"""Fetch-or-serve orchestration.

One ``serve`` call walks the stages below and is the only code path that
invokes an upstream fetcher::

    CHECK_CACHE -> CHECK_QUOTA -> FETCH -> SEAL -> STORE -> DONE
                        |           |
                        +-----------+--> FAILED

A cache hit jumps straight to SEAL without touching the quota. A denied quota
check raises QuotaExceededError; any fetcher exception becomes
UpstreamFailureError. Nothing is cached on a failure path, a payload that
cannot be sealed included, and no retries are attempted here.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

import structlog

from newsgate.errors import QuotaExceededError, UpstreamFailureError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from newsgate.models.envelope import EncryptedEnvelope
    from newsgate.models.quota import QuotaSnapshot
    from newsgate.protocols import CacheProtocol, CipherProtocol, Fetcher, QuotaProtocol


class Stage(StrEnum):
    CHECK_CACHE = "check_cache"
    CHECK_QUOTA = "check_quota"
    FETCH = "fetch"
    STORE = "store"
    SEAL = "seal"
    DONE = "done"
    FAILED = "failed"


class RequestCoordinator:
    """Arbitrates between the cache, the quota tracker and upstream fetchers."""

    def __init__(
        self,
        cache: CacheProtocol,
        quota: QuotaProtocol,
        cipher: CipherProtocol,
    ) -> None:
        self._cache = cache
        self._quota = quota
        self._cipher = cipher

    async def serve(
        self,
        bucket: str,
        cache_key: str,
        ttl_seconds: int | None,
        fetcher: Fetcher,
    ) -> EncryptedEnvelope:
        """Return a sealed payload for ``cache_key``, fetching it if needed."""
        log = structlog.get_logger().bind(bucket=bucket, cache_key=cache_key)

        entry = self._cache.get(cache_key)
        if entry is not None:
            log.info("cache_hit", stage=Stage.CHECK_CACHE)
            return self._seal(entry.value, log)

        decision = self._quota.try_acquire(bucket)
        if not decision.allowed:
            log.warning(
                "quota_exceeded",
                stage=Stage.FAILED,
                seconds_remaining=decision.seconds_remaining,
            )
            raise QuotaExceededError(bucket, decision.seconds_remaining)

        log.info("cache_miss_fetching", stage=Stage.FETCH)
        try:
            payload = await fetcher()
        except UpstreamFailureError:
            log.warning("upstream_fetch_failed", stage=Stage.FAILED, exc_info=True)
            raise
        except Exception as exc:
            log.warning("upstream_fetch_failed", stage=Stage.FAILED, exc_info=True)
            raise UpstreamFailureError() from exc

        envelope = self._seal(payload, log)
        self._cache.set(cache_key, payload, ttl_seconds)
        log.debug("cache_stored", stage=Stage.STORE, ttl_seconds=ttl_seconds)
        return envelope

    def _seal(
        self, payload: object, log: structlog.typing.FilteringBoundLogger
    ) -> EncryptedEnvelope:
        envelope = self._cipher.seal(payload)
        log.debug("payload_sealed", stage=Stage.DONE)
        return envelope

    def diagnostics(self, bucket_names: Iterable[str] | None = None) -> dict[str, QuotaSnapshot]:
        """Quota snapshot per bucket; all configured buckets when none are named."""
        names = self._quota.bucket_names if bucket_names is None else bucket_names
        return {name: self._quota.snapshot(name) for name in names}
