"""Background scheduler coroutine for eager cache eviction."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from newsgate.state import GatewayState

log = structlog.get_logger()


async def run_cache_cleanup_scheduler(state: GatewayState) -> None:
    """Evict expired cache entries on the configured interval until cancelled.

    Readers already skip expired entries; this only reclaims memory held by
    keys that are never requested again.
    """
    interval_seconds = state.settings.cache.cleanup_interval_seconds
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            state.cache.cleanup_expired()
        except Exception:
            log.warning("cache_cleanup_error", exc_info=True)
