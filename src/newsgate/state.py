"""Gateway state container.

GatewayState is created once at startup (``server.build_state``) and handed to
every route handler. Cache and quota state live here instead of in module
globals, so each test can build a fresh instance.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import httpx

    from newsgate.config import Settings
    from newsgate.coordinator import RequestCoordinator
    from newsgate.fetcher import NewsFetcher
    from newsgate.protocols import CacheProtocol, CipherProtocol, QuotaProtocol


@dataclass
class GatewayState:
    """Holds all shared runtime state. Passed to every route handler."""

    settings: Settings
    cache: CacheProtocol
    quota: QuotaProtocol
    cipher: CipherProtocol
    coordinator: RequestCoordinator
    fetcher: NewsFetcher
    http_client: httpx.AsyncClient | None = None
