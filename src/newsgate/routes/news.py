"""Handler for the per-language latest-news routes (``/<source>/news``).

Receives GatewayState, builds the cache key and fetcher for the source, and
returns the sealed envelope as a dict. No Starlette imports; server.py
handles the HTTP wiring.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog
from pydantic import ValidationError

from newsgate.errors import ErrorCode, GatewayError
from newsgate.keys import build_cache_key
from newsgate.models.requests import NewsInput

if TYPE_CHECKING:
    from newsgate.state import GatewayState


@dataclass(frozen=True)
class NewsSource:
    bucket: str
    language: str
    key_field: str  # Attribute of UpstreamSettings holding the newsdata.io key


NEWS_SOURCES: dict[str, NewsSource] = {
    "telugu": NewsSource(bucket="telugu", language="te", key_field="telugu_key"),
    # Second newsdata.io key for the same feed; shares the telugu budget
    "telugutwo": NewsSource(bucket="telugu", language="te", key_field="telugutwo_key"),
    "english": NewsSource(bucket="english", language="en", key_field="english_key"),
}


async def handle(source: str, page: str | None, state: GatewayState) -> dict:
    """Handle ``GET /<source>/news``."""
    log = structlog.get_logger().bind(route="news", source=source)
    log.info("handler_called")

    news_source = NEWS_SOURCES[source]
    try:
        validated = NewsInput(page=page)
    except ValidationError as exc:
        raise GatewayError(
            code=ErrorCode.INVALID_INPUT,
            message=str(exc),
            suggestion="Pass the nextPage token returned by a previous response as 'page'.",
            recoverable=False,
        ) from exc

    cache_key = build_cache_key(
        f"news-{source}", language=news_source.language, page=validated.page
    )
    api_key = getattr(state.settings.upstream, news_source.key_field)

    async def fetch() -> object:
        return await state.fetcher.latest(
            api_key, language=news_source.language, page=validated.page
        )

    envelope = await state.coordinator.serve(
        news_source.bucket,
        cache_key,
        state.settings.bucket_ttl_seconds(news_source.bucket),
        fetch,
    )
    return envelope.to_wire()
