"""Handlers for the curated latest-news routes.

``/latestnewstelugu`` proxies an andhrajyothy CMS category listing and
``/latestnewsenglish`` merges several pages of thenewsapi.com top stories.
Both go through the coordinator like every other upstream.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from pydantic import ValidationError

from newsgate.errors import ErrorCode, GatewayError
from newsgate.keys import build_cache_key
from newsgate.models.requests import LatestTeluguInput

if TYPE_CHECKING:
    from newsgate.state import GatewayState

LATEST_TELUGU_BUCKET = "latest_telugu"
LATEST_ENGLISH_BUCKET = "latest_english"


async def handle_telugu(category_id: str | None, state: GatewayState) -> dict:
    log = structlog.get_logger().bind(route="latest_telugu", category_id=category_id)
    log.info("handler_called")

    try:
        validated = (
            LatestTeluguInput(category_id=category_id)
            if category_id is not None
            else LatestTeluguInput()
        )
    except ValidationError as exc:
        raise GatewayError(
            code=ErrorCode.INVALID_INPUT,
            message=str(exc),
            suggestion="Provide 'categoryId' as a positive integer.",
            recoverable=False,
        ) from exc

    cache_key = build_cache_key("latest-telugu", category=validated.category_id)

    async def fetch() -> object:
        return await state.fetcher.category_articles(validated.category_id)

    envelope = await state.coordinator.serve(
        LATEST_TELUGU_BUCKET,
        cache_key,
        state.settings.bucket_ttl_seconds(LATEST_TELUGU_BUCKET),
        fetch,
    )
    return envelope.to_wire()


async def handle_english(state: GatewayState) -> dict:
    structlog.get_logger().bind(route="latest_english").info("handler_called")

    envelope = await state.coordinator.serve(
        LATEST_ENGLISH_BUCKET,
        build_cache_key("latest-english"),
        state.settings.bucket_ttl_seconds(LATEST_ENGLISH_BUCKET),
        state.fetcher.top_stories,
    )
    return envelope.to_wire()
