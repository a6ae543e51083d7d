"""Handler for ``GET /search``."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from pydantic import ValidationError

from newsgate.errors import ErrorCode, GatewayError
from newsgate.keys import build_cache_key
from newsgate.models.requests import SearchInput

if TYPE_CHECKING:
    from newsgate.state import GatewayState

SEARCH_BUCKET = "search"


async def handle(
    q: str | None,
    language: str | None,
    category: str | None,
    page: str | None,
    state: GatewayState,
) -> dict:
    log = structlog.get_logger().bind(route="search")
    log.info("handler_called", language=language, category=category)

    try:
        validated = SearchInput(
            q=q,
            category=category,
            page=page,
            **({"language": language} if language else {}),
        )
    except ValidationError as exc:
        raise GatewayError(
            code=ErrorCode.INVALID_INPUT,
            message=str(exc),
            suggestion=(
                "Use two-letter language codes (comma separated), a query up to "
                "512 characters, and a page token from a previous response."
            ),
            recoverable=False,
        ) from exc

    cache_key = build_cache_key(
        "search",
        language=validated.language,
        query=validated.q,
        category=validated.category,
        page=validated.page,
    )

    async def fetch() -> object:
        return await state.fetcher.latest(
            state.settings.upstream.search_key,
            language=validated.language,
            query=validated.q,
            category=validated.category,
            page=validated.page,
        )

    envelope = await state.coordinator.serve(
        SEARCH_BUCKET,
        cache_key,
        state.settings.bucket_ttl_seconds(SEARCH_BUCKET),
        fetch,
    )
    return envelope.to_wire()
