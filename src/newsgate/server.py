"""HTTP server entrypoint.

Responsibilities (and nothing more):
- Configure structlog
- Build GatewayState once, failing fast on configuration errors
- Register routes and serialise GatewayError into JSON error responses
- Run the cache cleanup scheduler for the server's lifetime
- Start uvicorn
"""

from __future__ import annotations

import asyncio
import logging
import math
import sys
from contextlib import asynccontextmanager, suppress
from typing import TYPE_CHECKING

import structlog
import uvicorn
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse
from starlette.routing import Route

import newsgate.routes.latest as r_latest
import newsgate.routes.news as r_news
import newsgate.routes.rate_limit as r_rate_limit
import newsgate.routes.search as r_search
from newsgate import __version__
from newsgate.cache import CacheStore, utcnow
from newsgate.cipher import EnvelopeCipher
from newsgate.config import Settings
from newsgate.coordinator import RequestCoordinator
from newsgate.errors import ConfigurationError, ErrorCode, GatewayError, QuotaExceededError
from newsgate.fetcher import NewsFetcher, build_http_client
from newsgate.quota import QuotaTracker, build_policies
from newsgate.routes import REQUIRED_BUCKETS
from newsgate.schedulers import run_cache_cleanup_scheduler
from newsgate.state import GatewayState

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Awaitable, Callable
    from datetime import datetime

    from starlette.requests import Request

log = structlog.get_logger()


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(settings: Settings) -> None:
    """Configure structlog. Called once at startup before any log statements."""
    log_level = logging.getLevelNamesMapping()[settings.logging.level]

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if settings.logging.format == "json":
        processors = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [*shared_processors, structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


# ---------------------------------------------------------------------------
# State wiring
# ---------------------------------------------------------------------------

_UPSTREAM_KEY_FIELDS = (
    "telugu_key",
    "telugutwo_key",
    "english_key",
    "search_key",
    "thenewsapi_token",
)


def build_state(
    settings: Settings,
    *,
    clock: Callable[[], datetime] = utcnow,
) -> GatewayState:
    """Wire every shared component. Raises ConfigurationError on bad config."""
    cipher = EnvelopeCipher.from_secret(
        settings.cipher.secret_key.get_secret_value() if settings.cipher.secret_key else None
    )

    quota = QuotaTracker(
        build_policies(
            settings.quota.limit,
            settings.quota.window_seconds,
            settings.quota.buckets,
            bucket_names=REQUIRED_BUCKETS,
        ),
        clock=clock,
    )
    quota.require(REQUIRED_BUCKETS)

    cache = CacheStore(settings.cache.ttl_seconds, clock=clock)

    for field_name in _UPSTREAM_KEY_FIELDS:
        if getattr(settings.upstream, field_name) is None:
            log.warning("upstream_key_missing", setting=f"upstream.{field_name}")

    http_client = build_http_client(settings.upstream)
    return GatewayState(
        settings=settings,
        cache=cache,
        quota=quota,
        cipher=cipher,
        coordinator=RequestCoordinator(cache, quota, cipher),
        fetcher=NewsFetcher(http_client, settings.upstream),
        http_client=http_client,
    )


# ---------------------------------------------------------------------------
# Error serialisation and route endpoints
# ---------------------------------------------------------------------------

_STATUS_BY_CODE: dict[ErrorCode, int] = {
    ErrorCode.QUOTA_EXCEEDED: 429,
    ErrorCode.UPSTREAM_FAILURE: 500,
    ErrorCode.INVALID_INPUT: 400,
}


def _serialise_error(error: GatewayError) -> JSONResponse:
    """Convert a GatewayError to its JSON response."""
    headers = {}
    if isinstance(error, QuotaExceededError):
        headers["Retry-After"] = str(max(math.ceil(error.seconds_remaining), 1))
    return JSONResponse(
        error.to_dict(),
        status_code=_STATUS_BY_CODE[error.code],
        headers=headers,
    )


async def _respond(route: str, call: Awaitable[dict]) -> JSONResponse:
    try:
        return JSONResponse(await call)
    except GatewayError as exc:
        log.warning(
            "route_error",
            route=route,
            code=exc.code,
            message=exc.message,
            recoverable=exc.recoverable,
        )
        return _serialise_error(exc)
    except Exception:
        log.error("route_unexpected_error", route=route, exc_info=True)
        raise


def _news_endpoint(source: str) -> Callable[[Request], Awaitable[JSONResponse]]:
    async def endpoint(request: Request) -> JSONResponse:
        state: GatewayState = request.app.state.gateway
        page = request.query_params.get("page")
        return await _respond(f"{source}/news", r_news.handle(source, page, state))

    return endpoint


async def search(request: Request) -> JSONResponse:
    state: GatewayState = request.app.state.gateway
    params = request.query_params
    return await _respond(
        "search",
        r_search.handle(
            params.get("q"),
            params.get("language"),
            params.get("category"),
            params.get("page"),
            state,
        ),
    )


async def latest_telugu(request: Request) -> JSONResponse:
    state: GatewayState = request.app.state.gateway
    category_id = request.query_params.get("categoryId")
    return await _respond("latestnewstelugu", r_latest.handle_telugu(category_id, state))


async def latest_english(request: Request) -> JSONResponse:
    state: GatewayState = request.app.state.gateway
    return await _respond("latestnewsenglish", r_latest.handle_english(state))


async def rate_limit(request: Request) -> JSONResponse:
    state: GatewayState = request.app.state.gateway
    return await _respond("rate-limit", r_rate_limit.handle(state))


async def health(request: Request) -> JSONResponse:
    return JSONResponse({"status": "ok", "version": __version__})


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: Starlette) -> AsyncGenerator[None, None]:
    """Own background tasks and the HTTP client for the server's lifetime."""
    state: GatewayState = app.state.gateway
    cache_cleanup_task = asyncio.create_task(run_cache_cleanup_scheduler(state))

    log.info(
        "server_started",
        version=__version__,
        buckets=list(state.quota.bucket_names),
        cache_ttl_seconds=state.settings.cache.ttl_seconds,
    )

    try:
        yield
    finally:
        cache_cleanup_task.cancel()
        with suppress(asyncio.CancelledError):
            await cache_cleanup_task
        if state.http_client is not None:
            await state.http_client.aclose()
        log.info("server_stopping")


def create_app(state: GatewayState) -> Starlette:
    routes = [
        *(Route(f"/{source}/news", _news_endpoint(source)) for source in r_news.NEWS_SOURCES),
        Route("/search", search),
        Route("/latestnewstelugu", latest_telugu),
        Route("/latestnewsenglish", latest_english),
        Route("/rate-limit", rate_limit),
        Route("/health", health),
    ]
    middleware = [
        Middleware(
            CORSMiddleware,
            allow_origins=state.settings.server.cors_origins,
            allow_methods=["GET"],
        )
    ]
    app = Starlette(routes=routes, middleware=middleware, lifespan=lifespan)
    app.state.gateway = state
    return app


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------


def main() -> None:
    settings = Settings()
    _setup_logging(settings)

    log.info("server_starting", version=__version__)
    try:
        state = build_state(settings)
    except ConfigurationError as exc:
        log.error("configuration_error", message=str(exc))
        raise SystemExit(1) from exc

    uvicorn.run(
        create_app(state),
        host=settings.server.host,
        port=settings.server.port,
        log_config=None,  # Disable uvicorn's default logging; structlog handles it
    )


if __name__ == "__main__":
    main()
