"""Upstream news fetchers.

All network I/O goes through a single NewsFetcher instance shared across
requests. The fetcher receives an httpx.AsyncClient via constructor
injection; the server lifespan owns the client lifecycle. Payloads are
returned as decoded JSON and never inspected beyond what is needed to merge
paged results.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

import httpx
import structlog

from newsgate.errors import UpstreamFailureError

if TYPE_CHECKING:
    from pydantic import SecretStr

    from newsgate.config import UpstreamSettings

log = structlog.get_logger()


def build_http_client(settings: UpstreamSettings) -> httpx.AsyncClient:
    """Create the shared httpx client. Called once at startup."""
    return httpx.AsyncClient(
        follow_redirects=True,
        timeout=httpx.Timeout(settings.timeout_seconds),
        headers={"User-Agent": "newsgate/1.0"},
        limits=httpx.Limits(
            max_connections=20,
            max_keepalive_connections=10,
        ),
    )


def _secret(value: SecretStr | None) -> str | None:
    return value.get_secret_value() if value is not None else None


class NewsFetcher:
    """Thin clients for newsdata.io, thenewsapi.com and the andhrajyothy feed."""

    def __init__(self, client: httpx.AsyncClient, settings: UpstreamSettings) -> None:
        self._client = client
        self._settings = settings

    async def latest(
        self,
        api_key: SecretStr | None,
        *,
        language: str,
        query: str | None = None,
        category: str | None = None,
        page: str | None = None,
    ) -> Any:
        """newsdata.io ``/latest``. Unset parameters are left out of the query string."""
        params = {
            "apikey": _secret(api_key),
            "language": language,
            "q": query,
            "category": category,
            "page": page,
            "country": self._settings.country,
            "removeduplicate": 1,
        }
        return await self._get_json(
            "newsdata",
            self._settings.newsdata_url,
            {name: value for name, value in params.items() if value is not None},
        )

    async def top_stories(self) -> list[Any]:
        """thenewsapi.com top stories, configured pages fetched concurrently and merged."""
        params = {
            "api_token": _secret(self._settings.thenewsapi_token),
            "locale": self._settings.thenewsapi_locale,
            "limit": self._settings.thenewsapi_limit,
        }
        pages = await asyncio.gather(
            *(
                self._get_json(
                    "thenewsapi",
                    self._settings.thenewsapi_url,
                    {**params, "page": page},
                )
                for page in self._settings.thenewsapi_pages
            )
        )
        return [article for body in pages for article in body.get("data", [])]

    async def category_articles(self, category_id: int) -> Any:
        """Article listing for one andhrajyothy CMS category."""
        url = f"{self._settings.andhrajyothy_url.rstrip('/')}/{category_id}"
        return await self._get_json("andhrajyothy", url, {})

    async def _get_json(self, source: str, url: str, params: dict[str, Any]) -> Any:
        """GET ``url`` and decode JSON.

        Raises UpstreamFailureError on network errors, non-2xx responses and
        undecodable bodies. Messages name the source only: query strings carry
        API keys and must not reach logs or clients.
        """
        try:
            response = await self._client.get(url, params=params)
        except httpx.HTTPError as exc:
            raise UpstreamFailureError(f"Network error fetching from {source}") from exc

        if not response.is_success:
            log.warning("upstream_http_error", source=source, status_code=response.status_code)
            raise UpstreamFailureError(f"HTTP {response.status_code} from {source}")

        try:
            body = response.json()
        except ValueError as exc:
            raise UpstreamFailureError(f"Invalid JSON from {source}") from exc

        log.info("fetch_complete", source=source, content_length=len(response.content))
        return body
