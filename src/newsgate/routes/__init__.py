from __future__ import annotations

from newsgate.routes.latest import LATEST_ENGLISH_BUCKET, LATEST_TELUGU_BUCKET
from newsgate.routes.news import NEWS_SOURCES
from newsgate.routes.search import SEARCH_BUCKET

# Every bucket a route can charge; checked against the quota config at startup.
REQUIRED_BUCKETS: frozenset[str] = frozenset(
    {
        *(source.bucket for source in NEWS_SOURCES.values()),
        SEARCH_BUCKET,
        LATEST_TELUGU_BUCKET,
        LATEST_ENGLISH_BUCKET,
    }
)

__all__ = ["REQUIRED_BUCKETS"]
