"""Cache key construction.

A key is a pure function of a request's semantic identity. Every field takes
part, absent optional fields are left out entirely (so "no page" never
collides with ``page="1"``), and values are percent-encoded so separators
inside free-text queries cannot forge another key.
"""

from __future__ import annotations

from urllib.parse import quote


def _encode(value: object) -> str:
    return quote(str(value), safe="")


def build_cache_key(
    source: str,
    *,
    language: str | None = None,
    query: str | None = None,
    category: str | int | None = None,
    page: str | int | None = None,
) -> str:
    """Return the cache key, e.g. ``news-telugu|language=te|page=2``."""
    fields = {"language": language, "q": query, "category": category, "page": page}
    parts = [_encode(source)]
    parts.extend(f"{name}={_encode(value)}" for name, value in fields.items() if value is not None)
    return "|".join(parts)
