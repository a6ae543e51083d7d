from __future__ import annotations

from newsgate.models.cache import CacheEntry
from newsgate.models.envelope import EncryptedEnvelope
from newsgate.models.quota import QuotaDecision, QuotaSnapshot
from newsgate.models.requests import LatestTeluguInput, NewsInput, SearchInput

__all__ = [
    # cache
    "CacheEntry",
    # quota
    "QuotaDecision",
    "QuotaSnapshot",
    # envelope
    "EncryptedEnvelope",
    # requests
    "NewsInput",
    "SearchInput",
    "LatestTeluguInput",
]
