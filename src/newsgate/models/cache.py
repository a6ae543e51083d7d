from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel


class CacheEntry(BaseModel):
    """A cached upstream payload."""

    key: str  # Built by newsgate.keys.build_cache_key
    value: Any  # Opaque, never inspected by the gateway
    stored_at: datetime
    expires_at: datetime

    def is_live(self, now: datetime) -> bool:
        return now < self.expires_at
