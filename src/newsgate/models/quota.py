from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class QuotaDecision(BaseModel):
    """Outcome of a single gate check."""

    model_config = ConfigDict(frozen=True)

    allowed: bool
    seconds_remaining: float = 0.0  # Only meaningful when denied


class QuotaSnapshot(BaseModel):
    """Read-only view of one bucket, served by the /rate-limit endpoint."""

    model_config = ConfigDict(frozen=True)

    count: int
    limit: int
    remaining: int
    remaining_seconds: float  # 0 when the bucket is idle or its window has expired
