from __future__ import annotations

from pydantic import BaseModel, Field


class NewsInput(BaseModel):
    # newsdata.io pages are opaque cursor tokens, not integers
    page: str | None = Field(default=None, min_length=1, max_length=256)


class SearchInput(BaseModel):
    q: str | None = Field(default=None, max_length=512)
    language: str = Field(default="te", pattern=r"^[a-z]{2}(,[a-z]{2})*$")
    category: str | None = Field(default=None, max_length=128)
    page: str | None = Field(default=None, min_length=1, max_length=256)


class LatestTeluguInput(BaseModel):
    category_id: int = Field(default=1, ge=1)
