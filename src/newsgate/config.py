"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Environment variables  (NEWSGATE__CIPHER__SECRET_KEY=...)
  2. newsgate.yaml          (searched in cwd, then platform config dir)
  3. Hardcoded defaults

Everything except ``cipher.secret_key`` has a default. Settings are read once
at startup; there is no hot reload.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import platformdirs
from pydantic import BaseModel, Field, SecretStr
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

DEFAULT_BUCKETS = ("telugu", "english", "search", "latest_telugu", "latest_english")


def _find_config_file() -> str | None:
    """Return the path of the first newsgate.yaml found, or None."""
    candidates = [
        Path("newsgate.yaml"),
        Path(platformdirs.user_config_dir("newsgate")) / "newsgate.yaml",
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class ServerSettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = 3031
    cors_origins: list[str] = ["*"]


class CacheSettings(BaseModel):
    ttl_seconds: int = Field(default=43200, gt=0)  # 12 hours
    cleanup_interval_seconds: int = Field(default=3600, gt=0)


class BucketSettings(BaseModel):
    """Per-bucket overrides. Unset fields fall back to the quota/cache defaults."""

    limit: int | None = Field(default=None, ge=0)
    window_seconds: int | None = Field(default=None, gt=0)
    ttl_seconds: int | None = Field(default=None, gt=0)


class QuotaSettings(BaseModel):
    limit: int = Field(default=30, ge=0)
    window_seconds: int = Field(default=900, gt=0)  # 15 minutes
    buckets: dict[str, BucketSettings] = Field(
        default_factory=lambda: {name: BucketSettings() for name in DEFAULT_BUCKETS}
    )


class CipherSettings(BaseModel):
    # 32-byte AES-256 key, hex (64 chars) or base64 encoded
    secret_key: SecretStr | None = None


class UpstreamSettings(BaseModel):
    newsdata_url: str = "https://newsdata.io/api/1/latest"
    thenewsapi_url: str = "https://api.thenewsapi.com/v1/news/top"
    andhrajyothy_url: str = "https://www.andhrajyothy.com/cms/articles/category"
    country: str = "in"
    timeout_seconds: float = Field(default=30.0, gt=0)

    # newsdata.io keys, one per route
    telugu_key: SecretStr | None = None
    telugutwo_key: SecretStr | None = None
    english_key: SecretStr | None = None
    search_key: SecretStr | None = None

    # thenewsapi.com top stories
    thenewsapi_token: SecretStr | None = None
    thenewsapi_locale: str = "in"
    thenewsapi_limit: int = Field(default=3, ge=1)
    thenewsapi_pages: list[int] = [1, 2, 3]


class LoggingSettings(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "json"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: NEWSGATE__SERVER__PORT=9090
        env_prefix="NEWSGATE__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
    )

    server: ServerSettings = ServerSettings()
    cache: CacheSettings = CacheSettings()
    quota: QuotaSettings = QuotaSettings()
    cipher: CipherSettings = CipherSettings()
    upstream: UpstreamSettings = UpstreamSettings()
    logging: LoggingSettings = LoggingSettings()

    def bucket_ttl_seconds(self, bucket: str) -> int:
        """Cache TTL for payloads fetched through ``bucket``."""
        override = self.quota.buckets.get(bucket)
        if override is not None and override.ttl_seconds is not None:
            return override.ttl_seconds
        return self.cache.ttl_seconds

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
        **kwargs: Any,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,  # Constructor args (highest priority)
            env_settings,  # Environment variables
            YamlConfigSettingsSource(settings_cls),  # YAML file
            # dotenv and file secrets intentionally excluded
        )
