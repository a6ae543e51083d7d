"""Unit tests for newsgate.config."""

from __future__ import annotations

import pytest

from newsgate.config import DEFAULT_BUCKETS, BucketSettings, CacheSettings, Settings


class TestDefaults:
    def test_cache_ttl_is_twelve_hours(self) -> None:
        assert CacheSettings().ttl_seconds == 43200

    def test_quota_defaults(self) -> None:
        settings = Settings()
        assert settings.quota.limit == 30
        assert settings.quota.window_seconds == 900
        assert set(settings.quota.buckets) == set(DEFAULT_BUCKETS)

    def test_secret_key_unset_by_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("NEWSGATE__CIPHER__SECRET_KEY", raising=False)
        assert Settings().cipher.secret_key is None


class TestEnvironment:
    def test_nested_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("NEWSGATE__SERVER__PORT", "9090")
        monkeypatch.setenv("NEWSGATE__QUOTA__LIMIT", "5")
        settings = Settings()
        assert settings.server.port == 9090
        assert settings.quota.limit == 5

    def test_secret_key_from_env_is_masked(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("NEWSGATE__CIPHER__SECRET_KEY", "ab" * 32)
        settings = Settings()
        assert settings.cipher.secret_key is not None
        assert settings.cipher.secret_key.get_secret_value() == "ab" * 32
        assert "ab" * 32 not in repr(settings)


class TestBucketTtl:
    def test_falls_back_to_cache_default(self) -> None:
        settings = Settings(cache={"ttl_seconds": 600})
        assert settings.bucket_ttl_seconds("telugu") == 600

    def test_per_bucket_override(self) -> None:
        settings = Settings(
            quota={"buckets": {"search": BucketSettings(ttl_seconds=60), "telugu": {}}}
        )
        assert settings.bucket_ttl_seconds("search") == 60
        assert settings.bucket_ttl_seconds("telugu") == settings.cache.ttl_seconds

    def test_unknown_bucket_uses_default(self) -> None:
        assert Settings().bucket_ttl_seconds("nope") == 43200
