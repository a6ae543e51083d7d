"""Shared test fixtures for the newsgate test suite."""

from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

import pytest
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from newsgate.cache import CacheStore
from newsgate.cipher import EnvelopeCipher
from newsgate.config import Settings
from newsgate.models.envelope import EncryptedEnvelope
from newsgate.quota import BucketPolicy, QuotaTracker

if TYPE_CHECKING:
    from collections.abc import Callable

TEST_SECRET_KEY = "000102030405060708090a0b0c0d0e0f101112131415161718191a1b1c1d1e1f"


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 1, 1, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


def open_envelope(envelope: EncryptedEnvelope | dict[str, str]) -> Any:
    """Client-side decryption, as a consumer of the gateway would do it."""
    if isinstance(envelope, EncryptedEnvelope):
        envelope = envelope.to_wire()
    iv = bytes.fromhex(envelope["iv"])
    ciphertext = bytes.fromhex(envelope["encryptedData"])
    decryptor = Cipher(algorithms.AES(bytes.fromhex(TEST_SECRET_KEY)), modes.CBC(iv)).decryptor()
    padded = decryptor.update(ciphertext) + decryptor.finalize()
    unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
    return json.loads(unpadder.update(padded) + unpadder.finalize())


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def decrypt() -> Callable[[EncryptedEnvelope | dict[str, str]], Any]:
    return open_envelope


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        cipher={"secret_key": TEST_SECRET_KEY},
        upstream={
            "telugu_key": "key-telugu",
            "telugutwo_key": "key-telugutwo",
            "english_key": "key-english",
            "search_key": "key-search",
            "thenewsapi_token": "token-thenewsapi",
        },
    )


@pytest.fixture()
def cipher() -> EnvelopeCipher:
    return EnvelopeCipher.from_secret(TEST_SECRET_KEY)


@pytest.fixture()
def cache(clock: FakeClock) -> CacheStore:
    return CacheStore(clock=clock)


@pytest.fixture()
def quota(clock: FakeClock) -> QuotaTracker:
    """Two buckets: ``news`` (5 calls / 15 min) and ``search`` (1 call / 15 min)."""
    return QuotaTracker(
        {
            "news": BucketPolicy(limit=5, window_seconds=900),
            "search": BucketPolicy(limit=1, window_seconds=900),
        },
        clock=clock,
    )
