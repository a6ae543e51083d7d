"""AES-256-CBC envelope encryption for outbound payloads.

Every payload leaves the gateway as ``{"iv": <hex>, "encryptedData": <hex>}``.
The key is loaded once at startup; each ``seal`` call draws a fresh 16-byte IV
from ``os.urandom``. Decryption is the client's job.

The envelope is not authenticated. Clients cannot detect tampering from the
envelope alone; the shape is kept for compatibility with existing clients.
"""

from __future__ import annotations

import base64
import binascii
import json
import os
import re
from typing import Any

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from newsgate.errors import ConfigurationError
from newsgate.models.envelope import EncryptedEnvelope

KEY_BYTES = 32
IV_BYTES = 16

_HEX_KEY = re.compile(r"^[0-9a-fA-F]{64}$")


def parse_secret_key(secret: str | None) -> bytes:
    """Decode a hex or base64 encoded 32-byte key. Raises ConfigurationError."""
    if not secret:
        raise ConfigurationError("Encryption secret key is not configured")
    secret = secret.strip()
    if _HEX_KEY.match(secret):
        return bytes.fromhex(secret)
    try:
        key = base64.b64decode(secret, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ConfigurationError("Encryption secret key is neither hex nor base64") from exc
    if len(key) != KEY_BYTES:
        raise ConfigurationError(
            f"Encryption secret key must decode to {KEY_BYTES} bytes, got {len(key)}"
        )
    return key


def canonical_json(payload: Any) -> str:
    """Stable serialisation: sorted keys, no insignificant whitespace."""
    return json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


class EnvelopeCipher:
    """Seals payloads under a single process-wide key."""

    def __init__(self, key: bytes) -> None:
        if len(key) != KEY_BYTES:
            raise ConfigurationError(f"Encryption key must be {KEY_BYTES} bytes, got {len(key)}")
        self._algorithm = algorithms.AES(key)

    @classmethod
    def from_secret(cls, secret: str | None) -> EnvelopeCipher:
        return cls(parse_secret_key(secret))

    def __repr__(self) -> str:
        return "EnvelopeCipher(key=<redacted>)"

    def seal(self, payload: Any) -> EncryptedEnvelope:
        """Encrypt the canonical JSON form of ``payload`` under a fresh IV."""
        plaintext = canonical_json(payload).encode("utf-8")
        padder = padding.PKCS7(algorithms.AES.block_size).padder()
        padded = padder.update(plaintext) + padder.finalize()

        iv = os.urandom(IV_BYTES)
        encryptor = Cipher(self._algorithm, modes.CBC(iv)).encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()

        return EncryptedEnvelope(iv=iv.hex(), encrypted_data=ciphertext.hex())
