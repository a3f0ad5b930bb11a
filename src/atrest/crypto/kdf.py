"""
Password-based key derivation.

PBKDF2-HMAC-SHA256 stretches a (secret, salt) pair into 64 bytes, split into
an AES-256 key and an independent HMAC-SHA256 key. Derivation is
deterministic and nothing is cached: the key is recomputed on every call.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from loguru import logger

DEFAULT_ITERATIONS = 100_000
ENCRYPTION_KEY_SIZE = 32  # AES-256
MAC_KEY_SIZE = 32  # HMAC-SHA256


@dataclass(frozen=True)
class DerivedKey:
    """Symmetric key material for one encrypt or decrypt call."""

    encryption_key: bytes = field(repr=False)
    mac_key: bytes = field(repr=False)


def _as_bytes(value: str | bytes) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    return bytes(value)


def derive_key(secret: str | bytes, salt: str | bytes, iterations: int = DEFAULT_ITERATIONS) -> DerivedKey:
    """Derive the encryption and MAC keys from a secret and salt.

    An empty secret or salt is accepted but yields a key anyone can
    reproduce, so it is logged as a warning.
    """
    secret_bytes = _as_bytes(secret)
    salt_bytes = _as_bytes(salt)
    if not secret_bytes:
        logger.warning("Deriving a key from an empty secret; encrypted data is not protected")
    if not salt_bytes:
        logger.warning("Deriving a key with an empty salt")

    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=ENCRYPTION_KEY_SIZE + MAC_KEY_SIZE,
        salt=salt_bytes,
        iterations=iterations,
    )
    material = kdf.derive(secret_bytes)
    return DerivedKey(encryption_key=material[:ENCRYPTION_KEY_SIZE], mac_key=material[ENCRYPTION_KEY_SIZE:])
