"""
AES-256-CBC with an HMAC-SHA256 tag (encrypt-then-MAC).

The tag covers the IV and the ciphertext. ``decrypt`` verifies the tag
before the cipher ever sees the ciphertext.
"""

import secrets
from dataclasses import dataclass

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, hmac, padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from atrest.exceptions import CryptoError, IntegrityError

from .kdf import DerivedKey

IV_SIZE = 16  # AES block size
MAC_SIZE = 32  # SHA-256 digest
_BLOCK_BITS = algorithms.AES.block_size


@dataclass(frozen=True)
class SealedPayload:
    """Output of ``encrypt``: everything needed to decrypt besides the key."""

    ciphertext: bytes
    iv: bytes
    mac: bytes


def _mac(key: DerivedKey, iv: bytes, ciphertext: bytes) -> hmac.HMAC:
    h = hmac.HMAC(key.mac_key, hashes.SHA256())
    h.update(iv)
    h.update(ciphertext)
    return h


def encrypt(plaintext: bytes, key: DerivedKey) -> SealedPayload:
    """Encrypt plaintext under a fresh random IV and tag the result."""
    iv = secrets.token_bytes(IV_SIZE)

    padder = padding.PKCS7(_BLOCK_BITS).padder()
    padded = padder.update(plaintext) + padder.finalize()

    encryptor = Cipher(algorithms.AES(key.encryption_key), modes.CBC(iv)).encryptor()
    ciphertext = encryptor.update(padded) + encryptor.finalize()

    mac = _mac(key, iv, ciphertext).finalize()
    return SealedPayload(ciphertext=ciphertext, iv=iv, mac=mac)


def decrypt(ciphertext: bytes, key: DerivedKey, iv: bytes, mac: bytes) -> bytes:
    """Verify the tag, then decrypt.

    Raises:
        IntegrityError: The tag does not match the IV and ciphertext.
    """
    try:
        _mac(key, iv, ciphertext).verify(mac)
    except InvalidSignature:
        raise IntegrityError("MAC verification failed; data was tampered with or the key is wrong") from None

    try:
        decryptor = Cipher(algorithms.AES(key.encryption_key), modes.CBC(iv)).decryptor()
        padded = decryptor.update(ciphertext) + decryptor.finalize()
        unpadder = padding.PKCS7(_BLOCK_BITS).unpadder()
        return unpadder.update(padded) + unpadder.finalize()
    except ValueError as e:
        # Only reachable for payloads that were tagged but never valid CBC output
        raise CryptoError(f"Decryption failed after MAC verification: {e}") from e
