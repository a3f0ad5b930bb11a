"""
Storage facade.

Composes a storage backend with the encryption pipeline:

    save_crypto_file: compress -> encrypt -> pack -> backend.put
    get_crypto_file:  backend.get -> unpack -> derive key -> decrypt -> decompress

Key derivation, compression and encryption are CPU-bound, so they run in
the default executor instead of on the event loop.
"""

from __future__ import annotations

import asyncio
from typing import Any

from loguru import logger

from atrest.config_schema import BackendType, CryptoConfig, StorageSettings
from atrest.crypto import (
    compress,
    decompress,
    decrypt,
    derive_key,
    encrypt,
    estimate_compression_ratio,
    pack,
    unpack,
)
from atrest.storage import (
    LocalStorage,
    MemoryStorage,
    S3Storage,
    StorageBackend,
    StoredObject,
    create_s3_client,
)

Data = bytes | bytearray | memoryview | str


def _to_bytes(data: Data) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8")
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)
    raise TypeError(f"Expected bytes or str, got {type(data).__name__}")


class Storage:
    """Plain and encrypted file operations over one backend.

    Holds nothing but the backend and the crypto configuration, both set at
    construction. Keys are never cached; every encrypted call re-derives it.
    """

    def __init__(self, backend: StorageBackend, crypto: CryptoConfig | None = None):
        self.backend = backend
        self.crypto = crypto or CryptoConfig()

    async def save_file(self, key: str, data: Data) -> StoredObject:
        """Store data as-is."""
        return await self.backend.put(key, _to_bytes(data))

    async def get_file(self, key: str) -> bytes:
        """Read data stored with ``save_file`` (or the raw envelope of an encrypted file)."""
        return await self.backend.get(key)

    async def remove_file(self, key: str) -> None:
        """Delete the blob under key. Raises StorageKeyError if nothing is stored there."""
        await self.backend.delete(key)

    async def save_crypto_file(self, key: str, data: Data) -> StoredObject:
        """Compress, encrypt and store data."""
        plaintext = _to_bytes(data)
        loop = asyncio.get_running_loop()
        envelope = await loop.run_in_executor(None, self._seal, plaintext)
        logger.debug(f"sealed {key}: {len(plaintext)} -> {len(envelope)} bytes")
        return await self.backend.put(key, envelope)

    async def get_crypto_file(self, key: str) -> bytes:
        """Fetch, verify and decrypt data stored with ``save_crypto_file``.

        Raises:
            IntegrityError: The stored envelope was modified or the key is wrong.
            CodecError: The stored blob is not a readable envelope.
        """
        blob = await self.backend.get(key)
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._open, blob)

    def _seal(self, plaintext: bytes) -> bytes:
        compressed = compress(plaintext)
        ratio = estimate_compression_ratio(len(plaintext), len(compressed))
        logger.debug(f"compressed {len(plaintext)} -> {len(compressed)} bytes ({ratio:.1f}%)")

        key = derive_key(self.crypto.secret, self.crypto.salt, self.crypto.iterations)
        sealed = encrypt(compressed, key)
        return pack(sealed.ciphertext, sealed.iv, sealed.mac)

    def _open(self, blob: bytes) -> bytes:
        envelope = unpack(blob)
        key = derive_key(self.crypto.secret, self.crypto.salt, self.crypto.iterations)
        compressed = decrypt(envelope.ciphertext, key, envelope.iv, envelope.mac)
        return decompress(compressed)


def create_backend(settings: StorageSettings, s3_client: Any = None) -> StorageBackend:
    """Build the backend selected by ``settings.backend``.

    For S3, ``s3_client`` is used when given; otherwise one is built from
    ``settings.s3``.
    """
    if settings.backend is BackendType.S3:
        client = s3_client if s3_client is not None else create_s3_client(settings.s3)
        return S3Storage(
            client,
            settings.s3.bucket,
            acl=settings.s3.acl,
            flatten_keys=settings.s3.flatten_keys,
        )
    if settings.backend is BackendType.MEMORY:
        return MemoryStorage()
    return LocalStorage(settings.root_path)


def create_storage(settings: StorageSettings | None = None, s3_client: Any = None) -> Storage:
    """Create a ``Storage`` for the configured backend and crypto settings."""
    settings = settings or StorageSettings()
    backend = create_backend(settings, s3_client=s3_client)
    logger.info(f"Using {backend.name} storage backend")
    return Storage(backend, settings.crypto)
