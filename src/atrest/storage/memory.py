"""In-process storage backend, mainly for tests and throwaway data."""

from loguru import logger

from .base import StorageBackend, StorageKeyError, StoredObject, normalize_key


class MemoryStorage(StorageBackend):
    """Keeps blobs in a dict keyed by normalized storage key."""

    name = "memory"

    def __init__(self):
        self._blobs: dict[str, bytes] = {}

    async def put(self, key: str, data: bytes) -> StoredObject:
        name = normalize_key(key)
        self._blobs[name] = bytes(data)
        logger.debug(f"memory put {name} ({len(data)} bytes)")
        return StoredObject(key=name, size=len(data), location=f"memory://{name}")

    async def get(self, key: str) -> bytes:
        name = normalize_key(key)
        try:
            return self._blobs[name]
        except KeyError:
            raise StorageKeyError(f"Key not found: {key}") from None

    async def delete(self, key: str) -> None:
        name = normalize_key(key)
        if self._blobs.pop(name, None) is None:
            raise StorageKeyError(f"Key not found: {key}")
        logger.debug(f"memory delete {name}")

    async def exists(self, key: str) -> bool:
        return normalize_key(key) in self._blobs
