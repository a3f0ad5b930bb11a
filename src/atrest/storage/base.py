"""
Abstract base class for storage backends.

Provides a unified async put/get/delete interface over byte blobs for the
local filesystem, S3 and an in-memory store. Backends never compress or
encrypt; that is the job of ``atrest.crypto``.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from atrest.exceptions import AtRestError


@dataclass(frozen=True)
class StoredObject:
    """Reference to a blob a backend has just written."""

    key: str
    size: int
    location: str


class StorageBackend(ABC):
    """Abstract base class for storage backends."""

    name: str = "abstract"

    @abstractmethod
    async def put(self, key: str, data: bytes) -> StoredObject:
        """Write data under key, replacing any existing blob."""

    @abstractmethod
    async def get(self, key: str) -> bytes:
        """Read data from storage. Raises StorageKeyError if not found."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Delete an object. Raises StorageKeyError if not found."""

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Check if a key exists in storage."""


def normalize_key(key: str) -> str:
    """Return the canonical slash-separated form of a logical key.

    Leading slashes are dropped so ``/notes/a.txt`` and ``notes/a.txt`` address
    the same blob on every backend. Keys that could escape a namespace are
    rejected with StoragePermissionError.
    """
    if not isinstance(key, str):
        raise StoragePermissionError(f"Storage key must be a string, got {type(key).__name__}.")
    raw_key = key.strip().lstrip("/")
    if not raw_key:
        raise StoragePermissionError("Storage key cannot be empty.")
    if "\x00" in raw_key:
        raise StoragePermissionError("Storage key cannot contain null bytes.")
    if "\\" in raw_key:
        raise StoragePermissionError("Storage key cannot contain backslashes. Use '/' separators.")

    segments = [s for s in raw_key.split("/") if s]
    if any(s in (".", "..") for s in segments):
        raise StoragePermissionError(f"Unsafe storage key '{key}': relative segments are not allowed.")
    return "/".join(segments)


class StorageError(AtRestError):
    """Base exception for storage errors."""


class StorageKeyError(StorageError, KeyError):
    """Raised when a storage key doesn't exist."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep plain messages
        return Exception.__str__(self)


class StorageUnavailableError(StorageError):
    """Raised when the backend cannot be reached or refuses the operation."""


class StoragePermissionError(StorageUnavailableError):
    """Raised when storage operation is not permitted."""
