"""
Storage backends for atrest.

Provides async byte-blob storage behind a pluggable backend interface
(local filesystem by default, S3, or in-memory).
"""

from .base import (
    StorageBackend,
    StorageError,
    StorageKeyError,
    StoragePermissionError,
    StorageUnavailableError,
    StoredObject,
    normalize_key,
)
from .local import LocalStorage
from .memory import MemoryStorage
from .s3 import S3Storage, create_s3_client

__all__ = [
    "LocalStorage",
    "MemoryStorage",
    "S3Storage",
    "StorageBackend",
    "StorageError",
    "StorageKeyError",
    "StoragePermissionError",
    "StorageUnavailableError",
    "StoredObject",
    "create_s3_client",
    "normalize_key",
]
