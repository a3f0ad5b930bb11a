"""
Atrest: named byte-blob storage with optional encryption at rest.

Usage:
    from atrest import StorageSettings, create_storage

    storage = create_storage(StorageSettings(root_path="/srv/data", crypto={"secret": "...", "salt": "..."}))
    await storage.save_crypto_file("notes/a.txt", b"hello world")
    await storage.get_crypto_file("notes/a.txt")
"""

__version__ = "0.1.0"

from .config import Config
from .config_schema import BackendType, CryptoConfig, S3Config, StorageSettings
from .exceptions import (
    AtRestError,
    CodecError,
    ConfigurationError,
    CryptoError,
    IntegrityError,
    SecretNotFoundError,
)
from .facade import Storage, create_backend, create_storage
from .storage import (
    StorageError,
    StorageKeyError,
    StoragePermissionError,
    StorageUnavailableError,
    StoredObject,
)

__all__ = [
    "AtRestError",
    "BackendType",
    "CodecError",
    "Config",
    "ConfigurationError",
    "CryptoConfig",
    "CryptoError",
    "IntegrityError",
    "S3Config",
    "SecretNotFoundError",
    "Storage",
    "StorageError",
    "StorageKeyError",
    "StoragePermissionError",
    "StorageSettings",
    "StorageUnavailableError",
    "StoredObject",
    "__version__",
    "create_backend",
    "create_storage",
]
