"""Pydantic models for storage configuration.

``StorageSettings`` is the validated, immutable form of everything the
storage facade needs. Build it once at startup (directly, or through
``Config.settings()``) and pass it to ``create_storage``.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator, model_validator

from atrest.crypto.kdf import DEFAULT_ITERATIONS


class BackendType(str, Enum):
    """Storage media with a working backend."""

    LOCAL = "local"
    S3 = "s3"
    MEMORY = "memory"


_BACKEND_NAMES = frozenset(b.value for b in BackendType)

# Recognized names that have no backend yet
PLACEHOLDER_BACKENDS = frozenset({"azure", "google", "dropbox"})


class CryptoConfig(BaseModel):
    """Inputs to key derivation. Empty values are allowed but insecure."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    secret: str | bytes = Field(default="", repr=False)
    salt: str | bytes = Field(default="", repr=False)
    iterations: int = Field(default=DEFAULT_ITERATIONS, ge=1)


class S3Config(BaseModel):
    """Connection settings, only read when the S3 backend is selected."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    bucket: str = ""
    region: str = ""
    access_key_id: str = ""
    secret_access_key: str = Field(default="", repr=False)
    ssl_enabled: bool = True
    signature_version: str = "v4"
    endpoint_url: str | None = None
    acl: str | None = "private"
    flatten_keys: bool = False


class StorageSettings(BaseModel):
    """Root configuration model."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    root_path: Path = Field(default=Path("~/.atrest-data/storage"), validate_default=True)
    fallback_to_local: bool = False
    backend: BackendType = BackendType.LOCAL
    crypto: CryptoConfig = CryptoConfig()
    s3: S3Config = S3Config()

    @field_validator("root_path", mode="before")
    @classmethod
    def _expand_user(cls, v: Any) -> Any:
        if isinstance(v, (str, Path)):
            return Path(v).expanduser()
        return v

    @field_validator("backend", mode="before")
    @classmethod
    def _resolve_backend(cls, v: Any, info: ValidationInfo) -> Any:
        if isinstance(v, BackendType) or not isinstance(v, str):
            return v
        name = v.strip().lower()
        if name in _BACKEND_NAMES:
            return name

        reason = "is not implemented" if name in PLACEHOLDER_BACKENDS else "is not a known backend"
        if info.data.get("fallback_to_local"):
            logger.warning(f"Storage backend {v!r} {reason}; falling back to local storage")
            return BackendType.LOCAL
        raise ValueError(f"storage backend {v!r} {reason}; choose one of {sorted(_BACKEND_NAMES)}")

    @model_validator(mode="after")
    def _s3_needs_bucket(self) -> StorageSettings:
        if self.backend is BackendType.S3 and not self.s3.bucket:
            raise ValueError("s3 backend selected but s3.bucket is empty")
        return self
