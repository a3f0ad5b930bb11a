"""
Local filesystem storage backend.

Provides async file operations under a configured root directory.
"""

from pathlib import Path

import aiofiles
import aiofiles.os
import aiofiles.tempfile
from loguru import logger

from .base import (
    StorageBackend,
    StorageKeyError,
    StoragePermissionError,
    StorageUnavailableError,
    StoredObject,
    normalize_key,
)


class LocalStorage(StorageBackend):
    """Local filesystem storage backend."""

    name = "local"

    def __init__(self, root_path: str | Path = "~/.atrest-data/storage"):
        self.root_path = Path(root_path).expanduser().resolve()

    def _get_full_path(self, key: str) -> Path:
        """Resolve a storage key to an absolute path under ``root_path``.

        Rejects keys that resolve outside ``root_path`` (e.g. through a
        symlinked directory).
        """
        full_path = (self.root_path / normalize_key(key)).resolve()
        try:
            full_path.relative_to(self.root_path)
        except ValueError as e:
            raise StoragePermissionError(f"Unsafe storage key '{key}': path traversal is not allowed.") from e
        return full_path

    async def put(self, key: str, data: bytes) -> StoredObject:
        """Write data to a temp file beside the target, then rename it into place.

        Readers see either the previous blob or the complete new one, and
        concurrent writers to the same key never interleave.
        """
        path = self._get_full_path(key)
        tmp_name: str | None = None

        try:
            await aiofiles.os.makedirs(path.parent, exist_ok=True)
            async with aiofiles.tempfile.NamedTemporaryFile(
                "wb", dir=path.parent, prefix=f".{path.name}.", suffix=".tmp", delete=False
            ) as f:
                tmp_name = f.name
                await f.write(data)
            await aiofiles.os.replace(tmp_name, path)
            tmp_name = None
        except PermissionError as e:
            raise StoragePermissionError(f"Cannot write to {path}: {e}") from e
        except OSError as e:
            raise StorageUnavailableError(f"Cannot write to {path}: {e}") from e
        finally:
            if tmp_name is not None:
                await self._discard(tmp_name)

        logger.debug(f"local put {key} ({len(data)} bytes)")
        return StoredObject(key=normalize_key(key), size=len(data), location=str(path))

    @staticmethod
    async def _discard(tmp_name: str) -> None:
        try:
            await aiofiles.os.remove(tmp_name)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Could not remove temp file {tmp_name}: {e}")

    async def get(self, key: str) -> bytes:
        path = self._get_full_path(key)

        try:
            async with aiofiles.open(path, "rb") as f:
                data = await f.read()
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError) as e:
            raise StorageKeyError(f"Key not found: {key}") from e
        except PermissionError as e:
            raise StoragePermissionError(f"Cannot read {path}: {e}") from e
        except OSError as e:
            raise StorageUnavailableError(f"Cannot read {path}: {e}") from e

        logger.debug(f"local get {key} ({len(data)} bytes)")
        return data

    async def delete(self, key: str) -> None:
        path = self._get_full_path(key)

        try:
            await aiofiles.os.remove(path)
        except (FileNotFoundError, NotADirectoryError) as e:
            raise StorageKeyError(f"Key not found: {key}") from e
        except PermissionError as e:
            raise StoragePermissionError(f"Cannot delete {path}: {e}") from e
        except OSError as e:
            raise StorageUnavailableError(f"Cannot delete {path}: {e}") from e

        logger.debug(f"local delete {key}")

    async def exists(self, key: str) -> bool:
        return await aiofiles.os.path.isfile(self._get_full_path(key))
