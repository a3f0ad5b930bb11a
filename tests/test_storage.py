"""Tests for atrest.storage: key normalization, LocalStorage, MemoryStorage."""

import asyncio
import os

import aiofiles.os
import aiofiles.tempfile
import pytest

from atrest.storage import (
    LocalStorage,
    MemoryStorage,
    StorageKeyError,
    StoragePermissionError,
    StorageUnavailableError,
    normalize_key,
)

# ── Key normalization ───────────────────────────────────────────────


class TestNormalizeKey:
    def test_plain_key(self):
        assert normalize_key("notes/a.txt") == "notes/a.txt"

    def test_leading_and_duplicate_slashes(self):
        assert normalize_key("/notes//a.txt") == "notes/a.txt"
        assert normalize_key("  a.txt ") == "a.txt"

    @pytest.mark.parametrize("key", ["", "   ", "/", "a\\b", "a\x00b", "../etc/passwd", "a/./b", "a/../../b"])
    def test_rejects_unsafe_keys(self, key):
        with pytest.raises(StoragePermissionError):
            normalize_key(key)

    def test_rejects_non_string(self):
        with pytest.raises(StoragePermissionError):
            normalize_key(b"notes/a.txt")


# ── LocalStorage ────────────────────────────────────────────────────


class TestLocalStorage:
    @pytest.fixture
    def storage(self, tmp_path):
        return LocalStorage(root_path=tmp_path / "store")

    @pytest.mark.asyncio
    async def test_put_and_get(self, storage):
        data = b"test data content"
        stored = await storage.put("docs/readme.txt", data)
        assert stored.key == "docs/readme.txt"
        assert stored.size == len(data)

        assert await storage.get("docs/readme.txt") == data

    @pytest.mark.asyncio
    async def test_creates_nested_directories(self, storage, tmp_path):
        stored = await storage.put("a/b/c/deep.bin", b"\x00\x01")
        expected = tmp_path / "store" / "a" / "b" / "c" / "deep.bin"
        assert stored.location == str(expected.resolve())
        assert expected.read_bytes() == b"\x00\x01"

    @pytest.mark.asyncio
    async def test_leading_slash_maps_under_root(self, storage):
        await storage.put("/notes/a.txt", b"x")
        assert await storage.get("notes/a.txt") == b"x"

    @pytest.mark.asyncio
    async def test_overwrite(self, storage):
        await storage.put("k", b"first")
        await storage.put("k", b"second")
        assert await storage.get("k") == b"second"

    @pytest.mark.asyncio
    async def test_empty_blob(self, storage):
        await storage.put("empty", b"")
        assert await storage.get("empty") == b""

    @pytest.mark.asyncio
    async def test_exists(self, storage):
        assert not await storage.exists("missing")
        await storage.put("present.txt", b"hi")
        assert await storage.exists("present.txt")

    @pytest.mark.asyncio
    async def test_delete(self, storage):
        await storage.put("to_delete.txt", b"bye")
        await storage.delete("to_delete.txt")
        assert not await storage.exists("to_delete.txt")

        with pytest.raises(StorageKeyError, match="not found"):
            await storage.get("to_delete.txt")

    @pytest.mark.asyncio
    async def test_delete_missing_raises(self, storage):
        with pytest.raises(StorageKeyError, match="not found"):
            await storage.delete("never_written")

    @pytest.mark.asyncio
    async def test_get_missing_raises(self, storage):
        with pytest.raises(StorageKeyError, match="not found"):
            await storage.get("no_such_key")

    @pytest.mark.asyncio
    async def test_get_directory_is_not_found(self, storage):
        await storage.put("dir/file.txt", b"x")
        with pytest.raises(StorageKeyError):
            await storage.get("dir")

    @pytest.mark.asyncio
    async def test_traversal_rejected(self, storage):
        with pytest.raises(StoragePermissionError):
            await storage.put("../outside.txt", b"nope")

    @pytest.mark.asyncio
    async def test_symlink_escape_rejected(self, storage, tmp_path):
        outside = tmp_path / "outside"
        outside.mkdir()
        storage.root_path.mkdir(parents=True, exist_ok=True)
        os.symlink(outside, storage.root_path / "link")

        with pytest.raises(StoragePermissionError, match="traversal"):
            await storage.put("link/file.txt", b"nope")
        assert not (outside / "file.txt").exists()

    @pytest.mark.asyncio
    async def test_concurrent_writes_never_interleave(self, storage):
        big, small = b"A" * 4_000_000, b"B" * 10
        for _ in range(20):
            await asyncio.gather(storage.put("k", big), storage.put("k", small))
            assert await storage.get("k") in (big, small)

    @pytest.mark.asyncio
    async def test_failed_write_keeps_previous_blob(self, storage, monkeypatch):
        await storage.put("k", b"old version")
        real_tempfile = aiofiles.tempfile.NamedTemporaryFile

        class FailingWrite:
            def __init__(self, *args, **kwargs):
                self._ctx = real_tempfile(*args, **kwargs)

            async def __aenter__(self):
                self._file = await self._ctx.__aenter__()
                return self

            async def __aexit__(self, *exc_info):
                return await self._ctx.__aexit__(*exc_info)

            @property
            def name(self):
                return self._file.name

            async def write(self, data):
                await self._file.write(data[:5])
                raise OSError("No space left on device")

        monkeypatch.setattr(aiofiles.tempfile, "NamedTemporaryFile", FailingWrite)

        with pytest.raises(StorageUnavailableError, match="No space left"):
            await storage.put("k", b"new version")
        assert await storage.get("k") == b"old version"
        assert os.listdir(storage.root_path) == ["k"]

    @pytest.mark.asyncio
    async def test_failed_rename_leaves_no_temp_files(self, storage, monkeypatch):
        async def failing_replace(src, dst):
            raise OSError("rename failed")

        monkeypatch.setattr(aiofiles.os, "replace", failing_replace)

        with pytest.raises(StorageUnavailableError):
            await storage.put("docs/k", b"data")
        assert not await storage.exists("docs/k")
        assert os.listdir(storage.root_path / "docs") == []

    def test_root_path_expands_user(self):
        storage = LocalStorage(root_path="~/atrest-test-root")
        assert "~" not in str(storage.root_path)
        assert storage.root_path.is_absolute()


# ── MemoryStorage ───────────────────────────────────────────────────


class TestMemoryStorage:
    @pytest.mark.asyncio
    async def test_roundtrip_and_delete(self):
        storage = MemoryStorage()
        stored = await storage.put("/x/y", bytearray(b"data"))
        assert stored.location == "memory://x/y"
        assert await storage.get("x/y") == b"data"
        assert await storage.exists("x/y")

        await storage.delete("x/y")
        with pytest.raises(StorageKeyError):
            await storage.get("x/y")
        with pytest.raises(StorageKeyError):
            await storage.delete("x/y")

    @pytest.mark.asyncio
    async def test_empty_blob_can_be_deleted(self):
        storage = MemoryStorage()
        await storage.put("empty", b"")
        await storage.delete("empty")
        assert not await storage.exists("empty")
