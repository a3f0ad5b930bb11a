"""
Compression for the encryption pipeline.

Plaintext is gzip-compressed before it is encrypted and decompressed after
it is decrypted. Core compression requires no extra dependencies.
"""

import gzip
import zlib
from io import BytesIO

from atrest.exceptions import CodecError


def compress(data: bytes, compresslevel: int = 6) -> bytes:
    """Gzip-compress binary data."""
    buffer = BytesIO()
    with gzip.GzipFile(fileobj=buffer, mode="wb", compresslevel=compresslevel, mtime=0) as gz:
        gz.write(data)
    return buffer.getvalue()


def decompress(data: bytes) -> bytes:
    """Decompress gzip data, raising CodecError on corrupt input."""
    try:
        return gzip.decompress(data)
    except (OSError, EOFError, zlib.error) as e:
        raise CodecError(f"Compressed payload is corrupt: {e}") from e


def estimate_compression_ratio(original_size: int, compressed_size: int) -> float:
    """Calculate compression ratio as a percentage (0-100)."""
    if original_size == 0:
        return 0.0
    return (1 - compressed_size / original_size) * 100
