"""
Envelope framing for encrypted blobs.

Wire format (big endian):
    [magic b"ATR1" (4)] [version (1)] [iv_len (2)] [mac_len (2)] [iv] [mac] [ciphertext]

The ciphertext runs to the end of the blob, so only the IV and MAC carry
explicit lengths. Backends store the packed bytes without looking inside.
"""

import struct
from dataclasses import dataclass

from atrest.exceptions import CodecError

MAGIC = b"ATR1"
VERSION = 1

_HEADER = struct.Struct(">4sBHH")
_MAX_FIELD = 0xFFFF


@dataclass(frozen=True)
class Envelope:
    """The three fields carried by a packed blob."""

    ciphertext: bytes
    iv: bytes
    mac: bytes


def pack(ciphertext: bytes, iv: bytes, mac: bytes) -> bytes:
    """Serialize ciphertext, IV and MAC into a single blob."""
    if len(iv) > _MAX_FIELD or len(mac) > _MAX_FIELD:
        raise CodecError(f"IV and MAC must be at most {_MAX_FIELD} bytes")
    header = _HEADER.pack(MAGIC, VERSION, len(iv), len(mac))
    return b"".join((header, iv, mac, ciphertext))


def unpack(blob: bytes) -> Envelope:
    """Parse a blob produced by ``pack``.

    Raises:
        CodecError: The blob is truncated, not an envelope, or from an
            unsupported format version.
    """
    blob = bytes(blob)
    if len(blob) < _HEADER.size:
        raise CodecError(f"Envelope truncated: {len(blob)} bytes is shorter than the header")

    magic, version, iv_len, mac_len = _HEADER.unpack_from(blob)
    if magic != MAGIC:
        raise CodecError("Not an encrypted envelope (bad magic)")
    if version != VERSION:
        raise CodecError(f"Unsupported envelope version: {version}")

    iv_end = _HEADER.size + iv_len
    mac_end = iv_end + mac_len
    if len(blob) < mac_end:
        raise CodecError("Envelope truncated: IV or MAC is incomplete")

    return Envelope(ciphertext=blob[mac_end:], iv=blob[_HEADER.size : iv_end], mac=blob[iv_end:mac_end])
