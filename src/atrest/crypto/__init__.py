"""
Encrypted-at-rest pipeline.

write: compress -> encrypt (key from derive_key) -> pack
read:  unpack -> derive_key -> decrypt -> decompress
"""

from .cipher import IV_SIZE, MAC_SIZE, SealedPayload, decrypt, encrypt
from .compression import compress, decompress, estimate_compression_ratio
from .envelope import Envelope, pack, unpack
from .kdf import DEFAULT_ITERATIONS, DerivedKey, derive_key

__all__ = [
    "DEFAULT_ITERATIONS",
    "IV_SIZE",
    "MAC_SIZE",
    "DerivedKey",
    "Envelope",
    "SealedPayload",
    "compress",
    "decompress",
    "decrypt",
    "derive_key",
    "encrypt",
    "estimate_compression_ratio",
    "pack",
    "unpack",
]
