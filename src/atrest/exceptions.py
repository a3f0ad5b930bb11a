"""
Atrest exception hierarchy.

All atrest exceptions inherit from AtRestError, making it easy for consumers
to catch library-level errors while still distinguishing specific failure modes.
Storage failures live in ``atrest.storage.base`` and share the same root.
"""


class AtRestError(Exception):
    """Base exception class for all atrest errors."""


class ConfigurationError(AtRestError):
    """Raised for configuration errors (bad backend selection, invalid values)."""


class SecretNotFoundError(AtRestError):
    """Raised when a required secret cannot be found in any provider."""


class CryptoError(AtRestError):
    """Base exception for the encryption pipeline."""


class IntegrityError(CryptoError):
    """Raised when a MAC does not verify. Nothing is decrypted in that case."""


class CodecError(CryptoError):
    """Raised for malformed envelopes or corrupt compressed payloads."""
