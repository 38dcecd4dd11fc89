# doccache/services/exceptions.py
"""
Errors raised by the cache layer.

Two channels are kept apart on purpose: contract violations (bad keys, bad TTLs)
are raised before any I/O, while store-side write failures are reported as a
False return value by the cache operations.
"""
from typing import Any, Optional


class CacheError(Exception):
    """Base class for errors raised by cache operations."""


class InvalidKey(CacheError, ValueError):
    """Raised when a cache key is empty, not a scalar, or uses reserved characters."""

    def __init__(self, key: Any, reason: str = "key must be a non-empty scalar"):
        self.key = key
        self.reason = reason
        super().__init__(f"Invalid cache key {key!r}: {reason}")


class InvalidTTL(CacheError, ValueError):
    """Raised when a TTL is neither a number of seconds nor a timedelta."""

    def __init__(self, ttl: Any):
        self.ttl = ttl
        super().__init__(f"Invalid TTL {ttl!r}: expected seconds (int/float) or timedelta")


class DocumentStoreError(Exception):
    """Raised by a DocumentStore when a read cannot be served."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.message = message
        super().__init__(message)
        if original_error is not None:
            self.__cause__ = original_error
