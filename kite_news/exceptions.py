"""
Error taxonomy for the news cache.

Cache misses are not errors: read operations return None instead.
"""


class KiteNewsError(Exception):
    """Base class for all errors raised by kite_news."""


class KiteApiError(KiteNewsError):
    """Raised when a request to the Kite API does not yield usable data."""


class TransportError(KiteApiError):
    """Raised on connection failures, timeouts, non-success statuses and empty bodies."""


class DecodeError(KiteApiError):
    """Raised when a response body is not a well-formed JSON object."""


class CacheIOError(KiteNewsError):
    """Raised when a cache entry cannot be written to disk."""
