"""
Error taxonomy for card extraction.

Configuration and grammar errors (RangeError, OptionsError) fail fast.
Persistence errors (CacheError) degrade to uncached behavior for one key.
Position errors are structural and abort the whole run.
"""


class ExtractorError(Exception):
    """Base class for all card extractor errors."""


class OptionsError(ExtractorError):
    """Raised when extraction options are invalid."""


class RangeError(ExtractorError, ValueError):
    """
    Raised when a number list is malformed or out of bounds.

    Attributes:
        token: The offending token, as written
    """

    def __init__(self, message: str, token: str | None = None):
        self.token = token
        super().__init__(message)


# =============================================================================
# DATABASE ERRORS
# =============================================================================


class DatabaseError(ExtractorError):
    """Raised when catalog data cannot be obtained."""


class NotFoundError(DatabaseError):
    """Raised when no successful data exists for a cache key."""


class MalformedPayloadError(NotFoundError):
    """Raised when a cached or fetched payload cannot be decoded."""


class SourceError(DatabaseError):
    """Raised when the remote catalog cannot be reached."""


# =============================================================================
# DISK CACHE ERRORS
# =============================================================================


class CacheError(ExtractorError):
    """Raised when a disk cache entry cannot be persisted."""


class LastModifiedMissing(CacheError):
    """Raised when a response has no usable Last-Modified timestamp."""


class WriteError(CacheError):
    """Raised when a disk cache entry cannot be written."""


# =============================================================================
# POSITION ERRORS
# =============================================================================


class OutOfRangeError(ExtractorError):
    """Raised when a document position maps to no card."""


class PositionNotFoundError(ExtractorError):
    """Raised when the pack metadata has no card at a mapped position."""
