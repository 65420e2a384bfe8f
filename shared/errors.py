"""
Shared error handling for the Bookmarks Access Layer.

Errors fall in three groups:

- validation errors are raised before any collaborator is touched;
- source-of-truth errors (``NotFoundError``, ``DuplicateError`` and anything
  the repository raises) propagate to the caller unchanged;
- cache errors (``CacheError`` and subclasses) are raised by cache stores but
  absorbed and logged by the cache decorator.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standard error response format."""

    code: str
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)


class BookmarkLayerException(Exception):
    """Base exception for Bookmarks Access Layer services."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            code=self.code,
            message=self.message,
            details=self.details
        )


class ValidationError(BookmarkLayerException):
    """Validation-related errors."""

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("VALIDATION_ERROR", message, details)


class NotFoundError(BookmarkLayerException):
    """Requested record does not exist for this owner."""

    def __init__(self, message: str = "Record not found", details: Optional[Dict[str, Any]] = None):
        super().__init__("NOT_FOUND", message, details)


class DuplicateError(BookmarkLayerException):
    """A uniqueness constraint was violated."""

    def __init__(self, message: str = "Duplicate record", details: Optional[Dict[str, Any]] = None):
        super().__init__("DUPLICATION_ERROR", message, details)


class CacheError(BookmarkLayerException):
    """Cache backend errors."""

    def __init__(self, code: str = "CACHE_ERROR", message: str = "Cache error", details: Optional[Dict[str, Any]] = None):
        super().__init__(code, message, details)


class CacheMissError(CacheError):
    """Cache group or entry is absent or expired."""

    def __init__(self, group_key: str, entry_key: str):
        super().__init__(
            "CACHE_MISS",
            f"No cached entry {entry_key!r} in group {group_key!r}",
            {"group_key": group_key, "entry_key": entry_key}
        )
