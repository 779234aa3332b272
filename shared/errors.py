"""
Shared error handling for the Drupal page cache reader.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standard error response format."""

    request_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)


class PageCacheException(Exception):
    """Base exception for page cache services."""

    http_status = 400

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self, request_id: Optional[str] = None) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            request_id=request_id,
            code=self.code,
            message=self.message,
            details=self.details
        )


class CorruptPayloadError(PageCacheException):
    """A cache entry exists and is valid but its payload cannot be decoded."""

    http_status = 502

    def __init__(self, message: str = "Cached payload is corrupt", details: Optional[Dict[str, Any]] = None):
        super().__init__("CORRUPT_PAYLOAD", message, details)


class StoreUnavailableError(PageCacheException):
    """The key-value store could not be read."""

    http_status = 503

    def __init__(self, message: str = "Cache store unavailable", details: Optional[Dict[str, Any]] = None):
        super().__init__("STORE_UNAVAILABLE", message, details)
