"""
Shared error handling for the Finlogic portal services.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standard error response format."""

    request_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)


class PortalException(Exception):
    """Base exception for portal services."""

    status_code = 400

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


class CacheKeyError(PortalException):
    """Raised when query parameters cannot be turned into a cache key."""

    def __init__(self, message: str = "Parameters are not serializable", details: Optional[Dict[str, Any]] = None):
        super().__init__("CACHE_KEY_ERROR", message, details)


class ValidationError(PortalException):
    """Validation-related errors."""

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("VALIDATION_ERROR", message, details)


class NotFoundError(PortalException):
    """Requested entity does not exist."""

    status_code = 404

    def __init__(self, entity: str, entity_id: str, details: Optional[Dict[str, Any]] = None):
        super().__init__("NOT_FOUND", f"{entity} {entity_id} not found", details)
        self.entity = entity
        self.entity_id = entity_id


class DataStoreError(PortalException):
    """Errors returned by the backing data store."""

    status_code = 502

    def __init__(self, store: str, message: str = "Data store error", details: Optional[Dict[str, Any]] = None):
        super().__init__("DATA_STORE_ERROR", f"{store}: {message}", details)
        self.store = store
