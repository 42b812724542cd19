"""
TerpTaster Backend - Custom Exception Hierarchy
===============================================

What:  Application-specific exceptions for the different error scenarios.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with correct HTTP status codes.
Who:   Raised by services and routes; caught by global handlers.

Exception Hierarchy:
    TerpTasterError (base)
    ├── ValidationError          → 400 Bad Request (client can fix)
    ├── NotFoundError            → 404 Not Found
    ├── RateLimitExceededError   → 429 Too Many Requests
    ├── FileStorageError         → 500 Internal Server Error
    ├── DatabaseError            → 500 Internal Server Error
    └── DatasetError             → 503 Service Unavailable

The terpene scorer raises none of these: it is total over its input domain.
"""

from typing import Any, Dict, List, Optional


class TerpTasterError(Exception):
    """
    Base exception for all TerpTaster application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged; only returned for 4xx errors)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(TerpTasterError):
    """
    Raised when client input fails a business rule.

    When:    Missing required review fields, empty search, bad upload,
             hint index out of range.
    HTTP:    400 Bad Request

    Schema-level problems (wrong JSON types) never reach this class: FastAPI
    answers those with 422 before a service runs.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        missing_fields: Optional[List[str]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        if missing_fields:
            ctx["missing_fields"] = missing_fields
        super().__init__(message=message, context=ctx)
        self.field = field
        self.missing_fields = missing_fields or []


class NotFoundError(TerpTasterError):
    """
    Raised when a requested resource does not exist.

    When:    Unknown review id, terpene name, training profile or photo.
    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class FileStorageError(TerpTasterError):
    """
    Raised when writing or reading a photo on the storage volume fails.

    HTTP:    500 Internal Server Error (file system paths stay in the logs)
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(TerpTasterError):
    """
    Raised when database operations fail unexpectedly.

    When:    Connection lost mid-query, constraint violation, deadlock, etc.
    HTTP:    500 Internal Server Error

    The message returned to the client is always generic; SQL and constraint
    details are logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatasetError(TerpTasterError):
    """
    Raised when the terpene reference dataset cannot be loaded or is missing.

    When:    Startup (file missing, invalid JSON, duplicate terpene names), or a
             request arrives before the dataset was attached to the app.
    HTTP:    503 Service Unavailable
    """

    def __init__(
        self,
        message: str = "Terpene reference data is not available",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(TerpTasterError):
    """
    Raised when a client exceeds the per-IP request rate limit.

    HTTP:    429 Too Many Requests (with Retry-After header)
    """

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Rate limit exceeded. Please wait {retry_after} seconds before making more requests."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
