"""
Daylog Backend — Custom Exception Hierarchy
=============================================

What:  Application-specific exceptions for every error the API can report.
How:   Each exception carries a user-safe message and an optional context dict.
       Global exception handlers (registered in main.py) map them to HTTP
       status codes and the structured error body.
Who:   Raised by services and dependencies; caught by global handlers.

Exception Hierarchy:
    DaylogError (base)
    ├── AuthenticationError      → 401 (missing identity token)
    ├── InvalidArgumentError     → 400 (malformed id, missing/empty field)
    ├── NotFoundError            → 404 (absent OR owned by another user)
    ├── DuplicateOperationError  → 400 (second habit check-in on one day)
    └── InternalError            → 500
        ├── DatabaseError        → 500 (store failure)
        └── FileStorageError     → 500 (upload write failure)
"""

from typing import Any, Dict, Optional


class DaylogError(Exception):
    """
    Base exception for all Daylog application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    status_code = 500
    error_code = "server_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class AuthenticationError(DaylogError):
    """
    Raised when the request carries no identity token.

    HTTP:    401 Unauthorized

    The token is an opaque, client-generated string. Its presence alone
    grants an identity, so the only failure is its absence.
    """

    status_code = 401
    error_code = "authentication_error"

    def __init__(
        self,
        message: str = "Missing identity token",
        suggestion: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
        self.suggestion = suggestion


class InvalidArgumentError(DaylogError):
    """
    Raised when client input fails validation.

    When:    Malformed resource id, missing required field, empty title/mood,
             unsupported upload type or size, bad paging parameters.
    HTTP:    400 Bad Request

    Example response:
        {
            "code": 400,
            "error": "invalid_argument",
            "message": "Title must not be empty",
            "details": {"field": "title"}
        }
    """

    status_code = 400
    error_code = "invalid_argument"

    def __init__(
        self,
        message: str = "Invalid argument",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(DaylogError):
    """
    Raised when a requested resource does not exist for the caller.

    HTTP:    404 Not Found

    A resource owned by another user raises this too, with the same message,
    so callers cannot probe for other users' ids.
    """

    status_code = 404
    error_code = "not_found"

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


class DuplicateOperationError(DaylogError):
    """
    Raised when an operation may only happen once per calendar day.

    When:    A habit is checked in a second time on the same day.
    HTTP:    400 Bad Request
    """

    status_code = 400
    error_code = "duplicate_operation"

    def __init__(
        self,
        message: str = "Operation already performed today",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class InternalError(DaylogError):
    """
    Raised for failures the client cannot fix.

    HTTP:    500 Internal Server Error

    The response always carries a generic message; the context is logged
    server-side only.
    """

    status_code = 500
    error_code = "server_error"

    def __init__(
        self,
        message: str = "An internal error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(InternalError):
    """
    Raised when a database operation fails unexpectedly.

    When:    Connection lost mid-query, deadlock, unexpected constraint error.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class FileStorageError(InternalError):
    """
    Raised when file system operations fail.

    When:    Disk full, permission denied, directory not writable, I/O error.
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
