"""
Inkwell Backend: Custom Exception Hierarchy
=============================================

What:  Defines application-specific exceptions for different error scenarios.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with correct HTTP status codes.
Who:   Raised by services and dependencies; caught by global handlers.
When:  During request processing when recoverable errors occur.

Exception Hierarchy:
    InkwellError (base)
    ├── ValidationError          → 400 Bad Request (client can fix)
    ├── AuthenticationError      → 401 Unauthorized (missing/invalid session)
    ├── ForbiddenError           → 403 Forbidden (not the resource owner)
    ├── NotFoundError            → 404 Not Found
    ├── FileStorageError         → 500 Internal Server Error
    └── DatabaseError            → 500 Internal Server Error

    InvalidTokenError is raised by the token codec only. The auth guard turns
    it into AuthenticationError, so it never reaches a handler on its own.
"""

from typing import Any, Dict, Optional


class InkwellError(Exception):
    """
    Base exception for all Inkwell application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged; returned only where the handler says so)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(InkwellError):
    """
    Raised when client input fails validation.

    When:    Duplicate username, empty credentials, wrong credentials,
             empty or oversized cover file, mismatched post id.
    HTTP:    400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "Username 'alice' is already taken",
            "details": {"field": "username"}
        }
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class AuthenticationError(InkwellError):
    """
    Raised when a request needs an identity and has none.

    When:    Session cookie absent, malformed, or signed with another secret.
    HTTP:    401 Unauthorized
    """

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ForbiddenError(InkwellError):
    """
    Raised when an authenticated user touches a post they do not own.

    HTTP:    403 Forbidden
    """

    def __init__(
        self,
        message: str = "You are not the author of this post",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(InkwellError):
    """
    Raised when a requested resource does not exist.

    When:    GET/PUT/DELETE /post/{id} with an unknown or unparsable id.
    HTTP:    404 Not Found

    SQLAlchemy returns None for missing records; the service layer converts
    that None into this exception.
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


class FileStorageError(InkwellError):
    """
    Raised when file system operations fail.

    When:    Disk full, permission denied, upload directory not writable.
    HTTP:    500 Internal Server Error (paths are logged, never returned)
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(InkwellError):
    """
    Raised when database operations fail unexpectedly.

    When:    Connection lost mid-query, store unreachable, driver error.
    HTTP:    500 Internal Server Error

    The message returned to the client is always generic. Detailed error
    info (SQL, constraint names) stays in the server log.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class InvalidTokenError(InkwellError):
    """Session token failed signature or claim checks."""

    def __init__(
        self,
        message: str = "Invalid session token",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
