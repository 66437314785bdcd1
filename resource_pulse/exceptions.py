"""
ResourcePulse Backend - Custom Exception Hierarchy
==================================================

What:  Application-specific exceptions for the error scenarios of the API.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with the matching status code.
Who:   Raised by services, dependencies and middleware; caught by handlers.

Exception Hierarchy:
    ResourcePulseError (base)
    ├── ValidationError          → 400 Bad Request (client can fix)
    ├── AuthenticationError      → 401 Unauthorized
    ├── PermissionDeniedError    → 403 Forbidden
    ├── NotFoundError            → 404 Not Found
    ├── ConflictError            → 409 Conflict
    ├── RateLimitExceededError   → 429 Too Many Requests
    └── DatabaseError            → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class ResourcePulseError(Exception):
    """
    Base exception for all ResourcePulse application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (returned as `details` only for 4xx errors)
    """

    status_code: int = 500
    error_code: str = "server_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(ResourcePulseError):
    """
    Raised when client input breaks a business rule.

    Schema-level problems (wrong types, missing JSON fields) are rejected by
    FastAPI with 422 before a service runs; this covers the rules the schema
    cannot express (date ordering, utilization caps, unknown status values).

    Example response:
        {
            "error": "validation_error",
            "message": "Start date must be before or equal to end date",
            "details": {"field": "end_date"}
        }
    """

    status_code = 400
    error_code = "validation_error"

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


class AuthenticationError(ResourcePulseError):
    """Missing, malformed, invalid or expired credentials."""

    status_code = 401
    error_code = "unauthorized"

    def __init__(
        self,
        message: str = "Not authenticated",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class PermissionDeniedError(ResourcePulseError):
    """Authenticated user lacks the role required by the endpoint."""

    status_code = 403
    error_code = "forbidden"

    def __init__(
        self,
        message: str = "Not authorized to access this resource",
        required_roles: Optional[list] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if required_roles:
            ctx["required_roles"] = list(required_roles)
        super().__init__(message=message, context=ctx)


class NotFoundError(ResourcePulseError):
    """
    Raised when a requested record does not exist.

    SQLAlchemy returns None for missing rows; services convert that into
    NotFoundError so routes never deal with status codes.
    """

    status_code = 404
    error_code = "not_found"

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id is not None:
            message = f"{resource.capitalize()} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = str(resource_id)
        super().__init__(message=message, context=ctx)


class ConflictError(ResourcePulseError):
    """
    Raised when a request collides with existing state.

    Examples: duplicate unique names, deleting a project that still has
    allocations, deleting a role that is still referenced.
    """

    status_code = 409
    error_code = "conflict"

    def __init__(
        self,
        message: str = "The request conflicts with the current state of the resource",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(ResourcePulseError):
    """Client exceeded the per-IP request rate limit."""

    status_code = 429
    error_code = "rate_limit_exceeded"

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


class DatabaseError(ResourcePulseError):
    """
    Raised when database operations fail unexpectedly.

    The message returned to the client is always generic. The driver error
    lives in `context` and is logged server-side only.
    """

    status_code = 500
    error_code = "server_error"

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
