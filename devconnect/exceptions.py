"""
DevConnect Backend - Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions for every failure the API reports.
Why:   Typed exceptions carry their own HTTP status and error code, so routes
       and services never build error responses by hand.
How:   Each exception carries a message and an optional context dict.
       The global handler registered in main.py serializes them uniformly.
Who:   Raised by services, validators and dependencies; caught by main.py.

Exception Hierarchy:
    DevConnectError (base)               → 500
    ├── BadRequestError                  → 400 (malformed/missing input)
    ├── ValidationError                  → 400 (domain rule violated)
    ├── UnauthenticatedError             → 401
    ├── NotFoundError                    → 404
    ├── ConflictError                    → 409
    ├── RateLimitExceededError           → 429
    └── DatabaseError                    → 500
"""

from typing import Any, Dict, Optional


class DevConnectError(Exception):
    """
    Base exception for all DevConnect application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Structured details; returned as `details` for 4xx errors,
                  logged only for 5xx errors
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

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.status_code < 500


class BadRequestError(DevConnectError):
    """
    Raised when the request itself is malformed.

    When:    Missing path parameter, identifier that is not a UUID,
             out-of-range pagination, self-directed connection request.
    HTTP:    400 Bad Request
    """

    status_code = 400
    error_code = "bad_request"

    def __init__(
        self,
        message: str = "Bad request",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ValidationError(DevConnectError):
    """
    Raised when client input violates a domain rule.

    When:    Weak password, invalid name characters, too many skills,
             forbidden profile-update fields.
    HTTP:    400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "Age must be between 16 and 50",
            "details": {"field": "age"}
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


class UnauthenticatedError(DevConnectError):
    """
    Raised when the caller has no valid session token.

    When:    Cookie missing, signature invalid, token expired or malformed.
    HTTP:    401 Unauthorized
    """

    status_code = 401
    error_code = "unauthenticated"

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(DevConnectError):
    """
    Raised when a requested resource does not exist.

    When:    Unknown user id, no reviewable connection request, unknown route.
    HTTP:    404 Not Found

    Accepts either an explicit message or a resource/resource_id pair from
    which the message is derived.
    """

    status_code = 404
    error_code = "not_found"

    def __init__(
        self,
        message: Optional[str] = None,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if message is None:
            message = f"The requested {resource} was not found"
            if resource_id:
                message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        if resource_id:
            ctx["resource"] = resource
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(DevConnectError):
    """
    Raised when the request collides with existing state.

    When:    Duplicate email on signup, connection request already exists
             between the two users (in either direction).
    HTTP:    409 Conflict
    """

    status_code = 409
    error_code = "conflict"

    def __init__(
        self,
        message: str = "Resource already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(DevConnectError):
    """
    Raised when a client exceeds the per-IP request rate limit.

    HTTP:    429 Too Many Requests (with Retry-After header)
    """

    status_code = 429
    error_code = "rate_limit_exceeded"

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Too many requests from this IP. Please wait {retry_after} seconds before retrying."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after


class DatabaseError(DevConnectError):
    """
    Raised when database operations fail unexpectedly.

    HTTP:    500 Internal Server Error

    Security Note:
        The message returned to the client is always generic.
        The original error is kept in context and logged server-side only.
    """

    status_code = 500
    error_code = "server_error"

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
