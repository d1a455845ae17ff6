"""
Inkwell Backend — Custom Exception Hierarchy
=============================================

What:  Application-specific exceptions for each failure category.
How:   Each exception carries a human-readable message, a machine-readable
       `code` string and an optional context dict. Global exception
       handlers (registered in main.py) turn them into JSON error
       responses with the matching HTTP status code.
Who:   Raised by services, auth dependencies and middleware.

Exception Hierarchy:
    InkwellError (base)
    ├── ValidationError              → 400 VALIDATION_ERROR
    ├── AuthenticationError          → 401 UNAUTHORIZED
    ├── PermissionDeniedError        → 403 FORBIDDEN
    ├── NotFoundError                → 404 NOT_FOUND
    ├── ConflictError                → 409 CONFLICT
    │   ├── InvalidTransitionError   → 409 INVALID_STATUS_TRANSITION
    │   ├── AlreadyReviewedError     → 409 ALREADY_REVIEWED
    │   └── ApplicationExistsError   → 409 APPLICATION_EXISTS
    ├── RateLimitExceededError       → 429 RATE_LIMITED
    └── DatabaseError                → 500 DATABASE_ERROR

Nothing in this hierarchy is retried: every failure is reported to the
caller as-is.
"""

from typing import Any, Dict, Optional


def error_body(
    error: str,
    code: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
    request_id: str = "",
) -> Dict[str, Any]:
    """The JSON body shared by every failure response."""
    return {
        "success": False,
        "error": error,
        "code": code,
        "message": message,
        "details": details,
        "request_id": request_id,
    }


class InkwellError(Exception):
    """
    Base exception for all Inkwell application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        code:     Machine-readable error code (e.g. "ALREADY_REVIEWED")
        context:  Additional info; returned as `details` for client errors,
                  logged only for server errors
    """

    status_code: int = 500
    error: str = "server_error"
    default_code: str = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.code = code or self.default_code
        self.context = context or {}
        super().__init__(self.message)

    def to_body(self, request_id: str = "") -> Dict[str, Any]:
        # Context of server-side errors is for the logs only
        details = self.context or None
        if self.status_code >= 500:
            details = None
        return error_body(self.error, self.code, self.message, details, request_id)


class ValidationError(InkwellError):
    """
    Raised when client input fails validation.

    When:    Out-of-range values, empty update bodies, unknown filter values.
    HTTP:    400 Bad Request
    """

    status_code = 400
    error = "validation_error"
    default_code = "VALIDATION_ERROR"

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, code=code, context=ctx)
        self.field = field


class AuthenticationError(InkwellError):
    """
    Raised when the caller is not authenticated.

    When:    Missing, malformed, expired or forged bearer token; token for a
             user without a profile; deactivated profile.
    HTTP:    401 Unauthorized
    """

    status_code = 401
    error = "unauthorized"
    default_code = "UNAUTHORIZED"

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class PermissionDeniedError(InkwellError):
    """
    Raised when an authenticated caller lacks the required role or ownership.

    HTTP:    403 Forbidden
    """

    status_code = 403
    error = "forbidden"
    default_code = "FORBIDDEN"

    def __init__(
        self,
        message: str = "You do not have permission to perform this action",
        code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, code=code, context=context)


class NotFoundError(InkwellError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing rows; services convert that into
    this exception. Soft-deleted articles are reported the same way.
    HTTP:    404 Not Found
    """

    status_code = 404
    error = "not_found"
    default_code = "NOT_FOUND"

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, code=code, context=ctx)


class ConflictError(InkwellError):
    """
    Raised when a request conflicts with the current state of a resource.

    HTTP:    409 Conflict
    """

    status_code = 409
    error = "conflict"
    default_code = "CONFLICT"

    def __init__(
        self,
        message: str = "The request conflicts with the current state of the resource",
        code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, code=code, context=context)


class InvalidTransitionError(ConflictError):
    """
    Raised when a status transition is not allowed from the current status.

    The guarded update either found the entity in the wrong status up front
    or matched zero rows because the status changed concurrently. In both
    cases the row is left untouched.

    Example response:
        {
            "success": false,
            "error": "conflict",
            "code": "INVALID_STATUS_TRANSITION",
            "message": "Article is not pending approval",
            "details": {"entity_type": "article", "current_status": "draft",
                        "required_status": "pending_approval"}
        }
    """

    default_code = "INVALID_STATUS_TRANSITION"

    def __init__(
        self,
        message: str,
        entity_type: str,
        current_status: Optional[str] = None,
        target_status: Optional[str] = None,
        required_status: Optional[str] = None,
    ):
        ctx: Dict[str, Any] = {"entity_type": entity_type}
        if current_status is not None:
            ctx["current_status"] = current_status
        if target_status is not None:
            ctx["target_status"] = target_status
        if required_status is not None:
            ctx["required_status"] = required_status
        super().__init__(message=message, context=ctx)
        self.current_status = current_status
        self.target_status = target_status


class AlreadyReviewedError(ConflictError):
    """Raised when an author application has already left the pending state."""

    default_code = "ALREADY_REVIEWED"

    def __init__(self, application_id: str, current_status: Optional[str] = None):
        ctx: Dict[str, Any] = {"application_id": application_id}
        if current_status is not None:
            ctx["current_status"] = current_status
        super().__init__(message="Application already reviewed", context=ctx)


class ApplicationExistsError(ConflictError):
    """Raised when a user who already applied submits another application."""

    default_code = "APPLICATION_EXISTS"

    def __init__(self, existing_status: str):
        super().__init__(
            message="You already have an application",
            context={"status": existing_status},
        )


class RateLimitExceededError(InkwellError):
    """
    Raised when a client exceeds the per-IP request rate limit.

    HTTP:    429 Too Many Requests (with Retry-After header)
    """

    status_code = 429
    error = "rate_limit_exceeded"
    default_code = "RATE_LIMITED"

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


class DatabaseError(InkwellError):
    """
    Raised when database operations fail unexpectedly.

    When:    Connection lost mid-query, constraint violation, deadlock, etc.
    HTTP:    500 Internal Server Error

    The message returned to the client is always generic. Context (entity
    ids, driver error class) is logged server-side only.
    """

    status_code = 500
    error = "server_error"
    default_code = "DATABASE_ERROR"

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
