"""
Junkick Backend — Custom Exception Hierarchy
==============================================

What:  Application-specific exceptions, one class per failure category.
Why:   Every category maps to one fixed HTTP status, and every condition to one
       stable `code` string that clients switch on. Raising typed exceptions
       keeps that mapping in a single place instead of in every route.
How:   Each exception carries a message, a machine-readable code, optional
       client-visible details and optional server-side context. The global
       handler registered in main.py renders them as
       {"error": {"message", "code", "details"?}}.
Who:   Raised by services, dependencies and middleware.

Exception Hierarchy:
    JunkickError (base)
    ├── ValidationError              → 400 VALIDATION_ERROR
    ├── InvalidReferenceError        → 400 INVALID_ID
    ├── TeamRuleError                → 400 CANNOT_REMOVE_OWNER
    │   └── CapacityExceededError    → 400 TEAM_SIZE_EXCEEDED
    ├── AuthenticationRequiredError  → 401 AUTHENTICATION_REQUIRED, INVALID_TOKEN, ...
    ├── AccessDeniedError            → 403 PROJECT_ACCESS_DENIED, ...
    ├── NotFoundError                → 404 PROJECT_NOT_FOUND, USER_NOT_FOUND, ...
    ├── ConflictError                → 409 USER_ALREADY_MEMBER, DUPLICATE_ERROR
    ├── RateLimitExceededError       → 429 RATE_LIMIT_EXCEEDED
    └── DatabaseError                → 500 DATABASE_ERROR
"""

from typing import Any, Dict, Optional


class JunkickError(Exception):
    """
    Base exception for all Junkick application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        code:     Stable machine-readable code, part of the API contract
        details:  Extra data returned to the client (field errors, etc.)
        context:  Debug info (logged but NOT returned to client)
    """

    status_code: int = 500
    default_code: str = "INTERNAL_SERVER_ERROR"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        code: Optional[str] = None,
        details: Any = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.code = code or self.default_code
        self.details = details
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(JunkickError):
    """
    Raised when client input fails validation.

    Details are a list of {"field", "message", "code"} entries, the same shape
    produced for request-schema failures, so clients handle both identically.
    """

    status_code = 400
    default_code = "VALIDATION_ERROR"

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        details: Any = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if details is None and field:
            details = [{"field": field, "message": message, "code": "invalid"}]
        super().__init__(message=message, details=details, context=context)
        self.field = field


class InvalidReferenceError(JunkickError):
    """Raised when an identifier is not a well-formed reference id."""

    status_code = 400
    default_code = "INVALID_ID"

    def __init__(self, value: str, resource: str = "resource"):
        super().__init__(
            message=f"'{value}' is not a valid {resource} id",
            context={"resource": resource, "value": value},
        )


class TeamRuleError(JunkickError):
    """Raised when a team change would break a membership rule."""

    status_code = 400
    default_code = "CANNOT_REMOVE_OWNER"


class CapacityExceededError(TeamRuleError):
    """Raised when a project already holds `team_size` members."""

    default_code = "TEAM_SIZE_EXCEEDED"

    def __init__(self, team_size: int):
        super().__init__(
            message="The team has already reached its maximum size",
            details={"teamSize": team_size},
        )


class AuthenticationRequiredError(JunkickError):
    """
    Raised when a request carries no usable identity.

    Codes: AUTHENTICATION_REQUIRED, MISSING_TOKEN, INVALID_TOKEN,
    TOKEN_EXPIRED, INVALID_CREDENTIALS, USER_NOT_FOUND (token subject gone).
    """

    status_code = 401
    default_code = "AUTHENTICATION_REQUIRED"

    def __init__(self, message: str = "Authentication required", code: Optional[str] = None):
        super().__init__(message=message, code=code)


class AccessDeniedError(JunkickError):
    """Raised when an authenticated caller is not allowed to perform an action."""

    status_code = 403
    default_code = "INSUFFICIENT_PERMISSIONS"

    def __init__(
        self,
        message: str = "Insufficient permissions",
        code: Optional[str] = None,
        details: Any = None,
    ):
        super().__init__(message=message, code=code, details=details)


class NotFoundError(JunkickError):
    """
    Raised when a requested resource does not exist.

    The code is derived from the resource name so every "project not found"
    path produces PROJECT_NOT_FOUND, every "user not found" USER_NOT_FOUND.
    """

    status_code = 404
    default_code = "NOT_FOUND"

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        code: Optional[str] = None,
        message: Optional[str] = None,
    ):
        if message is None:
            message = f"The requested {resource} was not found"
            if resource_id:
                message = f"{resource.capitalize()} with ID '{resource_id}' was not found"
        ctx: Dict[str, Any] = {"resource": resource}
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(
            message=message,
            code=code or f"{resource.upper()}_NOT_FOUND",
            context=ctx,
        )


class ConflictError(JunkickError):
    """Raised on duplicate unique values and repeated memberships."""

    status_code = 409
    default_code = "DUPLICATE_ERROR"


class RateLimitExceededError(JunkickError):
    """Raised when a client exceeds the per-IP request rate limit."""

    status_code = 429
    default_code = "RATE_LIMIT_EXCEEDED"

    def __init__(self, retry_after: int = 60):
        super().__init__(
            message=f"Too many requests. Please wait {retry_after} seconds before retrying.",
            details={"retryAfter": retry_after},
        )
        self.retry_after = retry_after


class DatabaseError(JunkickError):
    """
    Raised when database operations fail unexpectedly.

    The message returned to the client is always generic; constraint names and
    SQL are logged server-side only.
    """

    status_code = 500
    default_code = "DATABASE_ERROR"

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
