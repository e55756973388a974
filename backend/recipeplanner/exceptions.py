"""
RecipePlanner Backend - Custom Exception Hierarchy
===================================================

What:  Application-specific exceptions for every failure a client can observe.
How:   Each exception carries a user-safe message and an optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with correct HTTP status codes.
Who:   Raised by services and the access guard; caught by global handlers.

Exception Hierarchy:
    RecipePlannerError (base)
    ├── ValidationError              → 400 (client can fix; lists every violation)
    ├── DuplicateUserError           → 400
    ├── InvalidCredentialsError      → 400 (same for unknown email and wrong password)
    ├── InvalidCurrentPasswordError  → 400
    ├── UnauthenticatedError         → 401 (missing, invalid or expired token)
    ├── NotFoundError                → 404
    ├── NotFoundOrForbiddenError     → 404 (absent and not-yours look the same)
    ├── UpstreamUnavailableError     → 503
    │   └── CircuitBreakerOpenError  → 503
    └── DatabaseError                → 500

    TokenInvalidError is raised by the token codec only. The access guard
    turns it into UnauthenticatedError, so its `reason` reaches the server
    log and never the response.
"""

from typing import Any, Dict, List, Optional


class RecipePlannerError(Exception):
    """
    Base exception for all RecipePlanner application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(RecipePlannerError):
    """
    Raised when client input fails validation.

    HTTP:    400 Bad Request

    `errors` holds every violation found, not just the first one, so a
    registration form can highlight all bad fields at once:

        {
            "error": "validation_error",
            "message": "Validation failed",
            "details": {"errors": [
                {"field": "email", "message": "Please include a valid email"},
                {"field": "password", "message": "Password must be 6 or more characters"}
            ]}
        }
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        errors: Optional[List[Dict[str, str]]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if errors is None:
            errors = [{"field": field, "message": message}] if field else []
        ctx["errors"] = errors
        super().__init__(message=message, context=ctx)
        self.field = field
        self.errors = errors


class DuplicateUserError(RecipePlannerError):
    """
    Raised when registering an email that already has an account.

    HTTP:    400 Bad Request (kept at 400 for client compatibility, not 409)

    Also raised when the store's unique constraint on users.email fires,
    which is how a race between two concurrent registrations is resolved.
    """

    def __init__(
        self,
        message: str = "User already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class InvalidCredentialsError(RecipePlannerError):
    """
    Raised on login when the email is unknown OR the password is wrong.

    HTTP:    400 Bad Request

    Both cases use this one class and one message. Do not subclass it or
    vary the message per cause: a different response for "no such account"
    lets a caller enumerate registered emails.
    """

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="Invalid Credentials", context=context)


class InvalidCurrentPasswordError(RecipePlannerError):
    """
    Raised when a password change supplies a wrong current password.

    HTTP:    400 Bad Request
    """

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="Invalid current password", context=context)


class UnauthenticatedError(RecipePlannerError):
    """
    Raised by the access guard when a protected route gets no usable token.

    HTTP:    401 Unauthorized

    Expired, tampered, wrong-secret and garbage tokens all produce the same
    "Token is not valid" message. The precise reason is logged server-side.
    """

    def __init__(
        self,
        message: str = "Token is not valid",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(RecipePlannerError):
    """
    Raised when a requested resource does not exist.

    HTTP:    404 Not Found

    Used for the caller's own account (profile lookups after deletion).
    Resources owned by users go through NotFoundOrForbiddenError instead.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class NotFoundOrForbiddenError(RecipePlannerError):
    """
    Raised when an ownership-scoped lookup or delete matches no row.

    HTTP:    404 Not Found

    The record may not exist at all, or it may belong to someone else.
    The response is identical for both so nobody can probe for other
    users' record ids.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource.capitalize()} not found or you are not authorized to access it"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource = resource


class UpstreamUnavailableError(RecipePlannerError):
    """
    Raised when the third-party recipe API fails.

    HTTP:    503 Service Unavailable

    Covers transport errors, timeouts, non-2xx answers and unparseable
    bodies. No retry is attempted; the client may try again later.
    """

    def __init__(
        self,
        message: str = "Recipe search service is temporarily unavailable",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class CircuitBreakerOpenError(UpstreamUnavailableError):
    """
    Raised when the circuit breaker guarding the recipe API is OPEN.

    HTTP:    503 Service Unavailable

    How circuit breaker works:
        CLOSED (normal) → failures increment counter
        → After N failures → OPEN (reject all calls for recovery_time seconds)
        → After recovery_time → HALF-OPEN (allow one test call)
        → If test succeeds → CLOSED
        → If test fails → OPEN again
    """

    def __init__(
        self,
        recovery_time: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            "Recipe search service is temporarily unavailable due to repeated failures. "
            f"Please try again in approximately {recovery_time} seconds."
        )
        ctx = context or {}
        ctx["recovery_time"] = recovery_time
        super().__init__(message=message, context=ctx)
        self.recovery_time = recovery_time


class DatabaseError(RecipePlannerError):
    """
    Raised when database operations fail unexpectedly.

    HTTP:    500 Internal Server Error

    The message returned to the client is always generic. Constraint names,
    SQL text and driver errors go to the server log only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class TokenInvalidError(Exception):
    """
    Raised by TokenCodec.verify() for any token it will not accept.

    Not a RecipePlannerError: it has no HTTP mapping of its own.

    Attributes:
        reason: One of "expired", "bad_signature", "malformed", "missing_claims".
                For server logs only.
    """

    EXPIRED = "expired"
    BAD_SIGNATURE = "bad_signature"
    MALFORMED = "malformed"
    MISSING_CLAIMS = "missing_claims"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"token rejected: {reason}")
