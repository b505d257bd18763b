"""
SIA API: Custom Exception Hierarchy
===================================

What:  Application-specific exceptions for every failure the API reports.
How:   Each exception carries a client-safe message and an optional context
       dict. Global exception handlers (registered in main.py) turn them into
       the single error body `{error, message, details, request_id}`.
Who:   Raised by services, repositories and the token issuer; caught by the
       global handlers or, for the access guard, translated in place.

Exception Hierarchy:
    SIAError (base)
    ├── ValidationError            → 400 Bad Request
    ├── ConflictError              → 409 Conflict (400 for registration)
    ├── UnauthorizedError          → 401 Unauthorized
    │   ├── InvalidCredentialsError
    │   ├── MissingTokenError
    │   └── TokenError
    │       ├── InvalidTokenError
    │       └── TokenExpiredError
    ├── NotFoundError              → 404 Not Found
    │   └── AccountNotFoundError
    ├── RateLimitExceededError     → 429 Too Many Requests
    ├── DatabaseError              → 500 Internal Server Error
    └── StorageTimeoutError        → 503 Service Unavailable
"""

from typing import Any, Dict, List, Optional


class SIAError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, returned only where a handler
                  explicitly exposes it)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(SIAError):
    """
    Raised when client input fails validation.

    `errors` is always a list of `{"field": ..., "message": ...}` entries,
    so every 400 response has the same details shape.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        errors: Optional[List[Dict[str, str]]] = None,
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        collected = list(errors or [])
        if field and not collected:
            collected.append({"field": field, "message": message})
        ctx = context or {}
        ctx["errors"] = collected
        super().__init__(message=message, context=ctx)
        self.errors = collected


class ConflictError(SIAError):
    """
    Raised when a write would violate a uniqueness constraint.

    HTTP: 409 by default. Registration keeps the published 400 contract by
    passing `status_code=400`.
    """

    def __init__(
        self,
        message: str = "Resource already exists",
        status_code: int = 409,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
        self.status_code = status_code


class UnauthorizedError(SIAError):
    """Raised when a request cannot be attributed to a valid identity (401)."""

    def __init__(
        self,
        message: str = "Unauthorized",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class InvalidCredentialsError(UnauthorizedError):
    """
    Raised on login when the email is unknown OR the password is wrong.

    Both cases use this single exception and message so responses cannot be
    used to enumerate accounts.
    """

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message=message)


class MissingTokenError(UnauthorizedError):
    """Raised when a required token was not supplied."""

    def __init__(self, message: str = "Token is required"):
        super().__init__(message=message)


class TokenError(UnauthorizedError):
    """Base for failures raised while verifying a signed token."""


class InvalidTokenError(TokenError):
    """Signature mismatch, corrupt structure, missing claims or wrong token type."""

    def __init__(self, message: str = "Invalid token"):
        super().__init__(message=message)


class TokenExpiredError(TokenError):
    """The token's `exp` claim is in the past."""

    def __init__(self, message: str = "Token has expired"):
        super().__init__(message=message)


class NotFoundError(SIAError):
    """
    Raised when a requested resource does not exist.

    Repositories return None for missing rows; services convert that into
    this exception so handlers can answer 404.
    """

    def __init__(
        self,
        resource: str = "Resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message or f"{resource} not found", context=ctx)


class AccountNotFoundError(NotFoundError):
    """The account a token refers to no longer exists."""

    def __init__(self, subject_id: Optional[str] = None):
        super().__init__(resource="User", resource_id=subject_id, message="User not found")


class DatabaseError(SIAError):
    """
    Raised when a storage operation fails unexpectedly.

    The client always gets a generic message; the context (exception type,
    operation) is logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class StorageTimeoutError(DatabaseError):
    """A storage call exceeded `db_timeout_seconds`."""

    def __init__(
        self,
        timeout: float,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["timeout_seconds"] = timeout
        super().__init__(
            message="The storage backend did not respond in time. Please retry.",
            context=ctx,
        )
        self.timeout = timeout


class RateLimitExceededError(SIAError):
    """
    Raised when a client exceeds the per-IP request rate limit.

    `retry_after` is the number of seconds until the window frees a slot.
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
