"""
RondaGuard Backend - Custom Exception Hierarchy
===============================================

What:  Application-specific exceptions for every failure the core can report.
How:   Each exception carries a user-facing message, a machine-readable
       `kind`, and an optional context dict. Global exception handlers
       (registered in main.py) turn them into JSON error responses.
Who:   Raised by the codec, the database façade, and the services.

Exception Hierarchy:
    RondaGuardError (base)
    ├── ValidationError          → 400 malformed or missing aggregate field
    ├── AuthenticationError      → 401 unknown email or wrong secret
    ├── InactiveUserError        → 403 valid credentials, deactivated user
    ├── NotFoundError            → 404 referenced root id is absent
    ├── ConflictError            → 409 store constraint violation
    ├── SerializationError       → 422 JSON snapshot / numeric coercion failed
    ├── TransientStoreError      → 503 connectivity or pool timeout, retryable
    └── DatabaseError            → 500 any other store failure

None of these are retried automatically; TransientStoreError only signals
that a retry by the caller is safe.
"""

from typing import Any, Dict, Optional


class RondaGuardError(Exception):
    """
    Base exception for all RondaGuard application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, returned only for client errors)
        kind:     Machine-readable error code used in API responses
    """

    kind = "server_error"
    status_code = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(RondaGuardError):
    """
    Raised when an aggregate is malformed or misses a required field.

    Always raised before anything is written, so the store is untouched.
    """

    kind = "validation_error"
    status_code = 400

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


class AuthenticationError(RondaGuardError):
    """Raised when no user matches the email/secret pair."""

    kind = "invalid_credentials"
    status_code = 401

    def __init__(
        self,
        message: str = "Invalid credentials.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class InactiveUserError(RondaGuardError):
    """Raised when the credentials are valid but the user is deactivated."""

    kind = "inactive_user"
    status_code = 403

    def __init__(
        self,
        message: str = "User is inactive.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(RondaGuardError):
    """
    Raised when a requested root entity does not exist.

    Upserts never raise this: an absent root id simply takes the insert
    branch. Single-aggregate reads and status updates do.
    """

    kind = "not_found"
    status_code = 404

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


class ConflictError(RondaGuardError):
    """
    Raised when the store rejects a write on a constraint.

    Examples: duplicate round log id, duplicate user email, a child row
    pointing at a missing parent.
    """

    kind = "conflict"
    status_code = 409

    def __init__(
        self,
        message: str = "The write conflicts with existing data.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class SerializationError(RondaGuardError):
    """
    Raised when a value cannot cross the wire/row boundary.

    Covers the JSON snapshot (non-standard values on write, corrupt text on
    read) and timestamps that do not convert to an exact integer.
    """

    kind = "serialization_error"
    status_code = 422

    def __init__(
        self,
        message: str = "A value could not be serialized.",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class TransientStoreError(RondaGuardError):
    """
    Raised when the store is unreachable or no connection frees up in time.

    The transaction was rolled back; retrying the same call is safe.
    """

    kind = "transient_store_error"
    status_code = 503

    def __init__(
        self,
        message: str = "The database is temporarily unavailable. Please try again.",
        retry_after: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if retry_after:
            ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after


class DatabaseError(RondaGuardError):
    """
    Raised when a store operation fails for any other reason.

    The message returned to the client is always generic; the original
    error type is kept in `context` for server-side logs only.
    """

    kind = "database_error"
    status_code = 500

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
