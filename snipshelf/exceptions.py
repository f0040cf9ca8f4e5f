"""
SnipShelf Backend — Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions, one per failure class an action can report.
Why:   Each exception carries its machine-readable `code` and HTTP status, so the
       global handlers in main.py can render the uniform error body without
       per-route try/except.
Who:   Raised by the auth guard and services; caught by global handlers.

Exception Hierarchy:
    SnipShelfError (base)
    ├── UnauthorizedError   → 401 UNAUTHORIZED   (no authenticated principal)
    ├── NotFoundError       → 404 NOT_FOUND      (absent OR owned by someone else)
    ├── ValidationError     → 400 BAD_REQUEST    (input shape / constraint violation)
    └── DatabaseError       → 500 INTERNAL_SERVER_ERROR

None of these are retried. Every failure is terminal for its request.
"""

from typing import Any, Dict, Optional


class SnipShelfError(Exception):
    """
    Base exception for all SnipShelf application errors.

    Attributes:
        code:        Machine-readable error code returned to the caller
        status_code: HTTP status used by the global handler
        message:     User-facing error description (safe to return)
        context:     Additional debug info (logged, only returned for BAD_REQUEST)
    """

    code: str = "INTERNAL_SERVER_ERROR"
    status_code: int = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class UnauthorizedError(SnipShelfError):
    """Raised by `require_user` when the request carries no authenticated principal."""

    code = "UNAUTHORIZED"
    status_code = 401

    def __init__(
        self,
        message: str = "You must be signed in to perform this action.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(SnipShelfError):
    """
    Raised when a resource does not exist or is not owned by the caller.

    Both cases produce the same message on purpose: a caller must not be able
    to tell "someone else's collection" apart from "no such collection".
    The requested id is kept in `context` for server-side logs only.
    """

    code = "NOT_FOUND"
    status_code = 404

    def __init__(
        self,
        resource: str = "Resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = dict(context or {})
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=f"{resource} not found.", context=ctx)
        self.resource = resource


class ValidationError(SnipShelfError):
    """
    Raised when input fails validation.

    FastAPI's own RequestValidationError is rendered with the same code, so
    callers only ever see BAD_REQUEST for malformed input.
    """

    code = "BAD_REQUEST"
    status_code = 400

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = dict(context or {})
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class DatabaseError(SnipShelfError):
    """
    Raised when database operations fail unexpectedly.

    Security Note:
        The message returned to the client is always generic. Details
        (statement, constraint name) are logged server-side only.
    """

    code = "INTERNAL_SERVER_ERROR"
    status_code = 500

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
