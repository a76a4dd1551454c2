"""
Notes RPC Backend — Custom Exception Hierarchy
================================================

What:  Application-specific exceptions for the RPC error taxonomy and for
       storage failures.
How:   Each RPC exception carries a wire code, an HTTP status and a message
       that is safe to return to the client. The router catches them and
       renders the error envelope; anything else becomes INTERNAL_SERVER_ERROR.
Who:   Raised by handlers and the note store; caught by the RPC router.

Exception Hierarchy:
    RpcError (base)
    ├── BadRequestError          → 400 BAD_REQUEST
    ├── NotFoundError            → 404 NOT_FOUND
    ├── MethodNotSupportedError  → 405 METHOD_NOT_SUPPORTED
    ├── ConflictError            → 409 CONFLICT
    └── InternalServerError      → 500 INTERNAL_SERVER_ERROR

    StoreError (base, never rendered directly)
    └── UniqueViolation          → converted to ConflictError by handlers
"""

from typing import Any, Dict, List, Optional


class RpcError(Exception):
    """
    Base exception for every error that reaches the client as an envelope.

    Attributes:
        message:  User-facing error description (returned in the envelope)
        code:     Wire error code (e.g. "NOT_FOUND")
        status_code: HTTP status used for the response
        context:  Additional debug info (logged but NOT returned to client)
    """

    code: str = "INTERNAL_SERVER_ERROR"
    status_code: int = 500
    default_message: str = "An unexpected error occurred"

    def __init__(
        self,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message or self.default_message
        self.context = context or {}
        super().__init__(self.message)


class BadRequestError(RpcError):
    """
    Raised when client input is malformed, missing, or fails a schema.

    `fields` lists the offending field names when the failure came from
    schema validation; it is logged, not returned.
    """

    code = "BAD_REQUEST"
    status_code = 400
    default_message = "Invalid request format"

    def __init__(
        self,
        message: Optional[str] = None,
        fields: Optional[List[str]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if fields:
            ctx["fields"] = fields
        super().__init__(message=message, context=ctx)
        self.fields = fields or []


class NotFoundError(RpcError):
    """Raised when the referenced note does not exist."""

    code = "NOT_FOUND"
    status_code = 404
    default_message = "Note with that ID not found"

    def __init__(
        self,
        resource_id: Optional[str] = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class MethodNotSupportedError(RpcError):
    """Raised when a write-only operation is called with a read-style method."""

    code = "METHOD_NOT_SUPPORTED"
    status_code = 405
    default_message = "Method not allowed"


class ConflictError(RpcError):
    """Raised when a title is already taken by another note."""

    code = "CONFLICT"
    status_code = 409
    default_message = "Note with that title already exists"


class InternalServerError(RpcError):
    """Uncategorized failure; the router wraps unexpected exceptions in it."""

    code = "INTERNAL_SERVER_ERROR"
    status_code = 500


# ── Storage Failures ──────────────────────────────────────────────────────

class StoreError(Exception):
    """Base class for failures reported by the note store."""


class UniqueViolation(StoreError):
    """
    A write was rejected by a uniqueness constraint.

    Raised by the store instead of the driver's IntegrityError so callers
    never have to inspect database error text.
    """

    def __init__(self, column: str = "title"):
        self.column = column
        super().__init__(f"Unique constraint violated on '{column}'")
