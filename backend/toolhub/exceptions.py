"""
Toolhub Backend — Custom Exception Hierarchy
==============================================

What:  Application-specific exceptions for the directory and its review workflow.
How:   Each exception carries a user-safe message and an optional context dict.
       Global exception handlers (registered in main.py) translate them into
       structured JSON error responses with the right HTTP status code.
Who:   Raised by services, the admin auth dependency and middleware.

Exception Hierarchy:
    ToolhubError (base)
    ├── ValidationError          → 400 Bad Request
    ├── AuthenticationError      → 401 Unauthorized
    ├── NotFoundError            → 404 Not Found
    ├── InvalidTransitionError   → 409 Conflict (request is not pending)
    ├── ConflictError            → 409 Conflict (uniqueness / still referenced)
    ├── RateLimitExceededError   → 429 Too Many Requests
    └── PersistenceError         → 500 Internal Server Error

Not every outcome is an exception: approving a request whose URL is already in
the catalog and partially failed tag links are reported on the result objects
of the approval workflow, not raised.
"""

from typing import Any, Dict, Optional


class ToolhubError(Exception):
    """
    Base exception for all Toolhub application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged; only some handlers return it)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(ToolhubError):
    """
    Raised when input fails a business rule.

    When:    Empty tool name/URL at materialization, unsupported target status,
             malformed raw tag field, update request with nothing to change.
    HTTP:    400 Bad Request

    Schema-level problems (wrong types, missing fields) never reach here:
    FastAPI rejects them with its own 422 before a service is called.
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


class AuthenticationError(ToolhubError):
    """Missing or wrong admin key. HTTP 401."""

    def __init__(
        self,
        message: str = "Admin credentials are missing or invalid",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(ToolhubError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing rows; services convert that None into
    this exception so routes stay free of existence checks.
    HTTP:    404 Not Found
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


class InvalidTransitionError(ToolhubError):
    """
    Raised when a tool request cannot move to the requested status.

    What:    Only `pending` requests may be approved or denied; `approved` and
             `denied` are terminal. Also raised to the loser of two concurrent
             transitions on the same request.
    HTTP:    409 Conflict
    """

    def __init__(
        self,
        current_status: str,
        target_status: str,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Cannot change request status from '{current_status}' to '{target_status}'. "
            f"Only pending requests can be reviewed."
        )
        ctx = context or {}
        ctx["current_status"] = current_status
        ctx["target_status"] = target_status
        super().__init__(message=message, context=ctx)
        self.current_status = current_status
        self.target_status = target_status


class ConflictError(ToolhubError):
    """
    Raised when a write would break a uniqueness or referential rule.

    When:    Duplicate tool URL, duplicate tag name or user email, deleting a tag
             that tools still use, suggesting a URL that is already listed.
    HTTP:    409 Conflict
    """

    def __init__(
        self,
        message: str = "The resource conflicts with existing data",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class PersistenceError(ToolhubError):
    """
    Raised when the underlying store fails unexpectedly.

    The client always receives a generic message; the original driver error
    is kept in `context` and logged server-side only.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(ToolhubError):
    """
    Raised when a client submits too many suggestions inside the window.

    HTTP:    429 Too Many Requests (with Retry-After)
    """

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Too many tool suggestions. Please wait {retry_after} seconds before submitting again."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
