"""
BottleNet Backend: Custom Exception Hierarchy
===============================================

What:  Application-specific exceptions for every failure the message
       lifecycle can produce.
Why:   Services raise typed errors; global exception handlers (main.py) turn
       them into HTTP status codes and JSON bodies. Services never deal with
       HTTP directly.
How:   Each exception carries a user-facing message and an optional context
       dict that is logged server-side but not returned to the client.

Exception Hierarchy:
    BottleNetError (base)
    ├── ValidationError              → 400 Bad Request (malformed id or payload)
    ├── NotFoundError                → 404 Not Found
    │   ├── SenderNotFoundError
    │   └── MessageNotFoundError
    ├── NoUsersAvailableError        → 500 (no eligible recipient)
    └── DatabaseError                → 500 (persistence failure)
        ├── StoreTimeoutError
        ├── ThreadUpdateFailedError
        └── UpdateFailedError

No retries happen anywhere: an exception means the operation failed and any
writes already made by earlier steps stay in place.
"""

from typing import Any, Dict, Optional


class BottleNetError(Exception):
    """
    Base exception for all BottleNet application errors.

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


class ValidationError(BottleNetError):
    """
    Raised when client input fails validation.

    When:    Malformed identifier in a path or query parameter, missing or
             malformed request body.
    HTTP:    400 Bad Request
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


class NotFoundError(BottleNetError):
    """
    Raised when a requested resource does not exist.

    The store returns None for missing documents; services convert that into
    this exception so the route layer stays free of existence checks.
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
        self.resource_id = resource_id


class SenderNotFoundError(NotFoundError):
    """The sender of a new message is not a registered user."""

    def __init__(self, sender_id: Optional[str] = None):
        super().__init__(resource="sender", resource_id=sender_id)


class MessageNotFoundError(NotFoundError):
    """A message referenced by id (respond, drop) does not exist."""

    def __init__(self, message_id: Optional[str] = None):
        super().__init__(resource="message", resource_id=message_id)


class NoUsersAvailableError(BottleNetError):
    """
    Raised when the recipient selector finds zero eligible candidates.

    When:    Only the sender exists, or the users collection is empty.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        exclude_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if exclude_id:
            ctx["exclude_id"] = exclude_id
        super().__init__(message="Failed to assign a random user", context=ctx)


class DatabaseError(BottleNetError):
    """
    Raised when a store operation fails.

    HTTP:    500 Internal Server Error

    The message returned to the client is always generic; the underlying
    driver error is only recorded in `context` and in the server log.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class StoreTimeoutError(DatabaseError):
    """A single store operation exceeded the configured per-operation timeout."""

    def __init__(
        self,
        operation: str = "operation",
        timeout: Optional[float] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["operation"] = operation
        if timeout is not None:
            ctx["timeout"] = timeout
        super().__init__(
            message=f"Store {operation} timed out",
            context=ctx,
        )
        self.timeout = timeout


class ThreadUpdateFailedError(DatabaseError):
    """Creating, loading or appending to a conversation thread failed."""

    def __init__(
        self,
        message: str = "Failed to add message to thread",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class UpdateFailedError(DatabaseError):
    """An in-place update (drop re-route, keep bookmark) failed."""

    def __init__(
        self,
        message: str = "Failed to update the message",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
