"""
Domain errors raised by the graph store, blob storage and business functions.

Endpoints let these propagate; the handlers registered in main.py translate
them into HTTP responses. The headless editor catches them and turns them
into notifications.
"""

from typing import Optional


class TimelineError(Exception):
    """Base class for all domain errors."""

    status_code = 500

    def __init__(self, message: str, *, detail: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail or {}


class InvalidInputError(TimelineError):
    """Input failed validation before reaching the store."""

    status_code = 400


class AuthorizationError(TimelineError):
    """The actor lacks the capability required for the operation."""

    status_code = 403


class NotFoundError(TimelineError):
    status_code = 404


class ReferentialError(TimelineError):
    """The store rejected a write because a referenced row does not exist."""

    status_code = 409


class StorageError(TimelineError):
    """The blob store failed to upload, download or remove an object."""

    status_code = 502


class FunctionError(TimelineError):
    """A business function refused the request."""

    status_code = 400


class TransientError(TimelineError):
    """The database failed in a way that may succeed on retry."""

    status_code = 503
