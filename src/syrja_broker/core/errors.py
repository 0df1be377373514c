"""Domain errors raised by the directory service.

Relay-side failures (rate limiting, unroutable destinations) are never raised;
they are counted and logged by the relay because the real-time protocol has no
negative acknowledgement channel.
"""

from __future__ import annotations


class DirectoryError(Exception):
    """Base class for directory failures surfaced to HTTP callers."""

    status_code: int = 400
    code: str = "directory_error"


class DirectoryValidationError(DirectoryError):
    """Raised when a request is missing required fields."""

    status_code = 400
    code = "missing_fields"


class DirectoryConflictError(DirectoryError):
    """Raised when an id is already owned by a different public key."""

    status_code = 409
    code = "id_taken"


class DirectoryNotFoundError(DirectoryError):
    """Raised when an id or owner has no live record."""

    status_code = 404
    code = "not_found"
