"""
Domain-specific exceptions for the Cursor Pagination API.

These exceptions represent contract violations and backing-store failures
and are mapped to appropriate HTTP status codes in the API layer.

Malformed or stale cursors are NOT errors: they are absorbed by the cursor
codec and the request restarts from the first page.
"""

from typing import Any


class CursorPaginationError(Exception):
    """Base exception for all pagination domain errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(CursorPaginationError):
    """
    Raised when a caller violates the pagination contract.

    Examples:
    - Non-positive page size
    - Backward navigation without a cursor
    - Missing filter context

    HTTP Status: 400 Bad Request
    """

    pass


class ColumnValidationError(ValidationError):
    """
    Raised when a ranked query names an unknown column or an empty
    selection/order set. Raised before any SQL text is built.

    HTTP Status: 400 Bad Request
    """

    pass


class NotFoundError(CursorPaginationError):
    """
    Raised when a page request yields no rows.

    HTTP Status: 404 Not Found
    """

    pass


class StoreUnavailableError(CursorPaginationError):
    """
    Raised when the backing store fails or times out.

    Transient from the caller's perspective; there is no retry in the service.

    HTTP Status: 503 Service Unavailable
    """

    pass


class PaginationInvariantError(CursorPaginationError):
    """
    Raised when sentinel-row accounting does not add up.

    Indicates a defect, never a user condition.

    HTTP Status: 500 Internal Server Error
    """

    pass


ERROR_STATUS_MAP = {
    ValidationError: 400,
    NotFoundError: 404,
    StoreUnavailableError: 503,
    PaginationInvariantError: 500,
}


def get_status_code(error: Exception) -> int:
    """
    Get the HTTP status code for a given exception.

    Subclasses inherit the status of the nearest mapped base class.

    Args:
        error: The exception instance

    Returns:
        HTTP status code (defaults to 500 for unknown errors)
    """
    for cls in type(error).__mro__:
        if cls in ERROR_STATUS_MAP:
            return ERROR_STATUS_MAP[cls]
    return 500
