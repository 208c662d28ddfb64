"""
Domain errors raised by the labor tracker services.

Each error kind maps to one HTTP status; the API layer renders them through a
single exception handler so that services stay transport-agnostic.
"""
from fastapi import status


class LaborTrackerError(Exception):
    """Base class for classified service errors."""

    kind = "error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class Unauthenticated(LaborTrackerError):
    """No resolvable tenant or user for the request."""

    kind = "unauthenticated"
    status_code = status.HTTP_401_UNAUTHORIZED


class InvalidArgument(LaborTrackerError):
    """Malformed hours, dates, filters or missing required fields."""

    kind = "invalid_argument"
    status_code = status.HTTP_400_BAD_REQUEST


class NotFound(LaborTrackerError):
    """A referenced employee, project or time entry does not resolve."""

    kind = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class Conflict(LaborTrackerError):
    """The write would duplicate an existing record."""

    kind = "conflict"
    status_code = status.HTTP_409_CONFLICT
