"""
Domain exceptions.

Every error carries an HTTP status code, a caller-facing message and optional
details. The exception handlers in ``garageops.main`` render them as
``{"error": message, "details": details}``.
"""
from typing import Any, Optional


class GarageError(Exception):
    """Base class for all errors surfaced to API callers."""

    status_code = 500

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(GarageError):
    """A required field is missing or malformed."""

    status_code = 400


class AuthenticationError(GarageError):
    """Credentials are missing or invalid."""

    status_code = 401


class NotFoundError(GarageError):
    """A referenced entity does not exist (or is soft-deleted)."""

    status_code = 404


class ConflictError(GarageError):
    """A uniqueness conflict could not be resolved."""

    status_code = 500


class JobCardNumberExhaustedError(ConflictError):
    """No free job card number could be allocated within the attempt limit."""


class PersistenceError(GarageError):
    """The database rejected or failed a statement."""

    status_code = 500
