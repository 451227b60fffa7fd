#!/usr/bin/env python3
"""
Domain exceptions shared by the assessment and matching services.

The web layer maps each class to an HTTP status in web/backend/exceptions.py.
"""


class ServiceException(Exception):
    """Base exception for service layer errors."""
    pass


class ValidationError(ServiceException):
    """Raised before any write when the request itself is malformed."""
    pass


class NotFoundError(ServiceException):
    """Raised when a record is missing, not owned by the caller, or not active.

    The three cases are reported identically so callers cannot probe for
    records that belong to other users.
    """
    pass


class ConflictError(ServiceException):
    """Raised when a record exists but its state forbids the operation."""
    pass


class IntegrityFailure(ServiceException):
    """Raised when a multi-row write could not be applied as a unit.

    The transaction has already been rolled back when this is raised, so the
    operation is safe to retry.
    """
    pass
