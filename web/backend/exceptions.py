#!/usr/bin/env python3
"""
Error handlers for the web application.

Service errors are defined in core.errors; this module maps them to HTTP
statuses and the common JSON error envelope {success, error, type}.
"""

import logging
from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse

from core.errors import (
    ServiceException,
    ValidationError,
    NotFoundError,
    ConflictError,
    IntegrityFailure,
)

logger = logging.getLogger(__name__)

__all__ = [
    'ServiceException',
    'service_exception_handler',
    'http_exception_handler',
    'general_exception_handler',
    'status_for',
]

# Most specific first; the first isinstance match wins
STATUS_BY_ERROR = (
    (ValidationError, 400),
    (NotFoundError, 404),
    (ConflictError, 409),
    (IntegrityFailure, 503),
)

# Seconds a client should wait before retrying after a lost write race
CONFLICT_RETRY_AFTER = "1"


def status_for(exc: ServiceException) -> int:
    for error_type, status_code in STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return 500


def _envelope(status_code: int, error, error_type: str, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": error, "type": error_type},
        headers=headers,
    )


async def service_exception_handler(request: Request, exc: ServiceException) -> JSONResponse:
    """
    Handle service layer exceptions.

    Client errors are logged at info level. IntegrityFailure means the
    retries for a write race ran out, so the response carries Retry-After.
    """
    status_code = status_for(exc)
    headers = None
    if isinstance(exc, IntegrityFailure):
        logger.error(f"Write conflict persisted after retries in {request.url.path}: {exc}")
        headers = {"Retry-After": CONFLICT_RETRY_AFTER}
    elif status_code >= 500:
        logger.error(f"Service error in {request.url.path}: {exc}", exc_info=True)
    else:
        logger.info(f"{exc.__class__.__name__} in {request.url.path}: {exc}")

    return _envelope(status_code, str(exc), exc.__class__.__name__, headers)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return _envelope(exc.status_code, exc.detail, "HTTPException", getattr(exc, "headers", None))


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Hide unexpected errors behind a generic 500; the traceback goes to the log."""
    logger.exception(f"Unexpected error in {request.url.path}")
    return _envelope(500, "Internal server error", "InternalError")
