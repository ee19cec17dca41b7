"""Translate core failures into HTTP responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from litterpick.core import errors

logger = logging.getLogger(__name__)

# Most specific class first; the first isinstance match wins.
STATUS_BY_ERROR: list[tuple[type[errors.LitterPickError], int]] = [
    (errors.NotFound, status.HTTP_404_NOT_FOUND),
    (errors.ConflictError, status.HTTP_409_CONFLICT),
    (errors.NotOwner, status.HTTP_403_FORBIDDEN),
    (errors.InsufficientExperience, status.HTTP_403_FORBIDDEN),
    (errors.DuplicateVote, status.HTTP_409_CONFLICT),
    (errors.CommentRequired, status.HTTP_422_UNPROCESSABLE_CONTENT),
    (errors.VerificationRejected, status.HTTP_400_BAD_REQUEST),
    (errors.EmailNotVerified, status.HTTP_403_FORBIDDEN),
    (errors.InvalidQuery, status.HTTP_400_BAD_REQUEST),
    (errors.StoreUnavailable, status.HTTP_503_SERVICE_UNAVAILABLE),
]


def status_for(exc: errors.LitterPickError) -> int:
    """Return the HTTP status code for a core failure."""
    for error_cls, status_code in STATUS_BY_ERROR:
        if isinstance(exc, error_cls):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def litterpick_error_handler(request: Request, exc: errors.LitterPickError) -> JSONResponse:
    status_code = status_for(exc)
    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.code)
    headers = {"Retry-After": "1"} if exc.retryable else None
    return JSONResponse(
        status_code=status_code,
        content={"error": exc.code, "detail": exc.message},
        headers=headers,
    )


async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_CONTENT,
        content={"error": "invalid_request", "detail": str(exc)},
    )


def register_error_handlers(app: FastAPI) -> None:
    """Install the core error handlers on an application."""
    app.add_exception_handler(errors.LitterPickError, litterpick_error_handler)
    app.add_exception_handler(ValueError, value_error_handler)
