"""
exceptions.py — Expected Failures & Their HTTP Shape
======================================================
Two kinds of failure exist in this app:

- EXPECTED: missing session, missing API key, provider error. These are
  DaybookError subclasses, logged as warnings and returned to the client
  as {"error": message} so the UI can show a toast.
- UNEXPECTED: anything else. Logged with a traceback and returned as a
  generic 500 with the same {"error": ...} shape.

Nothing is retried.
"""

import logging
from fastapi import Request, status
from starlette.exceptions import HTTPException
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class DaybookError(Exception):
    """Base class for expected failures."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(DaybookError):
    """Request was well-formed JSON but semantically unusable."""
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(DaybookError):
    status_code = status.HTTP_404_NOT_FOUND


class RelayError(DaybookError):
    """A relay could not run: missing field, missing key, bad payload."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class UpstreamError(DaybookError):
    """The chat-completion or transcription provider failed."""
    status_code = status.HTTP_502_BAD_GATEWAY


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def daybook_error_handler(request: Request, exc: DaybookError) -> JSONResponse:
    logger.warning(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
    return error_response(exc.status_code, exc.message)


def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    logger.warning(f"HTTP {exc.status_code} on {request.url.path}: {exc.detail}")
    return error_response(exc.status_code, str(exc.detail))


def unexpected_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unexpected error on {request.url.path}: {exc}", exc_info=True)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "An unexpected error occurred")
