"""
Error types and HTTP exception handlers.

Services raise `CrisperError` subclasses; the handlers registered by
`register_error_handlers` turn them, request-validation failures and any
stray `HTTPException` into the `{"message": ...}` body every client of the
API expects.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class CrisperError(Exception):
    """Base class for errors that map directly onto an HTTP status."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BadReferenceError(CrisperError):
    status_code = 400


class UnauthorizedError(CrisperError):
    status_code = 401

    def __init__(self, message: str = "Unauthorized request"):
        super().__init__(message)


class ForbiddenError(CrisperError):
    status_code = 403


class NotFoundError(CrisperError):
    status_code = 404


class ConflictError(CrisperError):
    status_code = 409


class InvalidInputError(CrisperError):
    status_code = 422


class ModelUnavailableError(CrisperError):
    status_code = 503


def _summarize(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Bad Request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {first.get('msg', 'invalid value')}" if location else first.get("msg", "")


def register_error_handlers(app: FastAPI) -> None:
    """
    Attach the JSON error handlers to the application.

    Args:
        app: The FastAPI application being built.
    """

    @app.exception_handler(CrisperError)
    async def crisper_error_handler(request: Request, exc: CrisperError):
        return JSONResponse({"message": exc.message}, status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            {"message": "Invalid request data", "info": _summarize(exc)},
            status_code=422,
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            {"message": str(exc.detail)},
            status_code=exc.status_code,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse({"message": "Internal server error"}, status_code=500)
