"""Error handling utilities for security and privacy."""

import logging
import re

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .validation import INVALID_FORMAT, INVALID_INPUT

logger = logging.getLogger(__name__)

STORAGE_ERROR = "storage error"
INTERNAL_ERROR = "internal error"

# Regex to detect internal paths (Unix/Linux focus for container env)
_PATH_PATTERN = re.compile(r"(\/(?:app|home|var|tmp|usr|etc|opt|root|srv)\/[\w\-\.\/]+)")


def sanitize_message(msg: str) -> str:
    """
    Sanitize string messages to prevent leaking internal details.
    """
    if _PATH_PATTERN.search(msg):
        return _PATH_PATTERN.sub("[INTERNAL_PATH]", msg)
    return msg


def create_error_response(status_code: int, message: str, error_code: str | None = None) -> JSONResponse:
    content = {"message": message}
    if error_code:
        content["code"] = error_code
    return JSONResponse(status_code=status_code, content=content)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """
    Handle explicit HTTP exceptions (e.g. 400, 404, 403).
    """
    message = str(exc.detail)
    # Framework-raised 400s (e.g. undecodable bodies) share the client-facing wording
    if exc.status_code == status.HTTP_400_BAD_REQUEST and message not in (INVALID_INPUT, INVALID_FORMAT):
        message = INVALID_INPUT
    return create_error_response(exc.status_code, sanitize_message(message))


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Handle unparsable or non-object request bodies.
    """
    logger.debug(
        "Rejected request body",
        extra={"path": request.url.path, "data": {"errors": len(exc.errors())}},
    )
    return create_error_response(status.HTTP_400_BAD_REQUEST, INVALID_INPUT)


async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    """
    Handle database errors. Log the full error, return generic message.
    """
    logger.exception("Database error occurred", extra={"path": request.url.path})
    return create_error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, STORAGE_ERROR)


async def global_exception_handler(request: Request, exc: Exception):
    """
    Catch-all for unhandled exceptions.
    """
    logger.exception("Unhandled exception", extra={"path": request.url.path})
    return create_error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR, "INTERNAL_ERROR")


def register_exception_handlers(app: FastAPI):
    """
    Registrar for all exception handlers.
    """
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, database_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)
