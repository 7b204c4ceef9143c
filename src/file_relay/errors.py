"""Exception types and the FastAPI handlers that render them."""
import logging

import pydantic
from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class FileRelayError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidUploadRequest(FileRelayError):
    """The request itself is unacceptable: no items, too many, too large, bad URL."""

    status_code = status.HTTP_400_BAD_REQUEST


class FetchError(FileRelayError):
    """A URL-sourced upload could not be downloaded."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Failed to fetch {url}: {reason}")
        self.url = url
        self.reason = reason


class UploadProcessingError(FileRelayError):
    """Storing a named item failed; items before it stay stored."""


def error_envelope(message: str) -> dict:
    return {"success": False, "error": message}


async def handle_file_relay_error(request: Request, exc: FileRelayError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=error_envelope(exc.message))


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render framework HTTP errors (e.g. malformed multipart bodies) in the upload envelope."""
    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def handle_pydantic_validation_errors(request: Request, exc: pydantic.ValidationError) -> JSONResponse:
    errors = exc.errors()
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "success": False,
            "error": "; ".join(str(error["msg"]) for error in errors),
            "detail": [
                {
                    "loc": [str(part) for part in error.get("loc", ())],
                    "msg": error["msg"],
                }
                for error in errors
            ],
        },
    )


async def handle_broad_exceptions(request: Request, call_next):
    """Handle any exception that propagates out of a route as a 500 envelope."""
    try:
        return await call_next(request)
    except Exception:
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_envelope("Internal server error"),
        )
