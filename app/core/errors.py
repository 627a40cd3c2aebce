"""
Album error taxonomy and the FastAPI handlers that turn it into JSON bodies.

Every failure the writer or reader can surface derives from ``AlbumError``
and carries its own HTTP status and a short machine-readable code.
"""

import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AlbumError(Exception):
    status_code = 500
    code = "album_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(AlbumError):
    """Bad or missing input; nothing was written."""
    status_code = 400
    code = "validation_error"


class FileTooLargeError(ValidationError):
    status_code = 413
    code = "file_too_large"


class EmptyAlbumError(AlbumError):
    """No image survived persistence; no manifest was written."""
    code = "empty_album"


class ArchiveError(AlbumError):
    """The ZIP bundle could not be built; the album was not published."""
    code = "archive_error"


class QrGenerationError(AlbumError):
    """Logged by the writer, never surfaced to clients."""
    code = "qr_error"


class NotFoundError(AlbumError):
    status_code = 404
    code = "not_found"


class CorruptDataError(AlbumError):
    status_code = 500
    code = "corrupt_data"


class StorageError(AlbumError):
    """Writing to the album directory failed (disk full, permissions)."""
    code = "storage_error"


UPLOAD_PATH = "/api/upload"


def error_body(exc: AlbumError, request: Request) -> dict:
    if request.url.path.startswith(UPLOAD_PATH) and not isinstance(exc, ValidationError):
        message = f"Failed to create album: {exc.message}"
    else:
        message = exc.message
    return {"error": message, "details": exc.code}


def register_exception_handlers(app: FastAPI):

    @app.exception_handler(AlbumError)
    async def album_error_handler(request: Request, exc: AlbumError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        else:
            logger.info("%s %s rejected: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=error_body(exc, request))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        first = errors[0] if errors else {}
        field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = f"Invalid request: {field}: {first.get('msg', 'malformed input')}" if field else "Invalid request"
        logger.info("%s %s rejected: %s", request.method, request.url.path, message)
        return JSONResponse(status_code=400, content={"error": message, "details": ValidationError.code})

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404 and exc.detail == "Not Found":
            return JSONResponse(status_code=404, content={"error": "Route not found"})
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error"},
        )

    return app
