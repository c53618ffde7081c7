"""Error taxonomy and the handlers that turn it into JSON responses.

Every API response uses the ``{success, data?|message?|error?}`` envelope.
Known failures carry a ``message``; anything unexpected carries ``error``.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class PortalError(Exception):
    """Base class for failures that map to a known API outcome."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(PortalError):
    """Required input is missing or unusable."""

    status_code = status.HTTP_400_BAD_REQUEST


class MissingFile(ValidationError):
    def __init__(self, message: str = "No file uploaded"):
        super().__init__(message)


class FileRejected(ValidationError):
    """Upload failed the type or size gate. Nothing was persisted."""


class NotFound(PortalError):
    status_code = status.HTTP_404_NOT_FOUND


class BlobNotFound(NotFound):
    """A blob reference points at bytes that cannot be read."""

    def __init__(self, message: str = "File not found on server"):
        super().__init__(message)


class DuplicateKey(PortalError):
    """Unique-constraint violation. Reported as a soft failure with HTTP 200."""

    status_code = status.HTTP_200_OK


class BackendUnavailable(PortalError):
    """Storage backend used before init or after shutdown."""


def error_body(message: str) -> dict:
    return {"success": False, "message": message}


async def portal_error_handler(request: Request, exc: PortalError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.message))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "error": str(exc)},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PortalError, portal_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
