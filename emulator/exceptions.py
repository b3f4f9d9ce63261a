"""Error responses in the service's ``{"code": ..., "message": ...}`` shape."""

from typing import Optional

from fastapi import Request
from fastapi.responses import JSONResponse


class EmulatorError(Exception):
    """Base class for errors that map to an HTTP status."""

    status_code = 500
    code = "InternalServerError"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BadRequest(EmulatorError):
    status_code = 400
    code = "BadRequest"


class Unauthorized(EmulatorError):
    status_code = 401
    code = "Unauthorized"


class Forbidden(EmulatorError):
    status_code = 403
    code = "Forbidden"


class NotFound(EmulatorError):
    status_code = 404
    code = "NotFound"


class Conflict(EmulatorError):
    status_code = 409
    code = "Conflict"


class PreconditionFailed(EmulatorError):
    status_code = 412
    code = "PreconditionFailed"


def error_response(exc: EmulatorError, headers: Optional[dict[str, str]] = None) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"code": exc.code, "message": exc.message},
        headers=headers,
    )


async def emulator_error_handler(request: Request, exc: EmulatorError) -> JSONResponse:
    """Exception handler registered on the app for every EmulatorError."""
    return error_response(exc)
