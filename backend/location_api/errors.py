"""Typed authentication errors and their HTTP rendering."""
import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AuthError(Exception):
    """Base class for failures crossing the authentication boundary.

    Every subclass carries a stable ``kind`` that clients can switch on, a
    human readable ``message`` and the HTTP status the API layer responds with.
    """

    kind = "auth_error"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Authentication error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"success": False, "error": self.kind, "message": self.message}


class InvalidCredentials(AuthError):
    # Unknown email and wrong password share this message.
    kind = "invalid_credentials"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid email or password"


class MissingCredentials(AuthError):
    kind = "missing_fields"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Email and password are required"


class DuplicateEmail(AuthError):
    kind = "duplicate_email"
    status_code = status.HTTP_409_CONFLICT
    default_message = "An account with this email already exists"


class Misconfiguration(AuthError):
    kind = "misconfiguration"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Server authentication is misconfigured"


class Unauthorized(AuthError):
    kind = "unauthorized"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class SignUpDisabled(AuthError):
    kind = "sign_up_disabled"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Sign-up is disabled"


async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    if isinstance(exc, Misconfiguration):
        logger.error(f"Auth misconfiguration on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "success": False,
            "error": "validation_error",
            "message": "Invalid request",
            "details": jsonable_encoder(exc.errors()),
        },
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "error": "Internal Server Error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the structured error handlers to an application."""
    app.add_exception_handler(AuthError, auth_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
