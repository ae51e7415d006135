import logging

from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import IntegrityError

logger = logging.getLogger(__name__)


class ChirpyError(Exception):
    """Base class for every error kind the service surfaces to callers."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Something went wrong on our end"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ChirpyError):
    """Malformed input shape. The caller has to fix the request."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class AuthenticationFailure(ChirpyError):
    """Wrong credential or a void token. Never says which check failed."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Could not validate credentials"


class MissingOrInvalidCredential(AuthenticationFailure):
    default_message = "Missing or invalid Authorization header"


class ForbiddenOperation(ChirpyError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Operation not permitted"


class NotFoundError(ChirpyError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class HashingError(ChirpyError):
    """The password hashing primitive failed. Internal, never shown to callers."""


class InvalidTokenError(Exception):
    """Raised by the access token verifier for any void token."""


async def chirpy_exception_handler(request: Request, exc: ChirpyError):
    request_id = getattr(request.state, "request_id", None)
    headers = None
    message = exc.message
    if isinstance(exc, AuthenticationFailure):
        headers = {"WWW-Authenticate": "Bearer"}
    if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("Internal error on %s %s", request.method, request.url.path, exc_info=exc)
        message = ChirpyError.default_message
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": message, "request_id": request_id},
        headers=headers,
    )

async def validation_exception_handler(request: Request, exc: RequestValidationError):
    request_id = getattr(request.state, "request_id", None)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors()), "message": "Validation Error", "request_id": request_id},
    )

async def integrity_exception_handler(request: Request, exc: IntegrityError):
    request_id = getattr(request.state, "request_id", None)
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": "Database conflict. A record with this identifier likely already exists.", "request_id": request_id},
    )
