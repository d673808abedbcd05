"""
API Exceptions
Errors raised by services and endpoints, rendered as

    {"error": "...", "message": "...", "code": "MACHINE_READABLE_CODE"}
"""
import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """
    Error with an HTTP status and a structured body.

    Attributes:
        status_code: HTTP status code
        error: Short error summary
        message: Human-readable explanation
        code: Machine-readable error code
    """

    def __init__(
        self,
        status_code: int,
        error: str,
        message: str,
        code: str,
    ):
        self.status_code = status_code
        self.error = error
        self.message = message
        self.code = code
        super().__init__(f"[{code}] {error}: {message}")

    def to_dict(self) -> dict:
        return {"error": self.error, "message": self.message, "code": self.code}

    @classmethod
    def bad_request(cls, error: str, message: str, code: str) -> "ApiError":
        return cls(status.HTTP_400_BAD_REQUEST, error, message, code)

    @classmethod
    def forbidden(cls, error: str, message: str, code: str) -> "ApiError":
        return cls(status.HTTP_403_FORBIDDEN, error, message, code)

    @classmethod
    def not_found(cls, error: str, message: str, code: str) -> "ApiError":
        return cls(status.HTTP_404_NOT_FOUND, error, message, code)

    @classmethod
    def conflict(cls, error: str, message: str, code: str) -> "ApiError":
        return cls(status.HTTP_409_CONFLICT, error, message, code)

    @classmethod
    def internal(cls, error: str, message: str, code: str) -> "ApiError":
        return cls(status.HTTP_500_INTERNAL_SERVER_ERROR, error, message, code)


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    """Render ApiError as the standard error body"""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler so clients always get the standard error body"""
    logger.exception(f"Unhandled exception on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Internal server error",
            "message": "An unexpected error occurred while processing your request. Please try again.",
            "code": "INTERNAL_ERROR",
        },
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render request validation failures as 400 with the standard error body"""
    errors = exc.errors()
    message = "The request could not be validated."
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query"))
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    logger.info(f"{request.method} {request.url.path} rejected: {message}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid data", "message": message, "code": "VALIDATION_ERROR"},
    )
