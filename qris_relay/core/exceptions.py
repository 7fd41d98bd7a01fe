from fastapi import Request, status
from fastapi.responses import ORJSONResponse

from qris_relay.core.logging import get_logger


class AppError(Exception):
    """Base application error; rendered as the ``{success: false, error}`` envelope.

    Every handler-detected failure is a 400, whatever the root cause.
    """

    def __init__(
        self,
        message: str,
        code: str = "ERROR",
        status_code: int = status.HTTP_400_BAD_REQUEST,
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        super().__init__(message)


class InvalidRequestError(AppError):
    def __init__(self, message: str = "Invalid request"):
        super().__init__(message, code="VALIDATION_ERROR")


class EncodingError(AppError):
    def __init__(self, message: str = "Failed to encode QR image"):
        super().__init__(message, code="QR_ENCODING_ERROR")


class UpstreamError(AppError):
    """Anything that went wrong talking to the donation platform."""

    code = "UPSTREAM_ERROR"

    def __init__(self, message: str):
        super().__init__(message, code=type(self).code)


class UpstreamTransportError(UpstreamError):
    code = "UPSTREAM_TRANSPORT"


class UpstreamBlocked(UpstreamError):
    code = "UPSTREAM_BLOCKED"


class UpstreamInvalidUser(UpstreamError):
    code = "UPSTREAM_INVALID_USER"


class UpstreamInvalidResponse(UpstreamError):
    code = "UPSTREAM_INVALID_RESPONSE"


class UpstreamUnexpectedShape(UpstreamError):
    code = "UPSTREAM_UNEXPECTED_SHAPE"


class UpstreamUnavailable(UpstreamError):
    code = "UPSTREAM_UNAVAILABLE"


def error_response(message: str, status_code: int) -> ORJSONResponse:
    return ORJSONResponse(
        status_code=status_code,
        content={"success": False, "error": message},
    )


async def app_exception_handler(request: Request, exc: AppError) -> ORJSONResponse:
    get_logger(__name__).warning("app_error", code=exc.code, error=exc.message, path=request.url.path)
    return error_response(exc.message, exc.status_code)


async def generic_exception_handler(request: Request, exc: Exception) -> ORJSONResponse:
    get_logger(__name__).exception("unhandled_exception", exc_info=exc)
    return error_response("Internal server error", status.HTTP_500_INTERNAL_SERVER_ERROR)
