import logging
from typing import Optional

from fastapi import FastAPI, Request, Response
from fastapi.responses import PlainTextResponse

logger = logging.getLogger(__name__)


class LineError(Exception):
    """Base class for failures talking to or hearing from the LINE platform."""


class SignatureValidationFailed(LineError):
    def __init__(self, message: str, signature: Optional[str] = None):
        super().__init__(message)
        self.signature = signature


class JSONParseError(LineError):
    def __init__(self, message: str, raw: Optional[str] = None):
        super().__init__(message)
        self.raw = raw


class MissingFieldError(LineError):
    def __init__(self, fields: list[str]):
        super().__init__(f"{' and '.join(fields)} required")
        self.fields = fields


class DeliveryFailure(LineError):
    """A reply or push call did not reach LINE, or LINE refused it."""

    def __init__(self, message: str, status_code: Optional[int] = None, detail: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail


async def _signature_failed_handler(request: Request, exc: SignatureValidationFailed) -> Response:
    logger.warning(
        "Webhook signature verification failed",
        extra={"path": request.url.path},
    )
    return PlainTextResponse(str(exc), status_code=401)


async def _json_parse_handler(request: Request, exc: JSONParseError) -> Response:
    logger.warning(
        "Webhook payload could not be parsed",
        extra={"path": request.url.path, "reason": str(exc)},
    )
    return PlainTextResponse(str(exc), status_code=400)


async def _unhandled_handler(request: Request, exc: Exception) -> Response:
    logger.error(
        "Unhandled error",
        exc_info=(type(exc), exc, exc.__traceback__),
        extra={"path": request.url.path},
    )
    return Response(status_code=500)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(SignatureValidationFailed, _signature_failed_handler)
    app.add_exception_handler(JSONParseError, _json_parse_handler)
    app.add_exception_handler(Exception, _unhandled_handler)
