from typing import Any, List

from fastapi import Request

from adapters.line import parse_webhook_body, verify_signature
from core.config import settings

SIGNATURE_HEADER = "X-Line-Signature"

async def get_verified_events(request: Request) -> List[Any]:
    """Authenticate the raw body against the channel secret, then check the envelope.

    Individual events come back raw; the dispatcher validates each one.

    Raises SignatureValidationFailed or JSONParseError; both are answered by
    the app-level exception handlers before any endpoint code runs.
    """
    secret = settings.require_line_channel_secret()
    body = await request.body()
    verify_signature(secret, body, request.headers.get(SIGNATURE_HEADER))
    return parse_webhook_body(body)
