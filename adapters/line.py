import base64
import hashlib
import hmac
import json
import logging
import time
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from adapters.base import BaseMessagingClient
from core.config import settings
from core.errors import DeliveryFailure, JSONParseError, SignatureValidationFailed
from core.http_client import get_async_client
from schemas.line import OutboundPush, OutboundReply, WebhookPayload

logger = logging.getLogger(__name__)

REPLY_PATH = "/v2/bot/message/reply"
PUSH_PATH = "/v2/bot/message/push"


def verify_signature(secret: str, body: bytes, signature: Optional[str]) -> None:
    if not signature:
        raise SignatureValidationFailed("no signature")

    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).digest()
    expected = base64.b64encode(digest).decode("utf-8")
    # headers arrive latin-1 decoded; compare bytes so non-ASCII input fails cleanly
    if not hmac.compare_digest(signature.encode("utf-8"), expected.encode("utf-8")):
        raise SignatureValidationFailed(
            f"signature validation failed, signature: {signature}",
            signature=signature,
        )


def parse_webhook_body(body: bytes) -> List[Any]:
    """Check the envelope only; events stay raw so each one fails on its own."""
    text = body.decode("utf-8", errors="replace")
    try:
        payload = WebhookPayload.model_validate(json.loads(text))
        return payload.events
    except json.JSONDecodeError as exc:
        raise JSONParseError(str(exc), raw=text) from exc
    except ValidationError as exc:
        raise JSONParseError(f"invalid webhook payload: {exc.error_count()} error(s)", raw=text) from exc


class LineMessagingClient(BaseMessagingClient):

    def __init__(self, http_client: Optional[httpx.AsyncClient] = None, access_token: Optional[str] = None):
        self._http_client = http_client
        self._access_token = access_token

    def _client(self) -> httpx.AsyncClient:
        return self._http_client or get_async_client()

    def _headers(self) -> Dict[str, str]:
        token = self._access_token or settings.require_line_access_token()
        return {"Authorization": f"Bearer {token}"}

    async def reply_message(self, reply: OutboundReply) -> Dict[str, Any]:
        payload = {
            "replyToken": reply.reply_token,
            "messages": [{"type": "text", "text": reply.text}],
        }
        return await self._post(REPLY_PATH, payload, "reply")

    async def push_message(self, push: OutboundPush) -> Dict[str, Any]:
        payload = {
            "to": push.target_user_id,
            "messages": [{"type": "text", "text": push.text}],
        }
        return await self._post(PUSH_PATH, payload, "push")

    async def _post(self, path: str, payload: Dict[str, Any], operation: str) -> Dict[str, Any]:
        headers = self._headers()
        start = time.perf_counter()
        try:
            response = await self._client().post(path, json=payload, headers=headers)
        except httpx.RequestError as exc:
            elapsed = time.perf_counter() - start
            logger.exception(
                "LINE %s request failed",
                operation,
                extra={"elapsed_s": round(elapsed, 3)},
            )
            raise DeliveryFailure(f"LINE {operation} request failed: {exc}") from exc

        elapsed = time.perf_counter() - start
        logger.info(
            "LINE %s completed",
            operation,
            extra={
                "status_code": response.status_code,
                "elapsed_s": round(elapsed, 3),
                "line_request_id": response.headers.get("x-line-request-id"),
            },
        )
        if response.status_code >= 400:
            detail = _error_detail(response)
            logger.error(
                "LINE %s rejected (%s): %s",
                operation,
                response.status_code,
                detail,
            )
            raise DeliveryFailure(
                f"LINE {operation} rejected with status {response.status_code}",
                status_code=response.status_code,
                detail=detail,
            )

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            return {}


def _error_detail(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return response.text
