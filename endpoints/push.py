import logging
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from adapters.base import BaseMessagingClient
from core.errors import DeliveryFailure, MissingFieldError
from dependencies.services import get_messaging_client
from schemas.line import OutboundPush
from schemas.message import ErrorResponse, SendMessageRequest, SendMessageResponse

router = APIRouter(tags=["push"])
logger = logging.getLogger(__name__)


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value if value.strip() else None


def _require_fields(body: SendMessageRequest) -> OutboundPush:
    target_user_id = _clean(body.targetUserId)
    message_text = _clean(body.messageText)
    missing = []
    if not target_user_id:
        missing.append("targetUserId")
    if not message_text:
        missing.append("messageText")
    if missing:
        raise MissingFieldError(missing)
    return OutboundPush(target_user_id=target_user_id, text=message_text)


@router.post(
    "/send-message",
    response_model=SendMessageResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def send_message(
    body: SendMessageRequest,
    messaging_client: BaseMessagingClient = Depends(get_messaging_client),
):
    try:
        push = _require_fields(body)
    except MissingFieldError as exc:
        return JSONResponse(status_code=400, content={"error": str(exc)})

    try:
        await messaging_client.push_message(push)
    except DeliveryFailure as exc:
        logger.error(
            "Push message failed",
            extra={
                "line_user_id": push.target_user_id,
                "status_code": exc.status_code,
                "detail": exc.detail,
            },
        )
        return JSONResponse(status_code=500, content={"error": "Failed to send message"})
    except Exception:
        logger.exception("Push message failed", extra={"line_user_id": push.target_user_id})
        return JSONResponse(status_code=500, content={"error": "Failed to send message"})

    logger.info("Push message sent", extra={"line_user_id": push.target_user_id})
    return SendMessageResponse(success=True, message="Message sent")
