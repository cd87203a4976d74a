import logging
from typing import Any, List
from fastapi import APIRouter, Depends, Response
from dependencies.line import get_verified_events
from dependencies.services import get_event_dispatcher
from schemas.message import DispatchResult
from services.event_dispatcher import EventDispatcher

router = APIRouter()
logger = logging.getLogger(__name__)

@router.post("/webhook", response_model=List[DispatchResult])
async def webhook(
    events: List[Any] = Depends(get_verified_events),
    dispatcher: EventDispatcher = Depends(get_event_dispatcher),
):
    logger.info("Webhook received", extra={"event_count": len(events)})
    try:
        results = await dispatcher.dispatch_all(events)
    except Exception:
        logger.exception(
            "Webhook fan-out failed",
            extra={"event_count": len(events)},
        )
        return Response(status_code=500)

    failed = sum(1 for result in results if result.status == "failed")
    if failed:
        logger.warning(
            "Webhook handled with failures",
            extra={"event_count": len(events), "failed_count": failed},
        )
    return results
