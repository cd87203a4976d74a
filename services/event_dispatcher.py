import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List

from pydantic import ValidationError

from adapters.base import BaseMessagingClient
from core.logging import reset_webhook_event_id, set_webhook_event_id
from schemas.line import (
    FollowEvent,
    MessageEvent,
    OutboundReply,
    UnfollowEvent,
    WebhookEvent,
    parse_event,
)
from schemas.message import DispatchResult
from services.user_store import UserStore

WELCOME_TEXT = "Thanks for adding us as a friend!"
ECHO_TEMPLATE = "You said: {text}"


class EventDispatcher:
    def __init__(self, messaging_client: BaseMessagingClient, user_store: UserStore):
        self.messaging_client = messaging_client
        self.user_store = user_store
        self.logger = logging.getLogger(__name__)
        self._handlers: Dict[str, Callable[[WebhookEvent, str], Awaitable[DispatchResult]]] = {
            "follow": self._handle_follow,
            "unfollow": self._handle_unfollow,
            "message": self._handle_message,
        }

    async def handle_event(self, event: WebhookEvent) -> DispatchResult:
        """Map one inbound event to at most one reply.

        Failures raised while replying propagate to the caller; everything
        else that is not actionable comes back as a ``skipped`` result.
        """
        user_id = event.user_id
        if not user_id:
            return self._skipped(event)

        self.logger.info(
            "Received LINE event",
            extra={"event_type": event.type, "line_user_id": user_id},
        )
        handler = self._handlers.get(event.type, self._handle_unsupported)
        return await handler(event, user_id)

    async def dispatch_all(self, raw_events: List[Any]) -> List[DispatchResult]:
        """Run every raw event concurrently and wait for all of them.

        Each event is parsed and handled in isolation: a malformed event or a
        failed reply yields a ``failed`` result in its slot, never an error
        for the whole batch.
        """
        tasks = [self._dispatch_isolated(raw) for raw in raw_events]
        if not tasks:
            return []
        return list(await asyncio.gather(*tasks))

    async def _dispatch_isolated(self, raw: Any) -> DispatchResult:
        fields = raw if isinstance(raw, dict) else {}
        event_type = str(fields.get("type") or "unknown")
        webhook_event_id = fields.get("webhookEventId")
        if not isinstance(webhook_event_id, str):
            webhook_event_id = None
        token = set_webhook_event_id(webhook_event_id)
        try:
            try:
                event = parse_event(raw)
            except ValidationError as exc:
                self.logger.warning(
                    "Malformed LINE event skipped",
                    extra={"event_type": event_type, "error_count": exc.error_count()},
                )
                return DispatchResult(
                    status="failed",
                    event_type=event_type,
                    webhook_event_id=webhook_event_id,
                    error=f"malformed event: {exc.error_count()} error(s)",
                )
            try:
                return await self.handle_event(event)
            except Exception as exc:
                self.logger.exception(
                    "LINE event dispatch failed",
                    extra={"event_type": event.type, "line_user_id": event.user_id},
                )
                return DispatchResult(
                    status="failed",
                    event_type=event.type,
                    webhook_event_id=event.webhook_event_id,
                    error=str(exc),
                )
        finally:
            reset_webhook_event_id(token)

    async def _handle_follow(self, event: FollowEvent, user_id: str) -> DispatchResult:
        self.logger.info("User followed the bot", extra={"line_user_id": user_id})
        await self.user_store.put(user_id)
        return await self._reply(event, WELCOME_TEXT)

    async def _handle_unfollow(self, event: UnfollowEvent, user_id: str) -> DispatchResult:
        # no reply token is issued for unfollow; the user can no longer receive pushes
        self.logger.info("User unfollowed the bot", extra={"line_user_id": user_id})
        await self.user_store.delete(user_id)
        return self._skipped(event)

    async def _handle_message(self, event: MessageEvent, user_id: str) -> DispatchResult:
        if event.message.type != "text":
            self.logger.info(
                "Ignoring non-text message",
                extra={"line_user_id": user_id, "message_type": event.message.type},
            )
            return self._skipped(event)

        text = event.message.text or ""
        self.logger.info("User sent text message", extra={"line_user_id": user_id, "text": text})
        return await self._reply(event, ECHO_TEMPLATE.format(text=text))

    async def _handle_unsupported(self, event: WebhookEvent, user_id: str) -> DispatchResult:
        return self._skipped(event)

    async def _reply(self, event: WebhookEvent, text: str) -> DispatchResult:
        if not event.reply_token:
            self.logger.warning(
                "Reply-eligible event has no reply token",
                extra={"event_type": event.type, "line_user_id": event.user_id},
            )
            return self._skipped(event)

        response = await self.messaging_client.reply_message(
            OutboundReply(reply_token=event.reply_token, text=text)
        )
        return DispatchResult(
            status="replied",
            event_type=event.type,
            webhook_event_id=event.webhook_event_id,
            response=response,
        )

    def _skipped(self, event: WebhookEvent) -> DispatchResult:
        return DispatchResult(
            status="skipped",
            event_type=event.type,
            webhook_event_id=event.webhook_event_id,
        )
