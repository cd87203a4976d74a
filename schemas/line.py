from typing import Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class EventSource(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    type: Optional[str] = None
    user_id: Optional[str] = Field(None, alias="userId")
    group_id: Optional[str] = Field(None, alias="groupId")
    room_id: Optional[str] = Field(None, alias="roomId")


class MessageContent(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    type: str
    text: Optional[str] = None


class BaseEvent(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    type: str
    source: Optional[EventSource] = None
    reply_token: Optional[str] = Field(None, alias="replyToken")
    timestamp: Optional[int] = None
    mode: Optional[str] = None
    webhook_event_id: Optional[str] = Field(None, alias="webhookEventId")

    @property
    def user_id(self) -> Optional[str]:
        if self.source is None:
            return None
        return self.source.user_id


class FollowEvent(BaseEvent):
    type: Literal["follow"] = "follow"


class UnfollowEvent(BaseEvent):
    type: Literal["unfollow"] = "unfollow"


class MessageEvent(BaseEvent):
    type: Literal["message"] = "message"
    message: MessageContent


class UnknownEvent(BaseEvent):
    """Any event type this service does not act on (postback, join, beacon, ...)."""


WebhookEvent = Union[FollowEvent, UnfollowEvent, MessageEvent, UnknownEvent]

EVENT_MODELS = {
    "follow": FollowEvent,
    "unfollow": UnfollowEvent,
    "message": MessageEvent,
}


def parse_event(raw: Any) -> WebhookEvent:
    """Validate one raw webhook event; raises pydantic.ValidationError."""
    event_type = raw.get("type") if isinstance(raw, dict) else None
    model = EVENT_MODELS.get(event_type, UnknownEvent)
    return model.model_validate(raw)


class WebhookPayload(BaseModel):
    destination: Optional[str] = None
    # items are validated one at a time by parse_event
    events: List[Any]


class OutboundReply(BaseModel):
    reply_token: str
    text: str


class OutboundPush(BaseModel):
    target_user_id: str
    text: str
