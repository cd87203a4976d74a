from .line import (
    EventSource,
    MessageContent,
    FollowEvent,
    UnfollowEvent,
    MessageEvent,
    UnknownEvent,
    WebhookEvent,
    WebhookPayload,
    OutboundReply,
    OutboundPush,
    parse_event,
)
from .message import (
    DispatchResult,
    SendMessageRequest,
    SendMessageResponse,
    ErrorResponse,
)

__all__ = [
    "EventSource",
    "MessageContent",
    "FollowEvent",
    "UnfollowEvent",
    "MessageEvent",
    "UnknownEvent",
    "WebhookEvent",
    "WebhookPayload",
    "OutboundReply",
    "OutboundPush",
    "parse_event",
    "DispatchResult",
    "SendMessageRequest",
    "SendMessageResponse",
    "ErrorResponse",
]
