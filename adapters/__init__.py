from adapters.base import BaseMessagingClient
from adapters.line import LineMessagingClient, parse_webhook_body, verify_signature

__all__ = [
    "BaseMessagingClient",
    "LineMessagingClient",
    "parse_webhook_body",
    "verify_signature",
]
