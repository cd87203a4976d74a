from abc import ABC, abstractmethod
from typing import Any, Dict

from schemas.line import OutboundPush, OutboundReply

class BaseMessagingClient(ABC):

    @abstractmethod
    async def reply_message(self, reply: OutboundReply) -> Dict[str, Any]:
        """Answer an inbound event through its single-use reply token."""

    @abstractmethod
    async def push_message(self, push: OutboundPush) -> Dict[str, Any]:
        """Send an unsolicited message to a user."""
