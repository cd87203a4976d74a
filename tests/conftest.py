"""Pytest configuration and fixtures."""

import base64
import hashlib
import hmac
import json
import sys
from pathlib import Path

import pytest

# Add project root to sys.path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from adapters.base import BaseMessagingClient  # noqa: E402
from core.config import settings  # noqa: E402
from core.errors import DeliveryFailure  # noqa: E402
from services.user_store import UserStore  # noqa: E402

CHANNEL_SECRET = "test-channel-secret"


class FakeMessagingClient(BaseMessagingClient):
    """Records outbound calls; reply tokens in ``failing_tokens`` raise DeliveryFailure."""

    def __init__(self, failing_tokens=(), fail_push=False):
        self.replies = []
        self.pushes = []
        self.failing_tokens = set(failing_tokens)
        self.fail_push = fail_push

    async def reply_message(self, reply):
        self.replies.append(reply)
        if reply.reply_token in self.failing_tokens:
            raise DeliveryFailure("LINE reply rejected with status 400", status_code=400, detail="Invalid reply token")
        return {"sentMessages": [{"id": f"sent-{len(self.replies)}"}]}

    async def push_message(self, push):
        self.pushes.append(push)
        if self.fail_push:
            raise DeliveryFailure("LINE push rejected with status 400", status_code=400, detail="The user has blocked")
        return {}


class RecordingUserStore(UserStore):
    def __init__(self):
        self.puts = []
        self.deletes = []

    async def put(self, user_id):
        self.puts.append(user_id)

    async def delete(self, user_id):
        self.deletes.append(user_id)


def sign(body: bytes, secret: str = CHANNEL_SECRET) -> str:
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("utf-8")


def webhook_body(*events) -> bytes:
    return json.dumps({"destination": "Uxxxxxxxxxxxxxx", "events": list(events)}).encode("utf-8")


def follow_event(user_id="U1", reply_token="token-follow"):
    return {
        "type": "follow",
        "mode": "active",
        "timestamp": 1700000000000,
        "webhookEventId": f"evt-follow-{user_id}",
        "replyToken": reply_token,
        "source": {"type": "user", "userId": user_id},
    }


def text_event(text, user_id="U1", reply_token="token-message"):
    return {
        "type": "message",
        "mode": "active",
        "timestamp": 1700000000000,
        "webhookEventId": f"evt-{reply_token}",
        "replyToken": reply_token,
        "source": {"type": "user", "userId": user_id},
        "message": {"id": "100001", "type": "text", "text": text},
    }


@pytest.fixture
def messaging_client():
    return FakeMessagingClient()


@pytest.fixture
def user_store():
    return RecordingUserStore()


@pytest.fixture
def channel_secret(monkeypatch):
    monkeypatch.setattr(settings, "line_channel_secret", CHANNEL_SECRET)
    return CHANNEL_SECRET


@pytest.fixture
def app_client(channel_secret, messaging_client, user_store):
    from fastapi.testclient import TestClient

    from dependencies.services import get_messaging_client, get_user_store
    from main import app

    app.dependency_overrides[get_messaging_client] = lambda: messaging_client
    app.dependency_overrides[get_user_store] = lambda: user_store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
