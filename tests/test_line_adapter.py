"""
LINE adapter tests

Signature verification, webhook body parsing and the reply/push HTTP calls.
"""

import json

import httpx
import pytest
from pydantic import ValidationError

from adapters.line import LineMessagingClient, parse_webhook_body, verify_signature
from conftest import CHANNEL_SECRET, sign, text_event, webhook_body
from core.errors import DeliveryFailure, JSONParseError, SignatureValidationFailed
from schemas.line import FollowEvent, MessageEvent, OutboundPush, OutboundReply, UnknownEvent, parse_event


class TestVerifySignature:

    def test_valid_signature(self):
        body = b'{"events": []}'

        # Should not raise
        verify_signature(CHANNEL_SECRET, body, sign(body))

    def test_wrong_secret(self):
        body = b'{"events": []}'

        with pytest.raises(SignatureValidationFailed) as exc_info:
            verify_signature(CHANNEL_SECRET, body, sign(body, secret="other"))

        assert exc_info.value.signature == sign(body, secret="other")

    @pytest.mark.parametrize("signature", [None, ""])
    def test_missing_signature(self, signature):
        with pytest.raises(SignatureValidationFailed):
            verify_signature(CHANNEL_SECRET, b"{}", signature)

    def test_non_ascii_signature_is_rejected(self):
        # Starlette hands header bytes over latin-1 decoded
        signature = b"\xff\xfe".decode("latin-1")

        with pytest.raises(SignatureValidationFailed):
            verify_signature(CHANNEL_SECRET, b"{}", signature)


class TestParseWebhookBody:

    def test_returns_raw_events(self):
        raw_events = [
            {"type": "follow", "replyToken": "rt", "source": {"type": "user", "userId": "U1"}},
            {"type": "message", "source": {"userId": "U1"}},
            "not-an-event",
        ]

        events = parse_webhook_body(webhook_body(*raw_events))

        assert events == raw_events

    @pytest.mark.parametrize(
        "body",
        [
            b"not json",
            b"[]",
            b'{"destination": "U0"}',
            b'{"events": {"type": "follow"}}',
        ],
    )
    def test_malformed_envelopes(self, body):
        with pytest.raises(JSONParseError):
            parse_webhook_body(body)


class TestParseEvent:

    def test_parses_known_and_unknown_types(self):
        follow = parse_event({"type": "follow", "replyToken": "rt", "source": {"type": "user", "userId": "U1"}})
        message = parse_event(text_event("hi"))
        joined = parse_event({"type": "memberJoined", "source": {"type": "group", "groupId": "G1"}})

        assert isinstance(follow, FollowEvent)
        assert isinstance(message, MessageEvent)
        assert message.message.text == "hi"
        assert message.user_id == "U1"
        assert isinstance(joined, UnknownEvent)
        assert joined.user_id is None

    @pytest.mark.parametrize(
        "raw",
        [
            {"type": "message", "source": {"userId": "U1"}},
            {"source": {"userId": "U1"}},
            "follow",
        ],
    )
    def test_malformed_events(self, raw):
        with pytest.raises(ValidationError):
            parse_event(raw)


def _client_with(handler):
    http_client = httpx.AsyncClient(
        transport=httpx.MockTransport(handler),
        base_url="https://api.line.me",
    )
    return LineMessagingClient(http_client=http_client, access_token="test-token")


class TestLineMessagingClient:

    @pytest.mark.asyncio
    async def test_reply_message_request(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"sentMessages": [{"id": "1", "quoteToken": "q"}]})

        result = await _client_with(handler).reply_message(OutboundReply(reply_token="rt-1", text="hello"))

        assert seen["path"] == "/v2/bot/message/reply"
        assert seen["auth"] == "Bearer test-token"
        assert seen["body"] == {"replyToken": "rt-1", "messages": [{"type": "text", "text": "hello"}]}
        assert result["sentMessages"][0]["id"] == "1"

    @pytest.mark.asyncio
    async def test_push_message_request(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={})

        result = await _client_with(handler).push_message(OutboundPush(target_user_id="U1", text="hi"))

        assert seen["path"] == "/v2/bot/message/push"
        assert seen["body"] == {"to": "U1", "messages": [{"type": "text", "text": "hi"}]}
        assert result == {}

    @pytest.mark.asyncio
    async def test_rejected_reply_raises_delivery_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"message": "Invalid reply token"})

        with pytest.raises(DeliveryFailure) as exc_info:
            await _client_with(handler).reply_message(OutboundReply(reply_token="stale", text="x"))

        assert exc_info.value.status_code == 400
        assert exc_info.value.detail == "Invalid reply token"

    @pytest.mark.asyncio
    async def test_transport_error_raises_delivery_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(DeliveryFailure) as exc_info:
            await _client_with(handler).push_message(OutboundPush(target_user_id="U1", text="hi"))

        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_missing_access_token(self, monkeypatch):
        from core.config import settings

        monkeypatch.setattr(settings, "line_channel_access_token", None)
        client = LineMessagingClient(
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200))),
        )

        with pytest.raises(RuntimeError):
            await client.push_message(OutboundPush(target_user_id="U1", text="hi"))
