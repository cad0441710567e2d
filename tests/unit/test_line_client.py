"""LineMessagingClient and LineLoginClient against an httpx mock transport."""

import json

import httpx
import pytest

from memberdir.infrastructure.exceptions import LineApiException
from memberdir.infrastructure.external.line.client import (
    LineLoginClient,
    LineMessagingClient,
)


def _client(handler) -> tuple[LineMessagingClient, httpx.AsyncClient]:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return LineMessagingClient("token-123", base_url="https://api.line.test/v2", http_client=http), http


async def test_reply_posts_message_body() -> None:
    """Reply sends the token and messages with the bearer header."""
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={})

    client, http = _client(handler)
    async with http:
        await client.reply("rt-1", [{"type": "text", "text": "สวัสดี"}])

    (request,) = seen
    assert str(request.url) == "https://api.line.test/v2/bot/message/reply"
    assert request.headers["Authorization"] == "Bearer token-123"
    body = json.loads(request.content.decode("utf-8"))
    assert body == {"replyToken": "rt-1", "messages": [{"type": "text", "text": "สวัสดี"}]}
    # Non-ASCII text is sent as UTF-8, not as escapes.
    assert "สวัสดี".encode("utf-8") in request.content


async def test_push_posts_to_user() -> None:
    """Push addresses the user id."""
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={})

    client, http = _client(handler)
    async with http:
        await client.push("U1", [{"type": "text", "text": "hi"}])
    assert seen[0].url.path == "/v2/bot/message/push"
    assert json.loads(seen[0].content)["to"] == "U1"


async def test_error_status_raises_line_api_exception() -> None:
    """A non-2xx response raises with the status code."""
    client, http = _client(lambda request: httpx.Response(400, json={"message": "Invalid reply token"}))
    async with http:
        with pytest.raises(LineApiException) as exc_info:
            await client.reply("rt-1", [{"type": "text", "text": "hi"}])
    assert exc_info.value.status_code == 400
    assert exc_info.value.error_code == "LINE_API_ERROR"
    assert "Invalid reply token" in exc_info.value.details["body"]


async def test_transport_error_raises_line_api_exception() -> None:
    """Connection failures are reported the same way, without a status."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    client, http = _client(handler)
    async with http:
        with pytest.raises(LineApiException) as exc_info:
            await client.push("U1", [{"type": "text", "text": "hi"}])
    assert exc_info.value.status_code is None


async def test_too_many_messages_rejected() -> None:
    """At most five messages per request."""
    client, http = _client(lambda request: httpx.Response(200))
    async with http:
        with pytest.raises(ValueError):
            await client.push("U1", [{"type": "text", "text": str(i)} for i in range(6)])


def _login_client(handler) -> tuple[LineLoginClient, httpx.AsyncClient]:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return (
        LineLoginClient("1650000000", base_url="https://api.line.test/oauth2/v2.1", http_client=http),
        http,
    )


async def test_verify_id_token_returns_subject() -> None:
    """A valid ID token yields its LINE user id; the channel id is sent as client_id."""
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"iss": "https://access.line.me", "sub": "U1", "aud": "1650000000"})

    client, http = _login_client(handler)
    async with http:
        assert await client.verify_id_token("id-token-1") == "U1"

    (request,) = seen
    assert str(request.url) == "https://api.line.test/oauth2/v2.1/verify"
    assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"
    form = dict(pair.split("=", 1) for pair in request.content.decode().split("&"))
    assert form == {"id_token": "id-token-1", "client_id": "1650000000"}


async def test_rejected_id_token_returns_none() -> None:
    """LINE answers 400 for expired or foreign tokens."""
    client, http = _login_client(
        lambda request: httpx.Response(400, json={"error": "invalid_request", "error_description": "IdToken expired."})
    )
    async with http:
        assert await client.verify_id_token("expired") is None


async def test_empty_id_token_is_not_sent() -> None:
    """An empty credential never reaches LINE."""
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"sub": "U1"})

    client, http = _login_client(handler)
    async with http:
        assert await client.verify_id_token("") is None
    assert seen == []


async def test_verify_server_error_raises() -> None:
    """A LINE outage is an error, not an anonymous caller."""
    client, http = _login_client(lambda request: httpx.Response(503, text="unavailable"))
    async with http:
        with pytest.raises(LineApiException) as exc_info:
            await client.verify_id_token("id-token-1")
    assert exc_info.value.status_code == 503
