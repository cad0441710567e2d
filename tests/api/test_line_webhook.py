"""LINE webhook: signature enforcement, event mapping and background dispatch."""

import json
from unittest.mock import AsyncMock

from httpx import AsyncClient

from memberdir.api.v1.dependencies import get_chat_dispatcher, get_settings_dep
from memberdir.core.config import Settings, get_settings
from memberdir.infrastructure.external.line.signature import compute_signature
from memberdir.main import app

SECRET = "test-channel-secret"
URL = "/api/v1/line/webhook"


def _configure(secret: str | None = SECRET) -> AsyncMock:
    """Override settings and the dispatcher; return the dispatcher mock."""
    settings = Settings(
        database_url=get_settings().database_url,
        line_channel_secret=secret,
        line_channel_access_token="test-access-token",
    )
    dispatcher = AsyncMock()
    dispatcher.dispatch_all = AsyncMock(return_value=0)
    app.dependency_overrides[get_settings_dep] = lambda: settings
    app.dependency_overrides[get_chat_dispatcher] = lambda: dispatcher
    return dispatcher


def _body(*events: dict) -> bytes:
    return json.dumps({"destination": "Ubot", "events": list(events)}).encode("utf-8")


def _text_event(text: str) -> dict:
    return {
        "type": "message",
        "replyToken": "rt-1",
        "source": {"type": "user", "userId": "U1"},
        "message": {"type": "text", "id": "m1", "text": text},
    }


async def test_secret_not_configured_returns_503(client: AsyncClient) -> None:
    """Without a channel secret the webhook is unavailable."""
    _configure(secret=None)
    response = await client.post(URL, content=_body(), headers={"X-Line-Signature": "x"})
    assert response.status_code == 503
    assert "not configured" in response.json()["message"].lower()


async def test_wrong_signature_returns_401(client: AsyncClient) -> None:
    """A signature over a different secret is rejected."""
    dispatcher = _configure()
    body = _body(_text_event("card golf"))
    response = await client.post(
        URL, content=body, headers={"X-Line-Signature": compute_signature(body, "other")}
    )
    assert response.status_code == 401
    assert "signature" in response.json()["message"].lower()
    dispatcher.dispatch_all.assert_not_awaited()


async def test_missing_signature_returns_401(client: AsyncClient) -> None:
    """No signature header is rejected."""
    _configure()
    response = await client.post(URL, content=_body())
    assert response.status_code == 401


async def test_valid_webhook_dispatches_events(client: AsyncClient) -> None:
    """Text and postback events are mapped and handed to the dispatcher."""
    dispatcher = _configure()
    body = _body(
        _text_event("card golf"),
        {
            "type": "postback",
            "replyToken": "rt-2",
            "source": {"type": "user", "userId": "U2"},
            "postback": {"data": "action=search_more&p=2&k=t&q=golf"},
        },
        {"type": "follow", "replyToken": "rt-3", "source": {"type": "user", "userId": "U3"}},
        {
            "type": "message",
            "replyToken": "rt-4",
            "source": {"type": "user", "userId": "U4"},
            "message": {"type": "sticker", "id": "m2"},
        },
    )
    response = await client.post(
        URL, content=body, headers={"X-Line-Signature": compute_signature(body, SECRET)}
    )
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "accepted_events": 2}

    dispatcher.dispatch_all.assert_awaited_once()
    (events,) = dispatcher.dispatch_all.await_args.args
    text_event, postback_event = events
    assert text_event.kind == "text"
    assert text_event.text == "card golf"
    assert text_event.address.reply_token == "rt-1"
    assert text_event.address.user_id == "U1"
    assert postback_event.kind == "postback"
    assert postback_event.postback_data == "action=search_more&p=2&k=t&q=golf"


async def test_verification_request_without_events(client: AsyncClient) -> None:
    """LINE's empty verification call is acknowledged without dispatching."""
    dispatcher = _configure()
    body = _body()
    response = await client.post(
        URL, content=body, headers={"X-Line-Signature": compute_signature(body, SECRET)}
    )
    assert response.status_code == 200
    assert response.json()["accepted_events"] == 0
    dispatcher.dispatch_all.assert_not_awaited()


async def test_signed_but_malformed_body_returns_400(client: AsyncClient) -> None:
    """A correctly signed body that is not a webhook payload is rejected."""
    _configure()
    body = b'{"events": "nope"}'
    response = await client.post(
        URL, content=body, headers={"X-Line-Signature": compute_signature(body, SECRET)}
    )
    assert response.status_code == 400
