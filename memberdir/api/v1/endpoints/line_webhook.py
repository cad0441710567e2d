"""LINE webhook: signature check, then directory commands handled after the 200."""

import logging
from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request
from pydantic import ValidationError

from memberdir.api.v1.dependencies import get_chat_dispatcher, get_settings_dep
from memberdir.application.dtos.messages import ChannelAddress, ChatEvent
from memberdir.application.use_cases.chat_dispatch import ChatEventDispatcher
from memberdir.core.config import Settings
from memberdir.core.limiter import limit_webhook
from memberdir.infrastructure.external.line.signature import verify_signature
from memberdir.schemas.line import LineEvent, LineWebhookPayload, WebhookAckResponse

logger = logging.getLogger(__name__)

router = APIRouter()

SIGNATURE_HEADER = "X-Line-Signature"


def _to_chat_event(event: LineEvent) -> ChatEvent | None:
    """Reduce a LINE event to a ChatEvent; None for events the directory ignores."""
    address = ChannelAddress(
        reply_token=event.reply_token,
        user_id=event.source.user_id if event.source else None,
    )
    if event.type == "message" and event.message and event.message.type == "text":
        return ChatEvent(kind="text", address=address, text=event.message.text)
    if event.type == "postback" and event.postback:
        return ChatEvent(kind="postback", address=address, postback_data=event.postback.data)
    return None


async def _verified_payload(request: Request, settings: Settings) -> LineWebhookPayload:
    """Check X-Line-Signature against the raw body, then parse it.

    503 when the channel secret is not configured, 401 when the signature is
    missing or wrong, 400 when the body is not a webhook payload.
    """
    body = await request.body()
    if settings.line_channel_secret is None:
        raise HTTPException(
            status_code=503,
            detail="LINE webhook is not configured (LINE_CHANNEL_SECRET is not set).",
        )
    secret = settings.line_channel_secret.get_secret_value()
    if not verify_signature(body, request.headers.get(SIGNATURE_HEADER), secret):
        raise HTTPException(status_code=401, detail="Invalid or missing webhook signature")
    try:
        return LineWebhookPayload.model_validate_json(body)
    except ValidationError as e:
        logger.warning("Malformed LINE webhook payload: %s", e.error_count())
        raise HTTPException(status_code=400, detail="Malformed webhook payload") from e


@router.post("/webhook", response_model=WebhookAckResponse)
@limit_webhook
async def line_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    settings: Annotated[Settings, Depends(get_settings_dep)],
    dispatcher: Annotated[ChatEventDispatcher, Depends(get_chat_dispatcher)],
) -> WebhookAckResponse:
    """Acknowledge LINE immediately; directory commands run as a background task."""
    payload = await _verified_payload(request, settings)
    events = [e for e in (_to_chat_event(ev) for ev in payload.events) if e is not None]
    if events:
        background_tasks.add_task(dispatcher.dispatch_all, events)
    return WebhookAckResponse(accepted_events=len(events))
