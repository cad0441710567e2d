"""Reply delivery: one attempt to send a message, then a best-effort apology."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from memberdir.application.dtos.messages import (
    ChannelAddress,
    DeliveryOutcome,
    OutgoingMessage,
)
from memberdir.domain.exceptions import DeliveryFailureException

if TYPE_CHECKING:
    from memberdir.application.interfaces.services import IChannelClient

logger = logging.getLogger(__name__)

GENERIC_ERROR_TEXT = "เกิดข้อผิดพลาด กรุณาลองใหม่อีกครั้ง"


class ReplyDeliveryService:
    """Thin adapter over the channel client. Never retries and never raises."""

    def __init__(self, channel: "IChannelClient") -> None:
        self.channel = channel

    async def deliver(
        self, address: ChannelAddress, message: OutgoingMessage
    ) -> DeliveryOutcome:
        """Send message by reply token when present, else by push.

        On failure the error is logged with message kind, size and target, and
        a generic apology text is attempted once. A reply token is single-use,
        so the apology goes by push when a user id is known.
        """
        try:
            await self._send(address, message, prefer_reply=True)
        except Exception as e:
            failure = DeliveryFailureException(
                message_kind=message.kind.value,
                size_bytes=message.size_bytes,
                target=address.describe(),
                reason=str(e),
            )
            logger.error(
                "Delivery failed: kind=%s size=%d bytes cards=%d target=%s reason=%s",
                message.kind.value,
                failure.details["size_bytes"],
                message.card_count,
                failure.details["target"],
                e,
            )
            apology_sent = await self._apologize(address)
            return DeliveryOutcome(
                success=False,
                error=failure.error_code,
                apology_sent=apology_sent,
                details=failure.details,
            )
        return DeliveryOutcome(success=True)

    async def _send(
        self, address: ChannelAddress, message: OutgoingMessage, *, prefer_reply: bool
    ) -> None:
        messages = [message.payload]
        if address.reply_token and (prefer_reply or not address.user_id):
            await self.channel.reply(address.reply_token, messages)
        elif address.user_id:
            await self.channel.push(address.user_id, messages)
        else:
            raise ValueError("Channel address has neither a reply token nor a user id")

    async def _apologize(self, address: ChannelAddress) -> bool:
        try:
            await self._send(
                address, OutgoingMessage.text(GENERIC_ERROR_TEXT), prefer_reply=False
            )
        except Exception as e:
            logger.error("Apology delivery failed: target=%s reason=%s", address.describe(), e)
            return False
        return True
