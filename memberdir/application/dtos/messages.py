"""DTOs for rendered cards, packed outgoing messages and delivery."""

import json
from dataclasses import dataclass, field
from typing import Any

from memberdir.domain.enums import MessageKind, QueryKind


def serialized_size(payload: Any) -> int:
    """Return UTF-8 byte size of payload as compact JSON (how the channel measures it)."""
    return len(
        json.dumps(payload, ensure_ascii=False, separators=(",", ":")).encode("utf-8")
    )


@dataclass(frozen=True)
class Card:
    """One rendered presentational unit (a Flex bubble). Opaque to the packer."""

    contents: dict[str, Any]

    @property
    def size_bytes(self) -> int:
        return serialized_size(self.contents)


@dataclass(frozen=True)
class PackContext:
    """Caller context for packing one page of results into a message.

    label is what the user searched for (term or category display name);
    value is what goes into the next-page token (term or category code).
    """

    kind: QueryKind
    value: str
    label: str
    page: int = 1
    page_size: int = 6
    single_match_flow: bool = True

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


@dataclass
class OutgoingMessage:
    """One channel message ready for delivery.

    payload is the channel message object (Flex bubble, Flex carousel or text).
    """

    kind: MessageKind
    payload: dict[str, Any]
    summary: str
    card_count: int = 0
    has_sentinel: bool = False

    @property
    def size_bytes(self) -> int:
        return serialized_size(self.payload)

    @classmethod
    def text(cls, text: str) -> "OutgoingMessage":
        """Build a plain text message (summary is the text itself)."""
        return cls(
            kind=MessageKind.TEXT,
            payload={"type": "text", "text": text},
            summary=text,
        )


@dataclass(frozen=True)
class ChannelAddress:
    """Where a reply goes: a single-use reply token and/or a user id for push."""

    reply_token: str | None = None
    user_id: str | None = None

    def describe(self) -> str:
        """Short target description for logs (token prefix only)."""
        if self.reply_token:
            return f"reply:{self.reply_token[:8]}"
        return f"push:{self.user_id}"


@dataclass
class DeliveryOutcome:
    """Result of one delivery attempt (and of the fallback apology, if any)."""

    success: bool
    error: str | None = None
    apology_sent: bool = False
    details: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ChatEvent:
    """One inbound chat event reduced to what the lookup flow needs.

    kind is "text" for a text message and "postback" for a button action.
    """

    kind: str
    address: ChannelAddress
    text: str | None = None
    postback_data: str | None = None
