"""Application DTOs (no dependency on ORM or transport)."""

from memberdir.application.dtos.directory import (
    Category,
    DirectoryEntry,
    DirectoryPrincipal,
)
from memberdir.application.dtos.messages import (
    Card,
    ChannelAddress,
    ChatEvent,
    DeliveryOutcome,
    OutgoingMessage,
    PackContext,
)
from memberdir.application.dtos.search import (
    PageToken,
    SearchCriteria,
    SearchRequest,
    SearchResult,
)

__all__ = [
    "Card",
    "Category",
    "ChannelAddress",
    "ChatEvent",
    "DeliveryOutcome",
    "DirectoryEntry",
    "DirectoryPrincipal",
    "OutgoingMessage",
    "PackContext",
    "PageToken",
    "SearchCriteria",
    "SearchRequest",
    "SearchResult",
]
