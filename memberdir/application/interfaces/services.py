"""Service interfaces (ports) for rendering and channel delivery."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from memberdir.application.dtos.directory import DirectoryEntry
    from memberdir.application.dtos.messages import Card


class ICardRenderer(Protocol):
    """Turns one directory entry into one opaque presentational card."""

    def render(self, entry: DirectoryEntry) -> Card:
        """Render a single entry."""

    def render_sentinel(
        self,
        *,
        remaining: int,
        total: int,
        label: str,
        next_page_data: str | None,
        view_all_url: str,
    ) -> Card:
        """Render the synthetic "view more" card."""


class IChannelClient(Protocol):
    """Messaging channel API (reply with a one-time token, or push to a user)."""

    async def reply(self, reply_token: str, messages: list[dict[str, Any]]) -> None:
        """Send messages using a reply token. Raises on non-2xx."""

    async def push(self, user_id: str, messages: list[dict[str, Any]]) -> None:
        """Push messages to a user. Raises on non-2xx."""
