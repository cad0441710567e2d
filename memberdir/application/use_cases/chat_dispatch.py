"""Chat event dispatch: resolve the sender's tenant, parse the command, run the lookup.

Each event is handled in isolation; a failure in one never affects the
others and never escapes to the webhook endpoint.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from urllib.parse import parse_qs

from memberdir.application.dtos.messages import ChatEvent, OutgoingMessage
from memberdir.application.services.carousel_packer import SEARCH_MORE_ACTION
from memberdir.application.services.reply_delivery import GENERIC_ERROR_TEXT
from memberdir.core.tenant_context import tenant_scope
from memberdir.shared.utils.sanitization import validate_identifier

if TYPE_CHECKING:
    from memberdir.application.interfaces.repositories import IDirectoryRepository
    from memberdir.application.services.reply_delivery import ReplyDeliveryService
    from memberdir.application.use_cases.lookup import DirectoryLookupService

logger = logging.getLogger(__name__)

# Text commands that start a term search, matched case-insensitively.
SEARCH_COMMANDS = ("card", "นามบัตร", "ค้นหา")
CATEGORY_ACTION = "search_category"


def parse_search_command(text: str | None) -> str | None:
    """Return the search term of a search command ("" when the term is missing).

    Returns None when text is not a search command.
    """
    if not text:
        return None
    stripped = text.strip()
    head, _, rest = stripped.partition(" ")
    if head.casefold() not in SEARCH_COMMANDS:
        return None
    return rest.strip()


class ChatEventDispatcher:
    """Routes chat events to the lookup flow under the sender's tenant context."""

    def __init__(
        self,
        lookup: "DirectoryLookupService",
        directory_repo: "IDirectoryRepository",
        delivery: "ReplyDeliveryService",
    ) -> None:
        self.lookup = lookup
        self.directory_repo = directory_repo
        self.delivery = delivery

    async def dispatch_all(self, events: list[ChatEvent]) -> int:
        """Handle events in order; return how many produced a reply."""
        handled = 0
        for event in events:
            try:
                if await self.dispatch(event):
                    handled += 1
            except Exception:
                logger.exception("Chat event failed: kind=%s", event.kind)
                await self.delivery.deliver(
                    event.address, OutgoingMessage.text(GENERIC_ERROR_TEXT)
                )
        return handled

    async def dispatch(self, event: ChatEvent) -> bool:
        """Handle one event. Returns False when the event is not a directory command."""
        route = self._route(event)
        if route is None:
            return False
        action, value = route

        user_id = event.address.user_id
        tenant_id = (
            await self.directory_repo.find_tenant_for_line_user(user_id)
            if user_id
            else None
        )
        if tenant_id is None:
            logger.info("Chat event from unlinked sender: action=%s", action)

        with tenant_scope(tenant_id):
            if action == "search":
                await self.lookup.search_by_term(event.address, tenant_id, value)
            elif action == "more":
                await self.lookup.next_page(event.address, tenant_id, value)
            else:
                await self.lookup.browse_category(event.address, tenant_id, value)
        return True

    @staticmethod
    def _route(event: ChatEvent) -> tuple[str, str] | None:
        if event.kind == "text":
            term = parse_search_command(event.text)
            return ("search", term) if term is not None else None
        if event.kind == "postback" and event.postback_data:
            data = event.postback_data
            if data.startswith(SEARCH_MORE_ACTION):
                return ("more", data[len(SEARCH_MORE_ACTION) :])
            params = parse_qs(data)
            if params.get("action") == [CATEGORY_ACTION]:
                code = (params.get("category_code") or [""])[0]
                try:
                    return ("category", validate_identifier(code))
                except ValueError:
                    logger.warning("Ignoring category postback with malformed code")
                    return None
        return None
