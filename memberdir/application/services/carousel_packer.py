"""Carousel packer: fits one page of results into one channel message.

Degrades in two steps so a transport limit is never violated: a full
carousel, then a carousel truncated with a "view more" sentinel card, then
a plain-text list when the serialized carousel is over the byte budget.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any
from urllib.parse import urlencode

from memberdir.application.dtos.messages import (
    Card,
    OutgoingMessage,
    PackContext,
    serialized_size,
)
from memberdir.application.services.pagination_token import encode_token
from memberdir.core.constants import (
    ALT_TEXT_MAX_CHARS,
    CAROUSEL_HARD_CAP,
    CAROUSEL_OPERATING_CAP,
    FLEX_MESSAGE_MAX_BYTES,
    MAX_PAGE_NUMBER,
    MESSAGE_BYTE_BUDGET,
    POSTBACK_DATA_MAX_CHARS,
    TEXT_MESSAGE_MAX_CHARS,
    TEXT_PREVIEW_COUNT,
)
from memberdir.domain.enums import MessageKind, QueryKind
from memberdir.domain.exceptions import RenderOverflowException
from memberdir.shared.utils.sanitization import clip

if TYPE_CHECKING:
    from memberdir.application.dtos.directory import DirectoryEntry
    from memberdir.application.interfaces.services import ICardRenderer

logger = logging.getLogger(__name__)

SEARCH_MORE_ACTION = "action=search_more&"

# Per-field limits for the text fallback; five entries stay far below the text limit.
_NAME_CHARS = 80
_NICKNAME_CHARS = 40
_DETAIL_CHARS = 60
_URL_CHARS = 2000


class CarouselPacker:
    """Packs entries into a single card, a capped carousel, or a text list."""

    def __init__(
        self,
        renderer: "ICardRenderer",
        *,
        public_base_url: str,
        operating_cap: int = CAROUSEL_OPERATING_CAP,
        byte_budget: int = MESSAGE_BYTE_BUDGET,
    ) -> None:
        if not 2 <= operating_cap <= CAROUSEL_HARD_CAP:
            raise ValueError(
                f"operating_cap must be between 2 and {CAROUSEL_HARD_CAP}, got {operating_cap}"
            )
        if not 0 < byte_budget <= FLEX_MESSAGE_MAX_BYTES:
            raise ValueError(
                f"byte_budget must be between 1 and {FLEX_MESSAGE_MAX_BYTES}, got {byte_budget}"
            )
        self.renderer = renderer
        self.public_base_url = public_base_url.rstrip("/")
        self.operating_cap = operating_cap
        self.byte_budget = byte_budget

    @property
    def page_size(self) -> int:
        """Entries per interactive page: one slot stays free for the sentinel."""
        return self.operating_cap - 1

    def view_all_url(self, kind: QueryKind, value: str) -> str:
        """External "view all" link for a term or category search."""
        key = "category" if kind is QueryKind.CATEGORY else "q"
        return f"{self.public_base_url}/liff/search?{urlencode({key: value})}"

    def pack(
        self,
        entries: list["DirectoryEntry"],
        has_more_in_store: bool,
        total_found: int,
        context: PackContext,
    ) -> OutgoingMessage:
        """Build the outgoing message for one page of entries.

        Raises:
            ValueError: If entries is empty (callers reply "not found" instead).
        """
        if not entries:
            raise ValueError("Cannot pack an empty result page")
        summary = self.summary(context, total_found)
        try:
            if len(entries) == 1 and context.single_match_flow and not has_more_in_store:
                card = self.renderer.render(entries[0])
                return self._checked(
                    OutgoingMessage(
                        kind=MessageKind.CARD,
                        payload=_flex(summary, card.contents),
                        summary=summary,
                        card_count=1,
                    )
                )
            return self._checked(
                self._carousel(entries, has_more_in_store, total_found, context, summary)
            )
        except RenderOverflowException as e:
            logger.info(
                "Carousel over byte budget (%s > %s); falling back to text",
                e.details["size_bytes"],
                e.details["budget_bytes"],
            )
            return self.text_fallback(entries, total_found, context)

    def _carousel(
        self,
        entries: list["DirectoryEntry"],
        has_more_in_store: bool,
        total_found: int,
        context: PackContext,
        summary: str,
    ) -> OutgoingMessage:
        needs_sentinel = len(entries) >= self.operating_cap or has_more_in_store
        limit = self.operating_cap - 1 if needs_sentinel else self.operating_cap
        shown = entries[:limit]
        cards: list[Card] = [self.renderer.render(entry) for entry in shown]
        if needs_sentinel:
            cards.append(
                self._sentinel(
                    shown_count=len(shown),
                    next_page_known=has_more_in_store or len(entries) > len(shown),
                    total_found=total_found,
                    context=context,
                )
            )
        contents = {"type": "carousel", "contents": [c.contents for c in cards]}
        return OutgoingMessage(
            kind=MessageKind.CAROUSEL,
            payload=_flex(summary, contents),
            summary=summary,
            card_count=len(cards),
            has_sentinel=needs_sentinel,
        )

    def _sentinel(
        self,
        *,
        shown_count: int,
        next_page_known: bool,
        total_found: int,
        context: PackContext,
    ) -> Card:
        remaining = max(total_found - context.offset - shown_count, 0)
        next_page_data: str | None = None
        if next_page_known and context.page < MAX_PAGE_NUMBER:
            data = SEARCH_MORE_ACTION + encode_token(
                context.page + 1, context.value, context.kind
            )
            if len(data) <= POSTBACK_DATA_MAX_CHARS:
                next_page_data = data
            else:
                logger.info(
                    "Next-page action omitted: postback data is %d chars", len(data)
                )
        return self.renderer.render_sentinel(
            remaining=remaining,
            total=total_found,
            label=context.label,
            next_page_data=next_page_data,
            view_all_url=self.view_all_url(context.kind, context.value),
        )

    def _checked(self, message: OutgoingMessage) -> OutgoingMessage:
        size = message.size_bytes
        if size > self.byte_budget:
            raise RenderOverflowException(size, self.byte_budget)
        return message

    def text_fallback(
        self,
        entries: list["DirectoryEntry"],
        total_found: int,
        context: PackContext,
    ) -> OutgoingMessage:
        """Numbered plain-text list of the first few entries plus a "view all" link."""
        preview = entries[:TEXT_PREVIEW_COUNT]
        blocks = []
        for i, entry in enumerate(preview):
            line = f"{context.offset + i + 1}. {clip(entry.display_name, _NAME_CHARS)}"
            if entry.nickname:
                line += f" ({clip(entry.nickname, _NICKNAME_CHARS)})"
            detail = " | ".join(
                clip(part, _DETAIL_CHARS) for part in (entry.position, entry.company) if part
            )
            if detail:
                line += f"\n   {detail}"
            blocks.append(line)
        text = f"พบ {total_found} คน:\n\n" + "\n\n".join(blocks)
        if len(preview) < total_found:
            url = clip(self.view_all_url(context.kind, context.value), _URL_CHARS)
            text += (
                f"\n\n(แสดง {len(preview)} จาก {total_found})\n\nดูทั้งหมด: {url}"
            )
        message = OutgoingMessage.text(clip(text, TEXT_MESSAGE_MAX_CHARS))
        message.summary = self.summary(context, total_found)
        return message

    @staticmethod
    def summary(context: PackContext, total_found: int) -> str:
        """Alt text: page number, total and what was searched."""
        return clip(
            f'หน้า {context.page}: พบ {total_found} คนสำหรับ "{context.label}"',
            ALT_TEXT_MAX_CHARS,
        )


def _flex(alt_text: str, contents: dict[str, Any]) -> dict[str, Any]:
    return {"type": "flex", "altText": alt_text, "contents": contents}
