"""Chat lookup flow: search, render, pack and deliver one page of results.

Every failure is converted into a reply here; nothing propagates to the
webhook handler.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from memberdir.application.dtos.messages import (
    ChannelAddress,
    DeliveryOutcome,
    OutgoingMessage,
    PackContext,
)
from memberdir.application.dtos.search import SearchRequest
from memberdir.application.services.pagination_token import decode_token
from memberdir.application.services.reply_delivery import GENERIC_ERROR_TEXT
from memberdir.domain.enums import QueryKind
from memberdir.domain.exceptions import (
    EmptyQueryException,
    SearchTimeoutException,
    TenantNotResolvableException,
)
from memberdir.shared.telemetry.tracing import traced

if TYPE_CHECKING:
    from memberdir.application.services.carousel_packer import CarouselPacker
    from memberdir.application.services.category_resolver import CategoryResolver
    from memberdir.application.services.reply_delivery import ReplyDeliveryService
    from memberdir.application.use_cases.search import DirectorySearchService

logger = logging.getLogger(__name__)

EMPTY_QUERY_TEXT = (
    "ค้นหานามบัตร\n\nกรุณาพิมพ์คำค้นหา เช่น:\n• ชื่อ-นามสกุล\n• ชื่อเล่น\n"
    "• ชื่อบริษัท\n• คำค้นหาอื่นๆ\n\nตัวอย่าง: \"card กบ\" หรือ \"card Microsoft\""
)
NOT_FOUND_TEXT = (
    'ไม่พบข้อมูลที่ตรงกับ "{label}"\n\nลองค้นหาด้วย:\n• ชื่อหรือชื่อเล่นอื่น\n'
    "• ชื่อบริษัท\n• คำสำคัญที่เกี่ยวข้อง"
)
NO_MORE_RESULTS_TEXT = 'ไม่มีผลลัพธ์เพิ่มเติมสำหรับ "{label}"'
TIMEOUT_TEXT = "การค้นหาใช้เวลานานเกินไป กรุณาลองใหม่อีกครั้ง"
UNLINKED_USER_TEXT = "ไม่พบข้อมูลของคุณในระบบ กรุณาลงทะเบียนก่อน"


class DirectoryLookupService:
    """Glues the search engine, the packer and reply delivery for chat requests."""

    def __init__(
        self,
        search_service: "DirectorySearchService",
        packer: "CarouselPacker",
        delivery: "ReplyDeliveryService",
        category_resolver: "CategoryResolver",
        *,
        searchable_statuses: tuple[str, ...] = ("member", "visitor"),
        search_timeout_seconds: float = 4.0,
    ) -> None:
        self.search_service = search_service
        self.packer = packer
        self.delivery = delivery
        self.category_resolver = category_resolver
        self.searchable_statuses = searchable_statuses
        self.search_timeout_seconds = search_timeout_seconds

    async def search_by_term(
        self, address: ChannelAddress, tenant_id: str | None, term: str
    ) -> DeliveryOutcome:
        """First page of a free-text search."""
        return await self._respond(address, tenant_id, QueryKind.TERM, term, page=1)

    async def browse_category(
        self, address: ChannelAddress, tenant_id: str | None, category_code: str
    ) -> DeliveryOutcome:
        """First page of a category browse."""
        return await self._respond(
            address, tenant_id, QueryKind.CATEGORY, category_code, page=1
        )

    async def next_page(
        self, address: ChannelAddress, tenant_id: str | None, token: str
    ) -> DeliveryOutcome:
        """Page named by a pagination token. The tenant never comes from the token."""
        decoded = decode_token(token)
        return await self._respond(
            address, tenant_id, decoded.kind, decoded.value, page=decoded.page
        )

    async def _respond(
        self,
        address: ChannelAddress,
        tenant_id: str | None,
        kind: QueryKind,
        value: str,
        page: int,
    ) -> DeliveryOutcome:
        try:
            if not tenant_id:
                raise TenantNotResolvableException(address.user_id)
            message = await self.build_page(tenant_id, kind, value, page)
        except EmptyQueryException:
            message = OutgoingMessage.text(EMPTY_QUERY_TEXT)
        except TenantNotResolvableException:
            message = OutgoingMessage.text(UNLINKED_USER_TEXT)
        except SearchTimeoutException as e:
            logger.warning("Search hard timeout: tenant=%s details=%s", tenant_id, e.details)
            message = OutgoingMessage.text(TIMEOUT_TEXT)
        except Exception:
            logger.exception("Directory lookup failed: tenant=%s kind=%s", tenant_id, kind.value)
            message = OutgoingMessage.text(GENERIC_ERROR_TEXT)
        return await self.delivery.deliver(address, message)

    @traced("directory.lookup.build_page")
    async def build_page(
        self, tenant_id: str, kind: QueryKind, value: str, page: int
    ) -> OutgoingMessage:
        """Run the search for one page and pack it into a message.

        Raises the search exceptions; callers decide how to reply.
        """
        page = max(1, page)
        page_size = self.packer.page_size
        is_category = kind is QueryKind.CATEGORY
        request = SearchRequest(
            tenant_id=tenant_id,
            term="" if is_category else value,
            category_code=(value or None) if is_category else None,
            offset=(page - 1) * page_size,
            limit=page_size,
            status_filter=self.searchable_statuses,
            timeout_seconds=self.search_timeout_seconds,
        )
        result = await self.search_service.search(request)

        label = value
        if is_category:
            label = await self.category_resolver.display_name(value)

        if not result.entries:
            if result.is_partial:
                return OutgoingMessage.text(TIMEOUT_TEXT)
            template = NOT_FOUND_TEXT if page == 1 else NO_MORE_RESULTS_TEXT
            return OutgoingMessage.text(template.format(label=label))

        context = PackContext(
            kind=kind,
            value=value,
            label=label,
            page=page,
            page_size=page_size,
            single_match_flow=page == 1,
        )
        message = self.packer.pack(
            result.entries, result.has_more, result.total_found, context
        )
        logger.info(
            "Lookup page packed: tenant=%s page=%d entries=%d total=%d kind=%s cards=%d size=%d",
            tenant_id,
            page,
            result.count,
            result.total_found,
            message.kind.value,
            message.card_count,
            message.size_bytes,
        )
        return message
