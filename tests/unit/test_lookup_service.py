"""DirectoryLookupService end to end with a mocked store and channel.

Wires the real search engine, packer and card renderer; only the repository
and the channel client are fakes.
"""

import asyncio
from unittest.mock import AsyncMock

import pytest
from factories import CATEGORIES, make_entries

from memberdir.application.dtos.messages import ChannelAddress
from memberdir.application.services.carousel_packer import (
    SEARCH_MORE_ACTION,
    CarouselPacker,
)
from memberdir.application.services.category_resolver import CategoryResolver
from memberdir.application.services.pagination_token import decode_token, encode_token
from memberdir.application.services.reply_delivery import ReplyDeliveryService
from memberdir.application.use_cases.lookup import (
    EMPTY_QUERY_TEXT,
    NO_MORE_RESULTS_TEXT,
    NOT_FOUND_TEXT,
    TIMEOUT_TEXT,
    UNLINKED_USER_TEXT,
    DirectoryLookupService,
)
from memberdir.application.use_cases.search import DirectorySearchService
from memberdir.domain.enums import MessageKind, QueryKind
from memberdir.infrastructure.external.line.card_template import BusinessCardRenderer

ADDRESS = ChannelAddress(reply_token="rt-1", user_id="U1")


class _Store:
    """In-memory stand-in for the directory repository: field matches only."""

    def __init__(self, matches) -> None:
        self.matches = matches
        self.fetch_page = AsyncMock(side_effect=self._fetch_page)
        self.count = AsyncMock(side_effect=self._count)
        self.scan_tagged = AsyncMock(return_value=[])

    async def _fetch_page(self, tenant_id, criteria, offset, limit):
        return self.matches[offset : offset + limit]

    async def _count(self, tenant_id, criteria):
        return len(self.matches)


def _lookup(store, timeout: float = 1.0):
    category_repo = AsyncMock()
    category_repo.list_active = AsyncMock(return_value=CATEGORIES)
    resolver = CategoryResolver(category_repo)
    channel = AsyncMock()
    service = DirectoryLookupService(
        DirectorySearchService(store, resolver),
        CarouselPacker(
            BusinessCardRenderer("https://dir.example.com"),
            public_base_url="https://dir.example.com",
            operating_cap=7,
        ),
        ReplyDeliveryService(channel),
        resolver,
        search_timeout_seconds=timeout,
    )
    return service, channel


def _sent(channel: AsyncMock) -> dict:
    """The single message object of the last reply."""
    token, messages = channel.reply.await_args.args
    assert token == "rt-1"
    (message,) = messages
    return message


async def test_nine_results_paginate_into_two_pages() -> None:
    """9 matches at cap 7: six cards plus a sentinel, then the last three."""
    store = _Store(make_entries(9))
    service, channel = _lookup(store)

    outcome = await service.search_by_term(ADDRESS, "t1", "สมาชิก")
    assert outcome.success is True
    first = _sent(channel)
    bubbles = first["contents"]["contents"]
    assert first["contents"]["type"] == "carousel"
    assert len(bubbles) == 7

    sentinel = bubbles[-1]
    texts = [c["text"] for c in sentinel["body"]["contents"]]
    assert "เหลืออีก 3 คน" in texts
    assert "พบทั้งหมด 9 คน" in texts
    next_action = sentinel["footer"]["contents"][0]["action"]
    assert next_action["type"] == "postback"
    token = next_action["data"][len(SEARCH_MORE_ACTION):]
    assert decode_token(token).page == 2

    await service.next_page(ADDRESS, "t1", token)
    second = _sent(channel)
    names = [b["body"]["contents"][0]["text"] for b in second["contents"]["contents"]]
    assert names == ["สมาชิก 07", "สมาชิก 08", "สมาชิก 09"]
    assert store.fetch_page.await_args.args[2:] == (6, 7)


async def test_single_match_is_one_card() -> None:
    """A single match on page 1 is a single bubble."""
    service, channel = _lookup(_Store(make_entries(1)))
    await service.search_by_term(ADDRESS, "t1", "สมาชิก")
    message = _sent(channel)
    assert message["type"] == "flex"
    assert message["contents"]["type"] == "bubble"


async def test_no_match_replies_not_found() -> None:
    """Zero results on page 1 is a not-found text naming the term."""
    service, channel = _lookup(_Store([]))
    await service.search_by_term(ADDRESS, "t1", "zzz")
    assert _sent(channel)["text"] == NOT_FOUND_TEXT.format(label="zzz")


async def test_page_past_end_replies_no_more_results() -> None:
    """A token for a page past the end says there are no more results."""
    service, channel = _lookup(_Store(make_entries(3)))
    await service.next_page(ADDRESS, "t1", encode_token(5, "สมาชิก"))
    assert _sent(channel)["text"] == NO_MORE_RESULTS_TEXT.format(label="สมาชิก")


@pytest.mark.parametrize("token", ["p=\u00b2&k=t&q=golf", "p=" + "9" * 30 + "&k=t&q=golf"])
async def test_unusable_page_token_prompts_for_input(token: str) -> None:
    """A token with an unusable page number is a fresh empty search."""
    store = _Store(make_entries(3))
    service, channel = _lookup(store)
    await service.next_page(ADDRESS, "t1", token)
    assert _sent(channel)["text"] == EMPTY_QUERY_TEXT
    store.fetch_page.assert_not_awaited()


async def test_empty_term_prompts_for_input() -> None:
    """An empty command replies with the usage prompt."""
    service, channel = _lookup(_Store(make_entries(3)))
    await service.search_by_term(ADDRESS, "t1", "")
    assert _sent(channel)["text"] == EMPTY_QUERY_TEXT


async def test_unlinked_user_is_told_to_register() -> None:
    """No tenant: the store is never queried."""
    store = _Store(make_entries(3))
    service, channel = _lookup(store)
    await service.search_by_term(ADDRESS, None, "สมาชิก")
    assert _sent(channel)["text"] == UNLINKED_USER_TEXT
    store.fetch_page.assert_not_awaited()


async def test_hard_timeout_replies_with_timeout_text() -> None:
    """Nothing finished in time: the user is asked to retry."""

    async def hang(*args, **kwargs):
        await asyncio.sleep(5)

    store = _Store([])
    store.fetch_page = AsyncMock(side_effect=hang)
    store.count = AsyncMock(side_effect=hang)
    store.scan_tagged = AsyncMock(side_effect=hang)
    service, channel = _lookup(store, timeout=0.05)
    await service.search_by_term(ADDRESS, "t1", "สมาชิก")
    assert _sent(channel)["text"] == TIMEOUT_TEXT


async def test_unexpected_error_replies_generic_apology() -> None:
    """A store error becomes a generic apology, not an exception."""
    store = _Store([])
    store.fetch_page = AsyncMock(side_effect=RuntimeError("db down"))
    store.count = AsyncMock(side_effect=RuntimeError("db down"))
    store.scan_tagged = AsyncMock(side_effect=RuntimeError("db down"))
    service, channel = _lookup(store)
    outcome = await service.search_by_term(ADDRESS, "t1", "สมาชิก")
    assert outcome.success is True
    assert "เกิดข้อผิดพลาด" in _sent(channel)["text"]


async def test_category_browse_uses_display_name() -> None:
    """Category pages are labelled with the category name and page by code."""
    service, channel = _lookup(_Store(make_entries(8)))
    await service.browse_category(ADDRESS, "t1", "LAW")
    message = _sent(channel)
    assert message["altText"] == 'หน้า 1: พบ 8 คนสำหรับ "กฎหมาย"'
    sentinel = message["contents"]["contents"][-1]
    token = decode_token(
        sentinel["footer"]["contents"][0]["action"]["data"][len(SEARCH_MORE_ACTION):]
    )
    assert token.kind is QueryKind.CATEGORY
    assert token.category_code == "LAW"
    view_all = sentinel["footer"]["contents"][1]["action"]["uri"]
    assert view_all == "https://dir.example.com/liff/search?category=LAW"


@pytest.mark.parametrize("page", [1, 2])
async def test_build_page_returns_message_without_sending(page: int) -> None:
    """build_page packs a message and leaves delivery to the caller."""
    service, channel = _lookup(_Store(make_entries(14)))
    message = await service.build_page("t1", QueryKind.TERM, "สมาชิก", page)
    assert message.kind is MessageKind.CAROUSEL
    assert message.has_sentinel is True
    channel.reply.assert_not_awaited()
