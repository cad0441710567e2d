"""CarouselPacker: single card, capped carousel with sentinel, and text fallback."""

import pytest
from factories import make_entries, make_entry

from memberdir.application.dtos.messages import Card, PackContext, serialized_size
from memberdir.application.services.carousel_packer import (
    SEARCH_MORE_ACTION,
    CarouselPacker,
)
from memberdir.application.services.pagination_token import decode_token
from memberdir.core.constants import (
    CAROUSEL_OPERATING_CAP,
    MAX_PAGE_NUMBER,
    MESSAGE_BYTE_BUDGET,
    TEXT_MESSAGE_MAX_CHARS,
)
from memberdir.domain.enums import MessageKind, QueryKind


class FakeRenderer:
    """Renders tiny bubbles and records sentinel arguments."""

    def __init__(self, padding: int = 0) -> None:
        self.padding = padding
        self.sentinel_calls: list[dict] = []

    def render(self, entry) -> Card:
        return Card(contents={"type": "bubble", "id": entry.id, "pad": "x" * self.padding})

    def render_sentinel(self, **kwargs) -> Card:
        self.sentinel_calls.append(kwargs)
        return Card(contents={"type": "bubble", "sentinel": True})


class SizedRenderer:
    """Renders every card, sentinel included, to exactly card_bytes of JSON."""

    def __init__(self, card_bytes: int) -> None:
        self.padding = card_bytes - serialized_size({"type": "bubble", "pad": ""})

    def _card(self) -> Card:
        return Card(contents={"type": "bubble", "pad": "x" * self.padding})

    def render(self, entry) -> Card:
        return self._card()

    def render_sentinel(self, **kwargs) -> Card:
        return self._card()


def _packer(renderer: FakeRenderer | None = None, **kwargs) -> CarouselPacker:
    return CarouselPacker(
        renderer or FakeRenderer(),
        public_base_url="https://dir.example.com/",
        **kwargs,
    )


def _context(page: int = 1, value: str = "golf", **kwargs) -> PackContext:
    values = {
        "kind": QueryKind.TERM,
        "value": value,
        "label": value,
        "page": page,
        "page_size": 6,
        "single_match_flow": page == 1,
    }
    values.update(kwargs)
    return PackContext(**values)


def test_page_size_leaves_room_for_sentinel() -> None:
    """page_size is the operating cap minus one."""
    assert _packer().page_size == 6
    assert _packer(operating_cap=12).page_size == 11


@pytest.mark.parametrize("cap", [1, 13])
def test_operating_cap_bounds(cap: int) -> None:
    """Caps outside 2..12 are rejected."""
    with pytest.raises(ValueError):
        _packer(operating_cap=cap)


def test_single_match_is_a_single_card() -> None:
    """One result on page 1 with nothing more is a single card, not a carousel."""
    message = _packer().pack([make_entry(1)], False, 1, _context())
    assert message.kind is MessageKind.CARD
    assert message.card_count == 1
    assert message.payload["type"] == "flex"
    assert message.payload["contents"]["id"] == "e01"
    assert message.payload["altText"] == 'หน้า 1: พบ 1 คนสำหรับ "golf"'


def test_single_entry_on_later_page_is_a_carousel() -> None:
    """The single-card flow is for first pages only."""
    message = _packer().pack([make_entry(7)], False, 7, _context(page=2))
    assert message.kind is MessageKind.CAROUSEL
    assert message.card_count == 1
    assert message.has_sentinel is False


def test_small_result_set_has_no_sentinel() -> None:
    """Fewer entries than the cap and nothing more: every entry, no sentinel."""
    message = _packer().pack(make_entries(3), False, 3, _context())
    contents = message.payload["contents"]
    assert contents["type"] == "carousel"
    assert [c["id"] for c in contents["contents"]] == ["e01", "e02", "e03"]
    assert message.has_sentinel is False


def test_more_in_store_adds_sentinel_with_next_page() -> None:
    """has_more_in_store adds a sentinel whose postback names the next page."""
    renderer = FakeRenderer()
    message = _packer(renderer).pack(make_entries(6), True, 9, _context())
    assert message.card_count == 7
    assert message.has_sentinel is True
    assert message.payload["contents"]["contents"][-1] == {"type": "bubble", "sentinel": True}

    (call,) = renderer.sentinel_calls
    assert call["remaining"] == 3
    assert call["total"] == 9
    assert call["label"] == "golf"
    assert call["view_all_url"] == "https://dir.example.com/liff/search?q=golf"
    data = call["next_page_data"]
    assert data.startswith(SEARCH_MORE_ACTION)
    token = decode_token(data[len(SEARCH_MORE_ACTION):])
    assert token.page == 2
    assert token.term == "golf"


def test_entries_at_cap_are_truncated_behind_sentinel() -> None:
    """cap entries without more in store still leave the last slot to the sentinel."""
    renderer = FakeRenderer()
    message = _packer(renderer).pack(make_entries(7), False, 7, _context())
    ids = [c.get("id") for c in message.payload["contents"]["contents"]]
    assert ids == ["e01", "e02", "e03", "e04", "e05", "e06", None]
    (call,) = renderer.sentinel_calls
    assert call["remaining"] == 1
    assert call["next_page_data"] is not None


def test_remaining_counts_from_page_offset() -> None:
    """On page 2 the remaining count excludes everything shown so far."""
    renderer = FakeRenderer()
    _packer(renderer).pack(make_entries(6, start=7), True, 20, _context(page=2))
    (call,) = renderer.sentinel_calls
    assert call["remaining"] == 8
    assert decode_token(call["next_page_data"][len(SEARCH_MORE_ACTION):]).page == 3


def test_overlong_postback_is_omitted() -> None:
    """A next-page postback over the action data limit is dropped; view-all stays."""
    renderer = FakeRenderer()
    term = "ก" * 40
    _packer(renderer).pack(make_entries(6), True, 9, _context(value=term))
    (call,) = renderer.sentinel_calls
    assert call["next_page_data"] is None
    assert call["view_all_url"].startswith("https://dir.example.com/liff/search?q=")


def test_category_view_all_url() -> None:
    """Category browses link to the category view."""
    packer = _packer()
    assert (
        packer.view_all_url(QueryKind.CATEGORY, "IT")
        == "https://dir.example.com/liff/search?category=IT"
    )
    assert (
        packer.view_all_url(QueryKind.TERM, "A&B")
        == "https://dir.example.com/liff/search?q=A%26B"
    )


def test_over_budget_falls_back_to_text() -> None:
    """A carousel over the byte budget becomes a numbered text list."""
    packer = _packer(FakeRenderer(padding=2_000), byte_budget=5_000)
    message = packer.pack(make_entries(6), True, 9, _context())
    assert message.kind is MessageKind.TEXT
    text = message.payload["text"]
    assert text.startswith("พบ 9 คน:")
    assert "1. สมาชิก 01" in text
    assert "5. สมาชิก 05" in text
    assert "สมาชิก 06" not in text
    assert "(แสดง 5 จาก 9)" in text
    assert "ดูทั้งหมด: https://dir.example.com/liff/search?q=golf" in text
    assert message.summary == 'หน้า 1: พบ 9 คนสำหรับ "golf"'


def test_text_fallback_numbers_from_offset() -> None:
    """Text list numbering continues across pages."""
    packer = _packer()
    message = packer.text_fallback(make_entries(2, start=7), 8, _context(page=2))
    assert "7. สมาชิก 07" in message.payload["text"]
    assert "8. สมาชิก 08" in message.payload["text"]


def test_empty_page_is_rejected() -> None:
    """Callers reply "not found" instead of packing nothing."""
    with pytest.raises(ValueError):
        _packer().pack([], False, 0, _context())


def test_last_allowed_page_has_no_next_page_action() -> None:
    """No next-page postback is offered past the highest page number."""
    renderer = FakeRenderer()
    _packer(renderer).pack(make_entries(6), True, 60_010, _context(page=MAX_PAGE_NUMBER))
    (call,) = renderer.sentinel_calls
    assert call["next_page_data"] is None
    assert call["view_all_url"] == "https://dir.example.com/liff/search?q=golf"


def test_cards_that_overflow_only_together_fall_back_to_text() -> None:
    """Cards each under the per-card share of the default budget, too big in sum."""
    card_bytes = MESSAGE_BYTE_BUDGET // CAROUSEL_OPERATING_CAP - 1
    renderer = SizedRenderer(card_bytes)
    assert renderer.render(make_entry(1)).size_bytes == card_bytes
    assert card_bytes * CAROUSEL_OPERATING_CAP < MESSAGE_BYTE_BUDGET

    message = _packer(renderer).pack(make_entries(6), True, 40, _context())
    assert message.kind is MessageKind.TEXT
    assert len(message.payload["text"]) < TEXT_MESSAGE_MAX_CHARS
    assert "(แสดง 5 จาก 40)" in message.payload["text"]


def test_cards_with_headroom_stay_a_carousel() -> None:
    """The same page with smaller cards fits the default budget."""
    card_bytes = MESSAGE_BYTE_BUDGET // CAROUSEL_OPERATING_CAP - 200
    message = _packer(SizedRenderer(card_bytes)).pack(make_entries(6), True, 40, _context())
    assert message.kind is MessageKind.CAROUSEL
    assert message.card_count == CAROUSEL_OPERATING_CAP
    assert message.size_bytes <= MESSAGE_BYTE_BUDGET


def test_text_fallback_stays_under_text_limit_for_worst_case_input() -> None:
    """Maximum-length fields, a long base URL and a long term still fit one text message."""
    long = "ก" * 300
    entries = [
        make_entry(
            i,
            full_name_th=long,
            nickname_th=long,
            position=long,
            company=long,
        )
        for i in range(1, 7)
    ]
    packer = CarouselPacker(
        FakeRenderer(),
        public_base_url="https://dir.example.com/" + "a" * 3_000,
    )
    context = _context(value="ข" * 500, page=MAX_PAGE_NUMBER)
    message = packer.text_fallback(entries, 10**12, context)
    text = message.payload["text"]
    assert len(text) <= TEXT_MESSAGE_MAX_CHARS
    assert text.count("…") >= 5 * 4
    assert "ดูทั้งหมด: https://dir.example.com/" in text
