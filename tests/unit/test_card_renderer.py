"""BusinessCardRenderer: bubble content, safe actions and the sentinel bubble."""

from factories import make_entry

from memberdir.infrastructure.external.line.card_template import BusinessCardRenderer


def _texts(bubble: dict) -> list[str]:
    return [c["text"] for c in bubble["body"]["contents"] if c.get("type") == "text"]


def _actions(bubble: dict) -> list[dict]:
    return [c["action"] for c in bubble["footer"]["contents"]]


def test_render_card_content_and_actions() -> None:
    """Name, nickname, position and company appear; contact actions are built."""
    entry = make_entry(
        1,
        nickname_th="เอ",
        line_id="somchai.a",
        website_url="https://company01.example.com",
        onepage_url="https://onepage.example.com/e01",
        photo_url="https://cdn.example.com/e01.jpg",
        tags=("golf", "wine"),
    )
    bubble = BusinessCardRenderer("https://dir.example.com").render(entry).contents

    texts = _texts(bubble)
    assert texts[0] == "สมาชิก 01"
    assert "(เอ)" in texts
    assert "Director • Company 01" in texts
    assert "golf, wine" in texts
    assert bubble["hero"]["url"] == "https://cdn.example.com/e01.jpg"

    labels = [a["label"] for a in _actions(bubble)]
    assert labels == [
        "โทร",
        "อีเมล",
        "แชท LINE",
        "เว็บไซต์",
        "บันทึกเบอร์",
        "One Page",
        "แชร์นามบัตร",
    ]
    uris = {a["label"]: a["uri"] for a in _actions(bubble)}
    assert uris["โทร"] == "tel:0812345678"
    assert uris["อีเมล"] == "mailto:member01@example.com"
    assert uris["แชท LINE"] == "https://line.me/R/ti/p/~somchai.a"
    assert uris["บันทึกเบอร์"] == (
        "https://dir.example.com/api/participants/e01/vcard?tenant_id=t1"
    )
    assert uris["แชร์นามบัตร"].startswith("https://line.me/R/share?text=")


def test_unsafe_values_are_not_actions() -> None:
    """Non-http links, bad emails and phones without digits produce no buttons."""
    entry = make_entry(
        2,
        phone="n/a",
        email="not-an-email",
        website_url="javascript:alert(1)",
        photo_url="http://insecure.example.com/p.jpg",
    )
    bubble = BusinessCardRenderer("https://dir.example.com").render(entry).contents
    labels = [a["label"] for a in _actions(bubble)]
    assert labels == ["บันทึกเบอร์", "แชร์นามบัตร"]
    assert "hero" not in bubble


def test_markup_is_stripped_from_text() -> None:
    """HTML in profile fields is removed before it reaches the card."""
    entry = make_entry(3, full_name_th="<b>สมชาย</b> <script>x()</script>", company=None)
    bubble = BusinessCardRenderer("https://dir.example.com").render(entry).contents
    assert _texts(bubble)[0] == "สมชาย"
    assert "Director" in _texts(bubble)


def test_share_button_can_be_disabled() -> None:
    """share_enabled=False removes the share action."""
    bubble = BusinessCardRenderer("https://dir.example.com", share_enabled=False).render(
        make_entry(4)
    ).contents
    assert "แชร์นามบัตร" not in [a["label"] for a in _actions(bubble)]


def test_sentinel_with_next_page() -> None:
    """The sentinel shows counts and the search label, with next-page and view-all actions."""
    card = BusinessCardRenderer("https://dir.example.com").render_sentinel(
        remaining=3,
        total=9,
        label="golf",
        next_page_data="action=search_more&p=2&k=t&q=golf",
        view_all_url="https://dir.example.com/liff/search?q=golf",
    )
    texts = _texts(card.contents)
    assert "เหลืออีก 3 คน" in texts
    assert "พบทั้งหมด 9 คน" in texts
    assert 'คำค้นหา: "golf"' in texts
    first, second = _actions(card.contents)
    assert first["type"] == "postback"
    assert first["data"] == "action=search_more&p=2&k=t&q=golf"
    assert second["uri"] == "https://dir.example.com/liff/search?q=golf"


def test_sentinel_without_next_page() -> None:
    """Without postback data only the view-all link remains."""
    card = BusinessCardRenderer("https://dir.example.com").render_sentinel(
        remaining=0,
        total=6,
        label="golf",
        next_page_data=None,
        view_all_url="https://dir.example.com/liff/search?q=golf",
    )
    actions = _actions(card.contents)
    assert [a["type"] for a in actions] == ["uri"]
