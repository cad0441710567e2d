"""LINE Flex templates: one business card bubble per entry and the "view more" bubble."""

from typing import Any
from urllib.parse import quote, urlencode

from memberdir.application.dtos.directory import DirectoryEntry
from memberdir.application.dtos.messages import Card
from memberdir.core.constants import BUTTON_LABEL_MAX_CHARS
from memberdir.shared.utils.sanitization import (
    clip,
    mailto_uri,
    safe_http_url,
    strip_markup,
    tel_uri,
)

_TITLE_COLOR = "#1F2937"
_MUTED_COLOR = "#6B7280"
_BODY_COLOR = "#374151"
_ACCENT_COLOR = "#2563EB"
_MAX_TAGS = 5


def _text(text: str, **style: Any) -> dict[str, Any]:
    return {"type": "text", "text": text, "wrap": True, **style}


def _uri_button(label: str, uri: str, style: str = "link") -> dict[str, Any]:
    return {
        "type": "button",
        "style": style,
        "height": "sm",
        "action": {"type": "uri", "label": clip(label, BUTTON_LABEL_MAX_CHARS), "uri": uri},
    }


def _postback_button(label: str, data: str, display_text: str) -> dict[str, Any]:
    return {
        "type": "button",
        "style": "primary",
        "height": "sm",
        "color": _ACCENT_COLOR,
        "action": {
            "type": "postback",
            "label": clip(label, BUTTON_LABEL_MAX_CHARS),
            "data": data,
            "displayText": display_text,
        },
    }


class BusinessCardRenderer:
    """Renders directory entries as Flex bubbles.

    Only sanitized values become action URIs: tel: from digits, mailto: from
    a plausible address, http(s) links as-is. Free text is stripped of markup.
    """

    def __init__(self, base_url: str, share_enabled: bool = True) -> None:
        self.base_url = base_url.rstrip("/")
        self.share_enabled = share_enabled

    def render(self, entry: DirectoryEntry) -> Card:
        name = strip_markup(entry.display_name) or "-"
        body: list[dict[str, Any]] = [
            _text(name, weight="bold", size="xl", color=_TITLE_COLOR)
        ]
        nickname = strip_markup(entry.nickname)
        if nickname:
            body.append(_text(f"({nickname})", size="sm", color=_MUTED_COLOR))
        subtitle = " • ".join(
            p for p in (strip_markup(entry.position), strip_markup(entry.company)) if p
        )
        if subtitle:
            body.append(_text(subtitle, size="sm", color=_MUTED_COLOR, margin="md"))
        tagline = strip_markup(entry.tagline)
        if tagline:
            body.append({"type": "separator", "margin": "lg"})
            body.append(
                _text(clip(tagline, 200), size="sm", color=_BODY_COLOR, margin="md", style="italic")
            )
        tags = [strip_markup(t) for t in entry.tags[:_MAX_TAGS] if t]
        if tags:
            body.append(_text(", ".join(tags), size="xs", color=_MUTED_COLOR, margin="md"))

        bubble: dict[str, Any] = {
            "type": "bubble",
            "size": "mega",
            "body": {"type": "box", "layout": "vertical", "contents": body},
            "footer": {
                "type": "box",
                "layout": "vertical",
                "spacing": "sm",
                "contents": self._actions(entry, name),
            },
        }
        photo = safe_http_url(entry.photo_url)
        if photo and photo.startswith("https://"):
            bubble["hero"] = {
                "type": "image",
                "url": photo,
                "size": "full",
                "aspectRatio": "20:13",
                "aspectMode": "cover",
            }
        return Card(contents=bubble)

    def _actions(self, entry: DirectoryEntry, name: str) -> list[dict[str, Any]]:
        actions: list[dict[str, Any]] = []
        phone = tel_uri(entry.phone)
        if phone:
            actions.append(_uri_button("โทร", phone, style="primary"))
        email = mailto_uri(entry.email)
        if email:
            actions.append(_uri_button("อีเมล", email))
        if entry.line_id:
            actions.append(
                _uri_button("แชท LINE", f"https://line.me/R/ti/p/~{quote(entry.line_id, safe='')}")
            )
        website = safe_http_url(entry.website_url)
        if website:
            actions.append(_uri_button("เว็บไซต์", website))
        query = urlencode({"tenant_id": entry.tenant_id})
        actions.append(
            _uri_button(
                "บันทึกเบอร์",
                f"{self.base_url}/api/participants/{quote(entry.id, safe='')}/vcard?{query}",
            )
        )
        onepage = safe_http_url(entry.onepage_url)
        if onepage:
            actions.append(_uri_button("One Page", onepage))
        if self.share_enabled:
            card_url = (
                f"{self.base_url}/api/participants/{quote(entry.id, safe='')}/business-card?{query}"
            )
            share_text = quote(f"นามบัตรของ {name}\n{card_url}", safe="")
            actions.append(
                _uri_button("แชร์นามบัตร", f"https://line.me/R/share?text={share_text}")
            )
        return actions

    def render_sentinel(
        self,
        *,
        remaining: int,
        total: int,
        label: str,
        next_page_data: str | None,
        view_all_url: str,
    ) -> Card:
        body = [
            _text("ดูเพิ่มเติม", weight="bold", size="xl", color=_TITLE_COLOR),
            _text(f"เหลืออีก {remaining} คน", size="md", color=_BODY_COLOR, margin="lg"),
            _text(f"พบทั้งหมด {total} คน", size="sm", color=_MUTED_COLOR, margin="sm"),
            _text(f'คำค้นหา: "{clip(strip_markup(label), 60)}"', size="xs", color=_MUTED_COLOR, margin="sm"),
        ]
        footer: list[dict[str, Any]] = []
        if next_page_data:
            footer.append(_postback_button("หน้าถัดไป", next_page_data, "หน้าถัดไป"))
        footer.append(_uri_button("ดูทั้งหมด", view_all_url))
        return Card(
            contents={
                "type": "bubble",
                "size": "mega",
                "body": {
                    "type": "box",
                    "layout": "vertical",
                    "justifyContent": "center",
                    "contents": body,
                },
                "footer": {
                    "type": "box",
                    "layout": "vertical",
                    "spacing": "sm",
                    "contents": footer,
                },
            }
        )
