"""Input and output sanitization for search terms and card content.

Search terms reach the store only through bound parameters; the helpers
here normalize what users type and keep card actions to safe schemes.
"""

import re
from urllib.parse import urlsplit

import nh3

# Characters users paste around names ("สมชาย"; 'ABC') that never match data.
_KEYWORD_STRIP_RE = re.compile(r"[\"';]")
_IDENTIFIER_RE = re.compile(r"^[a-zA-Z0-9_-]{1,64}$")
_PHONE_KEEP_RE = re.compile(r"[^0-9+]")
_ELLIPSIS = "…"


def strip_markup(value: str | None) -> str:
    """Remove any HTML from user-entered text and collapse whitespace.

    Args:
        value: Raw text (profile fields, search input).

    Returns:
        Plain text; empty string for None.
    """
    if not value:
        return ""
    cleaned = nh3.clean(value, tags=set(), attributes={})
    return " ".join(cleaned.split())


def normalize_keywords(term: str | None) -> list[str]:
    """Split a search term into keywords.

    Splits on whitespace, strips quote and semicolon characters and drops
    empty pieces. Order is preserved; duplicates are removed.
    """
    if not term:
        return []
    keywords: list[str] = []
    for piece in term.split():
        word = _KEYWORD_STRIP_RE.sub("", piece)
        if word and word not in keywords:
            keywords.append(word)
    return keywords


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so a keyword matches literally (escape char is backslash)."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def validate_identifier(value: str) -> str:
    """Return value if it is a plain code (letters, digits, underscore, hyphen).

    Raises:
        ValueError: If the format is invalid.
    """
    if not value or not _IDENTIFIER_RE.match(value):
        raise ValueError("Invalid identifier format")
    return value


def safe_http_url(value: str | None) -> str | None:
    """Return value if it is an absolute http(s) URL, else None."""
    if not value:
        return None
    candidate = value.strip()
    parts = urlsplit(candidate)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        return None
    return candidate


def tel_uri(phone: str | None) -> str | None:
    """Build a tel: URI from a free-form phone number, or None if no digits remain."""
    if not phone:
        return None
    digits = _PHONE_KEEP_RE.sub("", phone)
    if not any(ch.isdigit() for ch in digits):
        return None
    return f"tel:{digits}"


def clip(value: str | None, max_chars: int) -> str:
    """Truncate text to max_chars, ending with an ellipsis when cut."""
    if not value:
        return ""
    if len(value) <= max_chars:
        return value
    if max_chars <= 1:
        return value[:max_chars]
    return value[: max_chars - 1] + _ELLIPSIS


_EMAIL_RE = re.compile(r"^[^@\s<>\"']+@[^@\s<>\"']+\.[^@\s<>\"']+$")


def mailto_uri(email: str | None) -> str | None:
    """Build a mailto: URI from a plausible address, else None."""
    if not email:
        return None
    candidate = email.strip()
    if not _EMAIL_RE.match(candidate):
        return None
    return f"mailto:{candidate}"
