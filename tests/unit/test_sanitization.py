"""Sanitization helpers for search input and card actions."""

import pytest

from memberdir.shared.utils.sanitization import (
    clip,
    escape_like,
    mailto_uri,
    normalize_keywords,
    safe_http_url,
    strip_markup,
    tel_uri,
    validate_identifier,
)


def test_normalize_keywords() -> None:
    """Quotes and semicolons are dropped; duplicates removed; order kept."""
    assert normalize_keywords('"สมชาย" ABC; abc ABC') == ["สมชาย", "ABC", "abc"]
    assert normalize_keywords("  ") == []
    assert normalize_keywords(None) == []


def test_escape_like() -> None:
    """LIKE wildcards and the escape character match literally."""
    assert escape_like("50%_off\\") == "50\\%\\_off\\\\"


def test_strip_markup() -> None:
    """Tags are removed and whitespace collapsed."""
    assert strip_markup("<i>Somchai</i>\n  Co.") == "Somchai Co."
    assert strip_markup(None) == ""


def test_validate_identifier() -> None:
    """Plain codes pass; anything else raises."""
    assert validate_identifier("IT_services-1") == "IT_services-1"
    for bad in ("", "a b", "x;drop", "ก"):
        with pytest.raises(ValueError):
            validate_identifier(bad)


def test_safe_http_url() -> None:
    """Only absolute http(s) URLs survive."""
    assert safe_http_url(" https://a.example.com/x ") == "https://a.example.com/x"
    assert safe_http_url("javascript:alert(1)") is None
    assert safe_http_url("//a.example.com") is None
    assert safe_http_url(None) is None


def test_tel_and_mailto() -> None:
    """Contact URIs are built from sanitized values only."""
    assert tel_uri("+66 81-234-5678") == "tel:+66812345678"
    assert tel_uri("none") is None
    assert mailto_uri(" a@b.co ") == "mailto:a@b.co"
    assert mailto_uri("a@b") is None


def test_clip() -> None:
    """Clipped text ends with an ellipsis and never exceeds the limit."""
    assert clip("abcdef", 4) == "abc…"
    assert clip("abc", 4) == "abc"
    assert clip(None, 4) == ""
