"""Shared utilities: id generation and input/output sanitization."""

from memberdir.shared.utils.generators import generate_cuid
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

__all__ = [
    "generate_cuid",
    "clip",
    "escape_like",
    "mailto_uri",
    "normalize_keywords",
    "safe_http_url",
    "strip_markup",
    "tel_uri",
    "validate_identifier",
]
