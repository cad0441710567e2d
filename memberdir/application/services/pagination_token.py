"""Pagination token codec.

A token is ``p=<page>&k=<t|c>&q=<payload>`` with the payload percent-encoded
(every reserved character escaped, so ``&``, ``=`` and spaces survive). The
token carries no tenant and no signature: the tenant is always re-derived
from the trusted context of the request that brings the token back.
"""

import logging
from urllib.parse import quote, unquote

from memberdir.application.dtos.search import PageToken
from memberdir.core.constants import MAX_PAGE_NUMBER
from memberdir.domain.enums import QueryKind

logger = logging.getLogger(__name__)

_FIRST_PAGE = PageToken(page=1, kind=QueryKind.TERM, value="")


def encode_token(page: int, value: str, kind: QueryKind = QueryKind.TERM) -> str:
    """Encode page N of a term (or category code) search.

    Args:
        page: 1-based page number.
        value: Search term, or category code when kind is CATEGORY.
        kind: What value is.

    Raises:
        ValueError: If page is outside 1..MAX_PAGE_NUMBER.
    """
    if not 1 <= page <= MAX_PAGE_NUMBER:
        raise ValueError(f"page must be between 1 and {MAX_PAGE_NUMBER}, got {page}")
    return f"p={page}&k={kind.value}&q={quote(value, safe='')}"


def decode_token(token: str | None) -> PageToken:
    """Decode a token; anything malformed becomes page 1 with an empty term."""
    if not token:
        return _FIRST_PAGE
    fields: dict[str, str] = {}
    for part in token.split("&"):
        key, sep, raw = part.partition("=")
        if not sep or key in fields:
            logger.debug("Malformed pagination token segment: %r", part[:40])
            return _FIRST_PAGE
        fields[key] = raw
    if set(fields) != {"p", "k", "q"}:
        return _FIRST_PAGE
    page_raw = fields["p"]
    # isdigit alone accepts superscripts and other digits int() rejects
    if not (page_raw.isascii() and page_raw.isdigit()):
        return _FIRST_PAGE
    page = int(page_raw)
    if not 1 <= page <= MAX_PAGE_NUMBER:
        return _FIRST_PAGE
    try:
        kind = QueryKind(fields["k"])
    except ValueError:
        return _FIRST_PAGE
    return PageToken(page=page, kind=kind, value=unquote(fields["q"]))
