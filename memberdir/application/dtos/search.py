"""DTOs for directory search requests, results and pagination tokens."""

from dataclasses import dataclass, field

from memberdir.application.dtos.directory import DirectoryEntry
from memberdir.domain.enums import QueryKind


@dataclass(frozen=True)
class SearchRequest:
    """Transient search input. tenant_id always comes from a trusted context."""

    tenant_id: str
    term: str = ""
    category_code: str | None = None
    offset: int = 0
    limit: int = 10
    status_filter: tuple[str, ...] = ("member", "visitor")
    timeout_seconds: float = 4.0


@dataclass(frozen=True)
class SearchCriteria:
    """Store-level predicate inputs built by the search engine.

    keywords are already stripped of quotes and semicolons but not
    ILIKE-escaped; the repository escapes them when building patterns.
    """

    keywords: tuple[str, ...] = ()
    category_codes: tuple[str, ...] = ()
    status_filter: tuple[str, ...] = ()


@dataclass
class SearchResult:
    """Ordered, deduplicated page of entries plus best-effort metadata."""

    entries: list[DirectoryEntry] = field(default_factory=list)
    total_found: int = 0
    has_more: bool = False
    timed_out_sub_queries: int = 0
    executed_sub_queries: int = 0
    matching_category_codes: list[str] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.entries)

    @property
    def is_partial(self) -> bool:
        """True when some sub-query did not finish (results may be incomplete)."""
        return self.timed_out_sub_queries > 0


@dataclass(frozen=True)
class PageToken:
    """Decoded pagination token: 1-based page and either a term or a category code."""

    page: int = 1
    kind: QueryKind = QueryKind.TERM
    value: str = ""

    @property
    def term(self) -> str | None:
        return self.value if self.kind is QueryKind.TERM else None

    @property
    def category_code(self) -> str | None:
        return self.value if self.kind is QueryKind.CATEGORY else None
