"""Directory search engine.

Matches a free-text term against name, nickname, company, position, tagline,
category names and tags, or browses one category. Sub-queries run
concurrently under one shared timeout; whichever finish contribute to the
result and the rest are abandoned and counted as timed out.

Global result order is field matches (by primary name) followed by tag-only
matches (by primary name). Offset and limit for field matches are applied
in the store; one extra row tells whether another page exists. The count
query runs only when that extra row came back (the sentinel card shows the
total) or when a later page has to be placed among the tag-only matches.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from memberdir.application.dtos.directory import DirectoryEntry
from memberdir.application.dtos.search import SearchCriteria, SearchRequest, SearchResult
from memberdir.core.constants import MAX_PAGE_LIMIT, MAX_TERM_LENGTH
from memberdir.domain.exceptions import (
    EmptyQueryException,
    SearchTimeoutException,
    TenantNotResolvableException,
)
from memberdir.shared.telemetry.tracing import (
    TracedOperation,
    add_span_attributes,
    add_span_event,
    traced,
)
from memberdir.shared.utils.sanitization import normalize_keywords

if TYPE_CHECKING:
    from memberdir.application.interfaces.repositories import IDirectoryRepository
    from memberdir.application.services.category_resolver import CategoryResolver

logger = logging.getLogger(__name__)

FIELDS = "fields"
COUNT = "count"
TAGS = "tags"


@dataclass
class _Outcomes:
    """Results of the sub-queries that completed (None = did not complete)."""

    completed: dict[str, Any]
    timed_out: list[str]
    failed: dict[str, BaseException]

    def get(self, name: str) -> Any:
        return self.completed.get(name)

    @property
    def not_completed(self) -> list[str]:
        return self.timed_out + list(self.failed)

    def merge(self, other: "_Outcomes") -> None:
        self.completed.update(other.completed)
        self.timed_out = sorted(self.timed_out + other.timed_out)
        self.failed.update(other.failed)


def _consume_result(task: asyncio.Task) -> None:
    """Retrieve the outcome of an abandoned task so it is never reported as lost."""
    if not task.cancelled():
        task.exception()


def _tags_match(entry: DirectoryEntry, needles: list[str]) -> bool:
    tags = [t.casefold() for t in entry.tags if t]
    return any(needle in tag for needle in needles for tag in tags)


def _tag_matches(outcomes: _Outcomes, needles: list[str]) -> list[DirectoryEntry]:
    scanned: list[DirectoryEntry] | None = outcomes.get(TAGS)
    return [e for e in scanned if _tags_match(e, needles)] if scanned else []


class DirectorySearchService:
    """Tenant-scoped directory search with partial-result tolerance."""

    def __init__(
        self,
        directory_repo: "IDirectoryRepository",
        category_resolver: "CategoryResolver",
        *,
        tag_scan_limit: int = 100,
    ) -> None:
        self.directory_repo = directory_repo
        self.category_resolver = category_resolver
        self.tag_scan_limit = tag_scan_limit

    @traced("directory.search")
    async def search(self, request: SearchRequest) -> SearchResult:
        """Run one search and return an ordered, deduplicated page.

        Raises:
            EmptyQueryException: No keyword and no category code.
            TenantNotResolvableException: Request carries no tenant.
            SearchTimeoutException: No sub-query completed within the budget.
        """
        keywords = normalize_keywords((request.term or "")[:MAX_TERM_LENGTH])
        category_code = (request.category_code or "").strip() or None
        if not keywords and category_code is None:
            raise EmptyQueryException()
        if not request.tenant_id:
            raise TenantNotResolvableException()

        offset = max(0, request.offset)
        limit = min(max(1, request.limit), MAX_PAGE_LIMIT)
        statuses = tuple(request.status_filter)

        if category_code is not None:
            criteria = SearchCriteria(
                category_codes=(category_code,), status_filter=statuses
            )
        else:
            codes = await self.category_resolver.resolve(" ".join(keywords))
            criteria = SearchCriteria(
                keywords=tuple(keywords),
                category_codes=tuple(sorted(codes)),
                status_filter=statuses,
            )

        logger.info(
            "Directory search: tenant=%s keywords=%d categories=%d browse=%s offset=%d limit=%d",
            request.tenant_id,
            len(criteria.keywords),
            len(criteria.category_codes),
            category_code is not None,
            offset,
            limit,
        )
        add_span_attributes(
            tenant_id=request.tenant_id,
            keyword_count=len(criteria.keywords),
            category_count=len(criteria.category_codes),
        )

        deadline = time.monotonic() + request.timeout_seconds
        jobs: dict[str, Callable[[], Awaitable[Any]]] = {
            FIELDS: lambda: self.directory_repo.fetch_page(
                request.tenant_id, criteria, offset, limit + 1
            ),
        }
        if criteria.keywords:
            jobs[TAGS] = lambda: self.directory_repo.scan_tagged(
                request.tenant_id, criteria, self.tag_scan_limit
            )

        outcomes = await self._run_sub_queries(jobs, request.timeout_seconds)
        if not outcomes.completed:
            self._raise_hard_failure(outcomes, request.timeout_seconds)

        needles = [k.casefold() for k in criteria.keywords]
        if self._needs_count(outcomes, needles, offset, limit):
            jobs[COUNT] = lambda: self.directory_repo.count(request.tenant_id, criteria)
            remaining = max(0.0, deadline - time.monotonic())
            outcomes.merge(
                await self._run_sub_queries({COUNT: jobs[COUNT]}, remaining)
            )

        result = self._assemble(request.tenant_id, needles, outcomes, offset, limit)
        result.timed_out_sub_queries = len(outcomes.not_completed)
        result.executed_sub_queries = len(jobs)
        result.matching_category_codes = list(criteria.category_codes)
        if result.is_partial:
            logger.warning(
                "Directory search returned partial results: tenant=%s incomplete=%s",
                request.tenant_id,
                ",".join(outcomes.not_completed),
            )
            add_span_event(
                "directory.search.partial", {"incomplete": ",".join(outcomes.not_completed)}
            )
        add_span_attributes(
            result_count=result.count,
            total_found=result.total_found,
            timed_out_sub_queries=result.timed_out_sub_queries,
        )
        return result

    async def _run_sub_queries(
        self,
        jobs: dict[str, Callable[[], Awaitable[Any]]],
        timeout_seconds: float,
    ) -> _Outcomes:
        """Start every job, wait once for the shared budget, cancel the rest."""
        tasks = {
            asyncio.create_task(self._timed(name, factory), name=f"search.{name}"): name
            for name, factory in jobs.items()
        }
        done, pending = await asyncio.wait(tasks.keys(), timeout=timeout_seconds)

        timed_out: list[str] = []
        for task in pending:
            task.add_done_callback(_consume_result)
            task.cancel()
            timed_out.append(tasks[task])
        if timed_out:
            logger.warning(
                "Search sub-queries timed out after %ss: %s",
                timeout_seconds,
                ",".join(sorted(timed_out)),
            )

        completed: dict[str, Any] = {}
        failed: dict[str, BaseException] = {}
        for task in done:
            name = tasks[task]
            error = task.exception()
            if error is not None:
                logger.error("Search sub-query %s failed: %s", name, error, exc_info=error)
                failed[name] = error
            else:
                completed[name] = task.result()
        return _Outcomes(completed=completed, timed_out=sorted(timed_out), failed=failed)

    async def _timed(self, name: str, factory: Callable[[], Awaitable[Any]]) -> Any:
        """Run one sub-query in its own span and log its duration."""
        started = time.perf_counter()
        async with TracedOperation(f"directory.search.{name}"):
            result = await factory()
        logger.debug(
            "Search sub-query %s completed in %.1f ms",
            name,
            (time.perf_counter() - started) * 1000,
        )
        return result

    @staticmethod
    def _needs_count(
        outcomes: _Outcomes, needles: list[str], offset: int, limit: int
    ) -> bool:
        """Whether the total is worth a count query for this page.

        True when the field page overflowed (the sentinel shows the total) or
        when a later page has no field rows left but tag-only matches must be
        placed after them.
        """
        field_rows: list[DirectoryEntry] | None = outcomes.get(FIELDS)
        if field_rows is None:
            return False
        if len(field_rows) > limit:
            return True
        return not field_rows and offset > 0 and bool(_tag_matches(outcomes, needles))

    def _raise_hard_failure(self, outcomes: _Outcomes, timeout_seconds: float) -> None:
        """Nothing completed: a timeout if anything ran out of time, else the first error."""
        if outcomes.timed_out or not outcomes.failed:
            raise SearchTimeoutException(timeout_seconds, outcomes.not_completed)
        raise next(iter(outcomes.failed.values()))

    def _assemble(
        self,
        tenant_id: str,
        needles: list[str],
        outcomes: _Outcomes,
        offset: int,
        limit: int,
    ) -> SearchResult:
        """Merge field page, count and tag-only matches into one page."""
        field_rows: list[DirectoryEntry] | None = outcomes.get(FIELDS)
        field_count: int | None = outcomes.get(COUNT)
        tag_matches = _tag_matches(outcomes, needles)

        page: list[DirectoryEntry]
        has_more = False
        if field_rows is not None:
            if len(field_rows) > limit:
                page = field_rows[:limit]
                has_more = True
            else:
                page = list(field_rows)
                field_total: int | None
                if field_rows or offset == 0:
                    field_total = offset + len(field_rows)
                else:
                    field_total = field_count
                if field_total is not None and tag_matches:
                    tag_offset = max(0, offset - field_total)
                    room = limit - len(page)
                    tail = tag_matches[tag_offset : tag_offset + room + 1]
                    page.extend(tail[:room])
                    has_more = len(tail) > room
        else:
            window = tag_matches[offset : offset + limit + 1]
            page = window[:limit]
            has_more = len(window) > limit

        entries = self._dedupe_in_tenant(tenant_id, page)

        if field_count is not None:
            total = field_count
        elif field_rows is not None:
            total = offset + len(field_rows)
        else:
            total = 0
        total += len(tag_matches)
        floor = offset + len(entries) + (1 if has_more else 0)
        return SearchResult(
            entries=entries,
            total_found=max(total, floor),
            has_more=has_more,
        )

    @staticmethod
    def _dedupe_in_tenant(
        tenant_id: str, rows: list[DirectoryEntry]
    ) -> list[DirectoryEntry]:
        """Keep first occurrence of each id; drop anything outside the tenant."""
        seen: set[str] = set()
        entries: list[DirectoryEntry] = []
        for row in rows:
            if row.tenant_id != tenant_id:
                logger.error(
                    "Dropped cross-tenant row from search results: requested=%s row_tenant=%s id=%s",
                    tenant_id,
                    row.tenant_id,
                    row.id,
                )
                continue
            if row.id in seen:
                continue
            seen.add(row.id)
            entries.append(row)
        return entries
