"""Directory entry repository. Filtered, ordered reads; returns DirectoryEntry DTOs.

Each method opens its own session from the session factory so the search
engine can run several reads concurrently.
"""

from __future__ import annotations

from sqlalchemy import ColumnElement, Select, String, false, func, not_, or_, select

from memberdir.application.dtos.directory import DirectoryEntry
from memberdir.application.dtos.search import SearchCriteria
from memberdir.domain.enums import TenantStatus
from memberdir.infrastructure.persistence.database import SessionFactory
from memberdir.infrastructure.persistence.models.directory_entry import (
    DirectoryEntry as DirectoryEntryModel,
)
from memberdir.infrastructure.persistence.models.tenant import Tenant
from memberdir.infrastructure.persistence.rls import LINE_USER_TENANT_FUNCTION
from memberdir.shared.utils.sanitization import escape_like

M = DirectoryEntryModel

SEARCH_COLUMNS = (
    M.full_name_th,
    M.full_name_en,
    M.nickname_th,
    M.nickname_en,
    M.company,
    M.position,
    M.tagline,
)


def field_predicate(criteria: SearchCriteria) -> ColumnElement[bool]:
    """OR of (keyword contained in any searched column) and (category_code IN codes).

    Columns are coalesced to '' so NOT(predicate) also holds for NULL columns.
    """
    clauses: list[ColumnElement[bool]] = []
    for keyword in criteria.keywords:
        pattern = f"%{escape_like(keyword)}%"
        for column in SEARCH_COLUMNS:
            clauses.append(func.coalesce(column, "").ilike(pattern, escape="\\"))
    if criteria.category_codes:
        clauses.append(func.coalesce(M.category_code, "").in_(criteria.category_codes))
    if not clauses:
        return false()
    return or_(*clauses)


def _scoped(stmt: Select, tenant_id: str, criteria: SearchCriteria) -> Select:
    """Apply tenant and status scope (before any text predicate)."""
    return stmt.where(M.tenant_id == tenant_id, M.status.in_(criteria.status_filter))


def _to_entry(row: DirectoryEntryModel) -> DirectoryEntry:
    """Map ORM row to DirectoryEntry."""
    return DirectoryEntry(
        id=row.id,
        tenant_id=row.tenant_id,
        full_name_th=row.full_name_th,
        full_name_en=row.full_name_en,
        nickname_th=row.nickname_th,
        nickname_en=row.nickname_en,
        position=row.position,
        company=row.company,
        tagline=row.tagline,
        category_code=row.category_code,
        tags=tuple(row.tags or ()),
        phone=row.phone,
        email=row.email,
        line_id=row.line_id,
        line_user_id=row.line_user_id,
        photo_url=row.photo_url,
        website_url=row.website_url,
        onepage_url=row.onepage_url,
        status=row.status,
    )


class DirectoryRepository:
    """Read-only access to directory entries (table participant)."""

    def __init__(self, session_factory: SessionFactory) -> None:
        self.session_factory = session_factory

    async def fetch_page(
        self,
        tenant_id: str,
        criteria: SearchCriteria,
        offset: int,
        limit: int,
    ) -> list[DirectoryEntry]:
        """Field matches ordered by full_name_th, id; OFFSET/LIMIT applied in SQL."""
        stmt = (
            _scoped(select(M), tenant_id, criteria)
            .where(field_predicate(criteria))
            .order_by(M.full_name_th, M.id)
            .offset(offset)
            .limit(limit)
        )
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            return [_to_entry(row) for row in result.scalars().all()]

    async def count(self, tenant_id: str, criteria: SearchCriteria) -> int:
        """Number of field matches."""
        stmt = _scoped(select(func.count()).select_from(M), tenant_id, criteria).where(
            field_predicate(criteria)
        )
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            return int(result.scalar_one())

    async def scan_tagged(
        self,
        tenant_id: str,
        criteria: SearchCriteria,
        scan_limit: int,
    ) -> list[DirectoryEntry]:
        """Bounded scan of tagged entries that are not field matches, by name.

        Tag matching itself happens in memory; this only bounds the rows read.
        """
        stmt = (
            _scoped(select(M), tenant_id, criteria)
            .where(
                M.tags.is_not(None),
                func.cardinality(M.tags) > 0,
                not_(field_predicate(criteria)),
            )
            .order_by(M.full_name_th, M.id)
            .limit(scan_limit)
        )
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            return [_to_entry(row) for row in result.scalars().all()]

    async def find_tenant_for_line_user(self, line_user_id: str) -> str | None:
        """Resolve the tenant linked to a LINE user (runs without tenant context)."""
        if not line_user_id:
            return None
        resolver = getattr(func, LINE_USER_TENANT_FUNCTION)
        stmt = select(resolver(line_user_id, type_=String))
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            return result.scalar_one_or_none()

    async def is_linked(self, tenant_id: str, line_user_id: str) -> bool:
        """Whether the LINE user has an entry in the tenant and the tenant is active.

        Runs under the tenant context of tenant_id, so RLS limits the check
        to that tenant's rows.
        """
        if not tenant_id or not line_user_id:
            return False
        stmt = (
            select(M.id)
            .join(Tenant, Tenant.id == M.tenant_id)
            .where(
                M.tenant_id == tenant_id,
                M.line_user_id == line_user_id,
                Tenant.status == TenantStatus.ACTIVE.value,
            )
            .limit(1)
        )
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            return result.scalar_one_or_none() is not None
