"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill.
All types reference application DTOs only; no infrastructure imports.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from memberdir.application.dtos.directory import Category, DirectoryEntry
    from memberdir.application.dtos.search import SearchCriteria


class IDirectoryRepository(Protocol):
    """Protocol for directory entry reads. Every call is tenant- and status-scoped."""

    async def fetch_page(
        self,
        tenant_id: str,
        criteria: SearchCriteria,
        offset: int,
        limit: int,
    ) -> list[DirectoryEntry]:
        """Return field matches ordered by primary name, OFFSET/LIMIT in the store."""

    async def count(self, tenant_id: str, criteria: SearchCriteria) -> int:
        """Return the number of field matches."""

    async def scan_tagged(
        self,
        tenant_id: str,
        criteria: SearchCriteria,
        scan_limit: int,
    ) -> list[DirectoryEntry]:
        """Return up to scan_limit tagged entries that are NOT field matches, by name."""

    async def find_tenant_for_line_user(self, line_user_id: str) -> str | None:
        """Return the tenant id linked to a LINE user, or None."""

    async def is_linked(self, tenant_id: str, line_user_id: str) -> bool:
        """Return True if the LINE user has an entry in the active tenant."""


class ICategoryRepository(Protocol):
    """Protocol for business category reference data."""

    async def list_active(self) -> list[Category]:
        """Return active categories ordered by sort order."""
