"""Business category repository. Global reference data; returns Category DTOs."""

from __future__ import annotations

from sqlalchemy import select

from memberdir.application.dtos.directory import Category
from memberdir.infrastructure.persistence.database import SessionFactory
from memberdir.infrastructure.persistence.models.business_category import (
    BusinessCategory,
)


def _to_category(row: BusinessCategory) -> Category:
    return Category(
        code=row.category_code,
        name_th=row.name_th,
        name_en=row.name_en,
        sort_order=row.sort_order,
    )


class CategoryRepository:
    """Reads active business categories. Loaded per search, never cached."""

    def __init__(self, session_factory: SessionFactory) -> None:
        self.session_factory = session_factory

    async def list_active(self) -> list[Category]:
        """Return active categories ordered by sort_order, then code."""
        stmt = (
            select(BusinessCategory)
            .where(BusinessCategory.is_active.is_(True))
            .order_by(BusinessCategory.sort_order, BusinessCategory.category_code)
        )
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            return [_to_category(row) for row in result.scalars().all()]
