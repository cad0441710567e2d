"""Category resolver: maps a free-text term to category codes by name."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from memberdir.application.interfaces.repositories import ICategoryRepository

logger = logging.getLogger(__name__)


class CategoryResolver:
    """Case-insensitive substring match of a search term against category names.

    Categories are read from the store on every call. Any lookup failure or
    timeout resolves to no categories; it never fails the search.
    """

    def __init__(
        self,
        category_repo: "ICategoryRepository",
        timeout_seconds: float = 1.0,
    ) -> None:
        self.category_repo = category_repo
        self.timeout_seconds = timeout_seconds

    async def resolve(self, term: str) -> set[str]:
        """Return codes of categories whose th/en name contains the whole term.

        The term is matched as one string (runs of whitespace collapse to a
        single space); its words are not matched separately.
        """
        needle = " ".join((term or "").split()).casefold()
        if not needle:
            return set()
        try:
            categories = await asyncio.wait_for(
                self.category_repo.list_active(), timeout=self.timeout_seconds
            )
        except asyncio.TimeoutError:
            logger.warning(
                "Category lookup timed out after %ss; continuing without categories",
                self.timeout_seconds,
            )
            return set()
        except Exception as e:
            logger.warning("Category lookup failed; continuing without categories: %s", e)
            return set()
        codes: set[str] = set()
        for category in categories:
            names = [n.casefold() for n in category.display_names()]
            if any(needle in name for name in names):
                codes.add(category.code)
        return codes

    async def display_name(self, code: str) -> str:
        """Primary display name of a category code; the code itself when unknown."""
        try:
            categories = await asyncio.wait_for(
                self.category_repo.list_active(), timeout=self.timeout_seconds
            )
        except asyncio.TimeoutError:
            logger.warning("Category name lookup timed out for %s", code)
            return code
        except Exception as e:
            logger.warning("Category name lookup failed for %s: %s", code, e)
            return code
        for category in categories:
            if category.code == code:
                return category.name_th or category.name_en or code
        return code
