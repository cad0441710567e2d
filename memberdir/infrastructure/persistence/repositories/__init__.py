"""Repositories: tenant-scoped reads returning application DTOs."""

from memberdir.infrastructure.persistence.repositories.category_repo import (
    CategoryRepository,
)
from memberdir.infrastructure.persistence.repositories.directory_repo import (
    DirectoryRepository,
)

__all__ = ["CategoryRepository", "DirectoryRepository"]
