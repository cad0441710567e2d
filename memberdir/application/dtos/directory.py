"""DTOs for directory entries and business categories (read-models)."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class DirectoryEntry:
    """One searchable person record, scoped to a tenant."""

    id: str
    tenant_id: str
    full_name_th: str
    status: str
    full_name_en: str | None = None
    nickname_th: str | None = None
    nickname_en: str | None = None
    position: str | None = None
    company: str | None = None
    tagline: str | None = None
    category_code: str | None = None
    tags: tuple[str, ...] = field(default_factory=tuple)
    phone: str | None = None
    email: str | None = None
    line_id: str | None = None
    line_user_id: str | None = None
    photo_url: str | None = None
    website_url: str | None = None
    onepage_url: str | None = None

    @property
    def display_name(self) -> str:
        """Primary name, falling back to the secondary-language name."""
        return self.full_name_th or self.full_name_en or ""

    @property
    def nickname(self) -> str | None:
        return self.nickname_th or self.nickname_en


@dataclass(frozen=True)
class Category:
    """Business category reference data (code plus localized names)."""

    code: str
    name_th: str
    name_en: str | None = None
    sort_order: int = 0

    def display_names(self) -> list[str]:
        """Localized names that a search term is matched against."""
        return [n for n in (self.name_th, self.name_en) if n]


@dataclass(frozen=True)
class DirectoryPrincipal:
    """Caller of the directory API, identified by a verified LINE ID token."""

    line_user_id: str
