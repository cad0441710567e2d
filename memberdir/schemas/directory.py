"""Directory API schemas."""

from pydantic import BaseModel, ConfigDict, Field


class DirectoryEntryResponse(BaseModel):
    """Public view of a directory entry (no LINE user id)."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    full_name_th: str
    full_name_en: str | None = None
    nickname_th: str | None = None
    nickname_en: str | None = None
    position: str | None = None
    company: str | None = None
    tagline: str | None = None
    category_code: str | None = None
    tags: list[str] = Field(default_factory=list)
    phone: str | None = None
    email: str | None = None
    line_id: str | None = None
    photo_url: str | None = None
    website_url: str | None = None
    onepage_url: str | None = None
    status: str


class DirectorySearchResponse(BaseModel):
    """One page of search or category-browse results."""

    success: bool = True
    entries: list[DirectoryEntryResponse]
    count: int = Field(..., description="Entries on this page")
    total_found: int = Field(..., description="Best-effort total across pages")
    has_more: bool
    page: int
    partial: bool = Field(
        default=False, description="True when some sub-queries did not finish"
    )


class CategoryResponse(BaseModel):
    """Business category reference entry."""

    code: str
    name_th: str
    name_en: str | None = None
    sort_order: int = 0


class CategoryListResponse(BaseModel):
    categories: list[CategoryResponse]
