"""Directory API: term search, category browse and the category list.

Pages are 1-based and sized like the chat flow (operating cap minus one), so
a page here shows the same entries as the same page in chat. Search and
browse require a LIFF ID token as bearer credential; the tenant comes from
the caller's linked LINE account, never from the request alone.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, Request

from memberdir.api.v1.dependencies import (
    get_carousel_packer,
    get_category_repo,
    get_search_service,
    get_settings_dep,
    get_tenant_id,
)
from memberdir.application.dtos.search import SearchRequest, SearchResult
from memberdir.application.services.carousel_packer import CarouselPacker
from memberdir.application.use_cases.search import DirectorySearchService
from memberdir.core.config import Settings
from memberdir.core.constants import MAX_PAGE_NUMBER, MAX_TERM_LENGTH
from memberdir.core.limiter import limit_search
from memberdir.core.tenant_context import tenant_scope
from memberdir.infrastructure.persistence.repositories import CategoryRepository
from memberdir.schemas.directory import (
    CategoryListResponse,
    CategoryResponse,
    DirectoryEntryResponse,
    DirectorySearchResponse,
)

router = APIRouter()


def _to_response(result: SearchResult, page: int) -> DirectorySearchResponse:
    return DirectorySearchResponse(
        entries=[DirectoryEntryResponse.model_validate(e) for e in result.entries],
        count=result.count,
        total_found=result.total_found,
        has_more=result.has_more,
        page=page,
        partial=result.is_partial,
    )


@router.get("/search", response_model=DirectorySearchResponse)
@limit_search
async def search_directory(
    request: Request,
    tenant_id: Annotated[str, Depends(get_tenant_id)],
    search_service: Annotated[DirectorySearchService, Depends(get_search_service)],
    packer: Annotated[CarouselPacker, Depends(get_carousel_packer)],
    settings: Annotated[Settings, Depends(get_settings_dep)],
    q: str = Query("", max_length=MAX_TERM_LENGTH),
    page: int = Query(1, ge=1, le=MAX_PAGE_NUMBER),
) -> DirectorySearchResponse:
    """Free-text search within the caller's tenant. Empty q is 400 EMPTY_QUERY."""
    search_request = SearchRequest(
        tenant_id=tenant_id,
        term=q,
        offset=(page - 1) * packer.page_size,
        limit=packer.page_size,
        status_filter=tuple(settings.searchable_status_list),
        timeout_seconds=settings.search_timeout_seconds,
    )
    with tenant_scope(tenant_id):
        result = await search_service.search(search_request)
    return _to_response(result, page)


@router.get(
    "/categories/{category_code}/entries", response_model=DirectorySearchResponse
)
@limit_search
async def browse_category(
    request: Request,
    tenant_id: Annotated[str, Depends(get_tenant_id)],
    search_service: Annotated[DirectorySearchService, Depends(get_search_service)],
    packer: Annotated[CarouselPacker, Depends(get_carousel_packer)],
    settings: Annotated[Settings, Depends(get_settings_dep)],
    category_code: str = Path(..., min_length=1, max_length=32, pattern=r"^[A-Za-z0-9_-]+$"),
    page: int = Query(1, ge=1, le=MAX_PAGE_NUMBER),
) -> DirectorySearchResponse:
    """Entries of the caller's tenant whose category is exactly category_code."""
    search_request = SearchRequest(
        tenant_id=tenant_id,
        category_code=category_code,
        offset=(page - 1) * packer.page_size,
        limit=packer.page_size,
        status_filter=tuple(settings.searchable_status_list),
        timeout_seconds=settings.search_timeout_seconds,
    )
    with tenant_scope(tenant_id):
        result = await search_service.search(search_request)
    return _to_response(result, page)


@router.get("/categories", response_model=CategoryListResponse)
async def list_categories(
    category_repo: Annotated[CategoryRepository, Depends(get_category_repo)],
) -> CategoryListResponse:
    """Active business categories ordered for display."""
    categories = await category_repo.list_active()
    return CategoryListResponse(
        categories=[
            CategoryResponse(
                code=c.code, name_th=c.name_th, name_en=c.name_en, sort_order=c.sort_order
            )
            for c in categories
        ]
    )
