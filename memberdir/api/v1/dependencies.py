"""Presentation-layer dependency injection (composition root).

Provides FastAPI Depends() for sessions, repositories and use cases. Routes
depend only on these providers, never on infrastructure directly; tests
replace them with app.dependency_overrides.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from memberdir.application.dtos.directory import DirectoryPrincipal
from memberdir.application.services.carousel_packer import CarouselPacker
from memberdir.application.services.category_resolver import CategoryResolver
from memberdir.application.services.reply_delivery import ReplyDeliveryService
from memberdir.application.use_cases.chat_dispatch import ChatEventDispatcher
from memberdir.application.use_cases.lookup import DirectoryLookupService
from memberdir.application.use_cases.search import DirectorySearchService
from memberdir.core.config import Settings, get_settings
from memberdir.core.tenant_context import tenant_scope
from memberdir.core.tenant_validation import is_valid_tenant_id_format
from memberdir.domain.exceptions import (
    TenantNotResolvableException,
    ValidationException,
)
from memberdir.infrastructure.external.line import (
    BusinessCardRenderer,
    LineLoginClient,
    LineMessagingClient,
)
from memberdir.infrastructure.persistence.database import (
    SessionFactory,
    get_session_factory,
)
from memberdir.infrastructure.persistence.repositories import (
    CategoryRepository,
    DirectoryRepository,
)


def get_settings_dep() -> Settings:
    """Settings as a dependency (overridable in tests)."""
    return get_settings()


def get_session_factory_dep() -> SessionFactory:
    """Session factory for components that open one session per concurrent task."""
    return get_session_factory()


def get_directory_repo(
    session_factory: Annotated[SessionFactory, Depends(get_session_factory_dep)],
) -> DirectoryRepository:
    return DirectoryRepository(session_factory)


def get_category_repo(
    session_factory: Annotated[SessionFactory, Depends(get_session_factory_dep)],
) -> CategoryRepository:
    return CategoryRepository(session_factory)


_http_bearer = HTTPBearer(auto_error=False)


def get_line_login_client(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings_dep)],
) -> LineLoginClient | None:
    """LINE Login client for ID token checks; None when no login channel is configured."""
    if not settings.line_login_channel_id:
        return None
    return LineLoginClient(
        settings.line_login_channel_id,
        base_url=settings.line_login_api_base_url,
        http_client=getattr(request.app.state, "line_http_client", None),
        timeout_seconds=settings.line_http_timeout_seconds,
    )


async def get_current_member_optional(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_http_bearer)],
    login_client: Annotated[LineLoginClient | None, Depends(get_line_login_client)],
) -> DirectoryPrincipal | None:
    """Return the caller from a LINE ID token bearer credential if present and valid; else None."""
    if not credentials:
        return None
    if login_client is None:
        raise HTTPException(
            status_code=503,
            detail="LINE Login is not configured (LINE_LOGIN_CHANNEL_ID is not set).",
        )
    line_user_id = await login_client.verify_id_token(credentials.credentials)
    if not line_user_id:
        return None
    return DirectoryPrincipal(line_user_id=line_user_id)


async def get_current_member(
    member: Annotated[DirectoryPrincipal | None, Depends(get_current_member_optional)],
) -> DirectoryPrincipal:
    """Return the verified caller; raise 401 if the ID token is missing or invalid."""
    if member is None:
        raise HTTPException(
            status_code=401,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return member


async def get_tenant_id(
    request: Request,
    member: Annotated[DirectoryPrincipal, Depends(get_current_member)],
    directory_repo: Annotated[DirectoryRepository, Depends(get_directory_repo)],
    settings: Annotated[Settings, Depends(get_settings_dep)],
) -> str:
    """Resolve the tenant of the verified caller.

    Without the tenant header, the tenant the caller's LINE account is linked
    to. With it, the named tenant, provided the caller has an entry there
    (403 otherwise). Routes run their reads inside tenant_scope(tenant_id).
    """
    name = settings.tenant_header_name
    requested = request.headers.get(name)
    if not requested:
        tenant_id = await directory_repo.find_tenant_for_line_user(member.line_user_id)
        if tenant_id is None:
            raise TenantNotResolvableException(member.line_user_id)
        return tenant_id
    if not is_valid_tenant_id_format(requested):
        raise ValidationException(
            "Invalid tenant ID format (use alphanumeric, hyphen, underscore; max 64 characters)",
            field=name,
        )
    with tenant_scope(requested):
        linked = await directory_repo.is_linked(requested, member.line_user_id)
    if not linked:
        raise HTTPException(status_code=403, detail="Forbidden")
    return requested


def get_category_resolver(
    category_repo: Annotated[CategoryRepository, Depends(get_category_repo)],
    settings: Annotated[Settings, Depends(get_settings_dep)],
) -> CategoryResolver:
    return CategoryResolver(
        category_repo, timeout_seconds=settings.category_lookup_timeout_seconds
    )


def get_search_service(
    directory_repo: Annotated[DirectoryRepository, Depends(get_directory_repo)],
    category_resolver: Annotated[CategoryResolver, Depends(get_category_resolver)],
    settings: Annotated[Settings, Depends(get_settings_dep)],
) -> DirectorySearchService:
    return DirectorySearchService(
        directory_repo, category_resolver, tag_scan_limit=settings.tag_scan_limit
    )


def get_card_renderer(
    settings: Annotated[Settings, Depends(get_settings_dep)],
) -> BusinessCardRenderer:
    return BusinessCardRenderer(
        settings.public_base_url, share_enabled=settings.card_share_enabled
    )


def get_carousel_packer(
    renderer: Annotated[BusinessCardRenderer, Depends(get_card_renderer)],
    settings: Annotated[Settings, Depends(get_settings_dep)],
) -> CarouselPacker:
    return CarouselPacker(
        renderer,
        public_base_url=settings.public_base_url,
        operating_cap=settings.carousel_operating_cap,
    )


def get_line_client(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings_dep)],
) -> LineMessagingClient:
    """LINE client on the shared HTTP client from lifespan. 503 when no access token."""
    if settings.line_channel_access_token is None:
        raise HTTPException(
            status_code=503,
            detail="LINE channel is not configured (LINE_CHANNEL_ACCESS_TOKEN is not set).",
        )
    return LineMessagingClient(
        settings.line_channel_access_token.get_secret_value(),
        base_url=settings.line_api_base_url,
        http_client=getattr(request.app.state, "line_http_client", None),
        timeout_seconds=settings.line_http_timeout_seconds,
    )


def get_reply_delivery(
    line_client: Annotated[LineMessagingClient, Depends(get_line_client)],
) -> ReplyDeliveryService:
    return ReplyDeliveryService(line_client)


def get_lookup_service(
    search_service: Annotated[DirectorySearchService, Depends(get_search_service)],
    packer: Annotated[CarouselPacker, Depends(get_carousel_packer)],
    delivery: Annotated[ReplyDeliveryService, Depends(get_reply_delivery)],
    category_resolver: Annotated[CategoryResolver, Depends(get_category_resolver)],
    settings: Annotated[Settings, Depends(get_settings_dep)],
) -> DirectoryLookupService:
    return DirectoryLookupService(
        search_service,
        packer,
        delivery,
        category_resolver,
        searchable_statuses=tuple(settings.searchable_status_list),
        search_timeout_seconds=settings.search_timeout_seconds,
    )


def get_chat_dispatcher(
    lookup: Annotated[DirectoryLookupService, Depends(get_lookup_service)],
    directory_repo: Annotated[DirectoryRepository, Depends(get_directory_repo)],
    delivery: Annotated[ReplyDeliveryService, Depends(get_reply_delivery)],
) -> ChatEventDispatcher:
    return ChatEventDispatcher(lookup, directory_repo, delivery)
