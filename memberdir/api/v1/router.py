"""API v1 router aggregation."""

from fastapi import APIRouter

from memberdir.api.v1.endpoints import directory, health, line_webhook

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(directory.router, prefix="/directory", tags=["directory"])
api_router.include_router(line_webhook.router, prefix="/line", tags=["line"])
