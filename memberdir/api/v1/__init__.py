"""API v1: routers and dependency composition root."""

from memberdir.api.v1.router import api_router

__all__ = ["api_router"]
