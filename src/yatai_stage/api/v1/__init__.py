# src/yatai_stage/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import (
    engagement_router,
    posts_router,
    products_router,
    search_router,
    stats_router,
    system_router,
    users_router,
)

__all__ = [
    "engagement_router",
    "posts_router",
    "products_router",
    "search_router",
    "stats_router",
    "system_router",
    "users_router",
]
