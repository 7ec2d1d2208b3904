# src/yatai_stage/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .engagement import router as engagement_router
from .posts import router as posts_router
from .products import router as products_router
from .search import router as search_router
from .stats import router as stats_router
from .system import router as system_router
from .users import router as users_router

__all__ = [
    "engagement_router",
    "posts_router",
    "products_router",
    "search_router",
    "stats_router",
    "system_router",
    "users_router",
]
