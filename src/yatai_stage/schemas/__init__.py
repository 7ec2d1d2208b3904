"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .common import DataResponse, ErrorResponse, ListResponse
from .post import PostCreate, ProductCreate, QuoteCreate, ReplyCreate
from .product import PriceCreate, PriceHistoryResponse, RatingUpsert
from .search import UserSearchResult
from .stats import CreatorStats, FollowState
from .timeline import (
    AuthorSummary,
    FeedItem,
    PostDetail,
    PostView,
    ProductSnapshot,
    QuotedPostView,
)

__all__ = [
    "DataResponse", "ErrorResponse", "ListResponse",
    "PostCreate", "ProductCreate", "QuoteCreate", "ReplyCreate",
    "PriceCreate", "PriceHistoryResponse", "RatingUpsert",
    "UserSearchResult",
    "CreatorStats", "FollowState",
    "AuthorSummary", "FeedItem", "PostDetail", "PostView", "ProductSnapshot", "QuotedPostView",
]
