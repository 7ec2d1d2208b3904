"""SQLAlchemy models for the Yatai application."""

from .engagement import Like, Repost
from .impression import DailyPostImpression
from .post import Post, PostImage, Tag, normalize_tag_name, post_tag
from .product import PriceHistory, Product, ProductRating
from .user import Follow, User

__all__ = [
    "DailyPostImpression",
    "Follow",
    "Like",
    "Post", "PostImage", "Tag", "normalize_tag_name", "post_tag",
    "PriceHistory", "Product", "ProductRating",
    "Repost",
    "User",
]
