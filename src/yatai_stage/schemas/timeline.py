"""Feed item schemas returned by timeline, detail and quote endpoints."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class AuthorSummary(BaseModel):
    """Public fields of a user shown next to their content."""

    id: str
    username: str
    nickname: str
    icon_link: str | None = None

    model_config = ConfigDict(from_attributes=True)


class ProductSnapshot(BaseModel):
    """Listing state derived from the append-only price and rating tables."""

    id: str
    name: str
    thumbnail_link: str | None = None
    live_release: bool
    current_price: int | None = Field(
        None, description="Newest price; null for live releases or unpriced listings"
    )
    current_avg_rating: float | None = Field(
        None, description="Mean of all ratings; null when nobody has rated yet"
    )
    rating_count: int = 0


class PostContent(BaseModel):
    """Projection of one post as seen by a particular viewer."""

    id: str
    author: AuthorSummary
    content: str
    live_link: str | None = None
    replied_id: str | None = None
    quoted_id: str | None = None
    created_at: datetime
    updated_at: datetime
    like_count: int
    ref_count: int
    comment_count: int
    quote_count: int
    images: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    product: ProductSnapshot | None = None
    viewer_has_liked: bool = False
    viewer_has_reposted: bool = False


class QuotedPostView(PostContent):
    """Nested preview of a quoted post; never expanded further."""


class PostView(PostContent):
    """Projection of a post, with its quoted post one level deep."""

    quoted: QuotedPostView | None = None


class PostDetail(PostView):
    """Single-post view including its replies."""

    replies: list[PostView] = Field(default_factory=list)


class FeedItem(BaseModel):
    """One timeline entry: an original post or a repost of one.

    ``id`` and ``created_at`` identify and position the entry (the repost's
    own values for reposts) and ``id`` doubles as the pagination cursor.
    """

    id: str
    type: Literal["post", "repost"]
    created_at: datetime
    actor: AuthorSummary
    post: PostView
