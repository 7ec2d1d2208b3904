"""Post projection: the per-viewer shape of a post on a page."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from yatai_stage.db.time import ensure_utc
from yatai_stage.models import Like, Post, Product, Repost
from yatai_stage.repositories.post_repo import Candidate
from yatai_stage.schemas.timeline import (
    AuthorSummary,
    FeedItem,
    PostDetail,
    PostView,
    ProductSnapshot,
    QuotedPostView,
)
from yatai_stage.services.snapshots import NO_STATS, ProductStats, SnapshotResolver
from yatai_stage.services.viewer import ANONYMOUS


@dataclass(frozen=True)
class ViewerMarkers:
    """Which of a page's posts the viewer has liked or reposted."""

    liked: frozenset[str] = field(default_factory=frozenset)
    reposted: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def load(cls, session: Session, viewer_id: str, post_ids: Iterable[str]) -> ViewerMarkers:
        """Query only the viewer's own like/repost rows for ``post_ids``."""
        ids = set(post_ids)
        if viewer_id == ANONYMOUS or not ids:
            return cls()
        liked = session.scalars(
            select(Like.post_id).where(Like.user_id == viewer_id, Like.post_id.in_(ids))
        )
        reposted = session.scalars(
            select(Repost.post_id).where(Repost.user_id == viewer_id, Repost.post_id.in_(ids))
        )
        return cls(liked=frozenset(liked), reposted=frozenset(reposted))


def _visible_quoted(post: Post) -> Post | None:
    quoted = post.quoted
    if quoted is None or not quoted.is_active:
        return None
    return quoted


class ProjectionBuilder:
    """Pure mapping from loaded posts to API views.

    All per-viewer and per-product data is supplied up front, so projecting
    never touches the database beyond already-loaded relationships.
    """

    def __init__(
        self,
        markers: ViewerMarkers,
        product_stats: Mapping[str, ProductStats],
    ) -> None:
        self.markers = markers
        self.product_stats = product_stats

    def project(self, post: Post) -> PostView:
        quoted = _visible_quoted(post)
        return PostView(
            **self._content_fields(post),
            quoted=QuotedPostView(**self._content_fields(quoted)) if quoted else None,
        )

    def project_detail(self, post: Post, replies: Iterable[Post]) -> PostDetail:
        return PostDetail(
            **self.project(post).model_dump(),
            replies=[self.project(reply) for reply in replies],
        )

    def feed_item(self, candidate: Candidate) -> FeedItem:
        return FeedItem(
            id=candidate.entry_id,
            type=candidate.kind,
            created_at=candidate.created_at,
            actor=AuthorSummary.model_validate(candidate.actor),
            post=self.project(candidate.post),
        )

    def product_snapshot(self, product: Product) -> ProductSnapshot:
        stats = self.product_stats.get(product.id, NO_STATS)
        return ProductSnapshot(
            id=product.id,
            name=product.name,
            thumbnail_link=product.thumbnail_link,
            live_release=product.live_release,
            # Live releases are never priced, whatever the history says.
            current_price=None if product.live_release else stats.current_price,
            current_avg_rating=stats.avg_rating,
            rating_count=stats.rating_count,
        )

    def _content_fields(self, post: Post) -> dict[str, Any]:
        return {
            "id": post.id,
            "author": AuthorSummary.model_validate(post.author),
            "content": post.content,
            "live_link": post.live_link,
            "replied_id": post.replied_id,
            "quoted_id": post.quoted_id,
            "created_at": ensure_utc(post.created_at),
            "updated_at": ensure_utc(post.updated_at),
            "like_count": post.like_count,
            "ref_count": post.ref_count,
            "comment_count": post.comment_count,
            "quote_count": post.quote_count,
            "images": [image.image_link for image in post.images],
            "tags": [tag.name for tag in post.tags],
            "product": self.product_snapshot(post.product) if post.product else None,
            "viewer_has_liked": post.id in self.markers.liked,
            "viewer_has_reposted": post.id in self.markers.reposted,
        }


def build_projector(
    session: Session,
    viewer_id: str,
    posts: Iterable[Post],
) -> ProjectionBuilder:
    """Load markers and product snapshots for ``posts`` and their quoted posts in batch."""
    rendered: dict[str, Post] = {}
    for post in posts:
        rendered[post.id] = post
        quoted = _visible_quoted(post)
        if quoted is not None:
            rendered[quoted.id] = quoted

    markers = ViewerMarkers.load(session, viewer_id, rendered)
    product_ids = [post.product.id for post in rendered.values() if post.product is not None]
    stats = SnapshotResolver(session).resolve(product_ids)
    return ProjectionBuilder(markers, stats)
