"""Data access helpers for posts and timeline candidates."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal, Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload
from sqlalchemy.orm.interfaces import LoaderOption

from yatai_stage.db.time import ensure_utc
from yatai_stage.models import Post, Repost, User
from yatai_stage.services.filters import (
    CompiledFilters,
    CursorAnchor,
    Direction,
    FeedWindow,
    order_clauses,
    position_predicates,
)

__all__ = [
    "Candidate",
    "CandidateSource",
    "PostCandidateSource",
    "PostRepository",
    "RepostCandidateSource",
    "projection_load_options",
]


def projection_load_options() -> tuple[LoaderOption, ...]:
    """Eager loads needed to project a post and its quoted post."""
    return (
        selectinload(Post.author),
        selectinload(Post.images),
        selectinload(Post.tags),
        selectinload(Post.product),
        selectinload(Post.quoted).options(
            selectinload(Post.author),
            selectinload(Post.images),
            selectinload(Post.tags),
            selectinload(Post.product),
        ),
    )


@dataclass(frozen=True)
class Candidate:
    """A timeline entry before projection.

    ``entry_id``/``created_at``/``actor`` place the entry on the timeline;
    ``post`` supplies the content.
    """

    entry_id: str
    kind: Literal["post", "repost"]
    created_at: datetime
    actor: User
    post: Post


class CandidateSource(Protocol):
    """One kind of timeline entry, fetched with its own bounded query."""

    def fetch(self, filters: CompiledFilters, limit: int) -> list[Candidate]:
        ...


class PostCandidateSource:
    """Original posts matching the compiled filters."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def fetch(self, filters: CompiledFilters, limit: int) -> list[Candidate]:
        stmt = (
            select(Post)
            .where(*filters.posts)
            .order_by(*filters.post_order)
            .limit(limit)
            .options(*projection_load_options())
        )
        return [
            Candidate(
                entry_id=post.id,
                kind="post",
                created_at=ensure_utc(post.created_at),
                actor=post.author,
                post=post,
            )
            for post in self.session.scalars(stmt)
        ]


class RepostCandidateSource:
    """Reposts whose target post matches the compiled content filters."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def fetch(self, filters: CompiledFilters, limit: int) -> list[Candidate]:
        target = filters.repost_target
        stmt = (
            select(Repost)
            .join(target, Repost.post_id == target.id)
            .where(*filters.reposts)
            .order_by(*filters.repost_order)
            .limit(limit)
            .options(
                selectinload(Repost.user),
                selectinload(Repost.post).options(*projection_load_options()),
            )
        )
        return [
            Candidate(
                entry_id=repost.id,
                kind="repost",
                created_at=ensure_utc(repost.created_at),
                actor=repost.user,
                post=repost.post,
            )
            for repost in self.session.scalars(stmt)
        ]


class PostRepository:
    """Thin wrapper around database access for post entities."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_active(self, post_id: str, *, with_projection: bool = False) -> Post | None:
        """Return an active post by identifier."""
        stmt = select(Post).where(Post.id == post_id, Post.is_active.is_(True))
        if with_projection:
            stmt = stmt.options(*projection_load_options())
        return self.session.scalars(stmt).first()

    def list_replies(self, post_id: str) -> list[Post]:
        """Return active replies to a post, oldest first."""
        stmt = (
            select(Post)
            .where(Post.replied_id == post_id, Post.is_active.is_(True))
            .order_by(Post.created_at.asc(), Post.id.asc())
            .options(*projection_load_options())
        )
        return list(self.session.scalars(stmt))

    def list_quotes(
        self,
        quoted_id: str,
        *,
        limit: int,
        before: CursorAnchor | None = None,
        products_only: bool = False,
    ) -> list[Post]:
        """Return active posts quoting ``quoted_id``, newest first."""
        window = FeedWindow(direction=Direction.BEFORE, anchor=before)
        stmt = select(Post).where(
            Post.quoted_id == quoted_id,
            Post.is_active.is_(True),
            *position_predicates(Post.created_at, Post.id, window),
        )
        if products_only:
            stmt = stmt.where(Post.product.has())
        stmt = (
            stmt.order_by(*order_clauses(Post.created_at, Post.id, Direction.BEFORE))
            .limit(limit)
            .options(*projection_load_options())
        )
        return list(self.session.scalars(stmt))
