"""Keyword search over posts, product listings and accounts.

A query is split on whitespace. Post searches require every word to match
somewhere (content, product name, and optionally a tag name); account
searches accept a match of any word in username, nickname or bio. Matching
is case-insensitive substring matching, not ranked full-text search.
Results page newest first behind a ``before`` cursor, using the same
keyset rule as the timeline.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal

from sqlalchemy import ColumnElement, and_, or_, select
from sqlalchemy.orm import Session

from yatai_stage.db.time import ensure_utc
from yatai_stage.models import Follow, Post, Product, Tag, User
from yatai_stage.repositories.post_repo import projection_load_options
from yatai_stage.services.errors import CursorNotFoundError, InvalidRequestError
from yatai_stage.services.filters import (
    CursorAnchor,
    Direction,
    FeedWindow,
    order_clauses,
    position_predicates,
)
from yatai_stage.services.viewer import ANONYMOUS

logger = logging.getLogger(__name__)

SearchKind = Literal["posts", "products", "users"]


@dataclass(frozen=True)
class SearchQuery:
    """Parsed search request."""

    words: tuple[str, ...]
    kind: SearchKind = "posts"
    include_tags: bool = False
    before: str | None = None


def parse_query(
    q: str,
    *,
    kind: SearchKind = "posts",
    include_tags: bool = False,
    before: str | None = None,
) -> SearchQuery:
    """Split ``q`` into search words.

    Raises:
        InvalidRequestError: If ``q`` holds no words.
    """
    words = tuple(dict.fromkeys(q.split()))
    if not words:
        raise InvalidRequestError("q: must contain at least one word")
    return SearchQuery(words=words, kind=kind, include_tags=include_tags, before=before or None)


def _word_matches_post(word: str, include_tags: bool) -> ColumnElement[bool]:
    clauses = [
        Post.content.icontains(word, autoescape=True),
        Post.product.has(Product.name.icontains(word, autoescape=True)),
    ]
    if include_tags:
        clauses.append(Post.tags.any(Tag.name.icontains(word, autoescape=True)))
    return or_(*clauses)


def _before_window(session: Session, model: type[Post] | type[User], cursor_id: str | None) -> FeedWindow:
    if cursor_id is None:
        return FeedWindow()
    created_at = session.execute(
        select(model.created_at).where(model.id == cursor_id)
    ).scalar_one_or_none()
    if created_at is None:
        raise CursorNotFoundError(cursor_id)
    return FeedWindow(
        direction=Direction.BEFORE,
        anchor=CursorAnchor(entry_id=cursor_id, created_at=ensure_utc(created_at)),
    )


def search_posts(session: Session, query: SearchQuery, *, limit: int) -> list[Post]:
    """Return active top-level posts matching every word, newest first.

    ``products`` searches only consider posts that list a product.

    Raises:
        CursorNotFoundError: If ``query.before`` is not a post id.
    """
    window = _before_window(session, Post, query.before)
    clauses = [
        Post.is_active.is_(True),
        Post.replied_id.is_(None),
        and_(*(_word_matches_post(word, query.include_tags) for word in query.words)),
        *position_predicates(Post.created_at, Post.id, window),
    ]
    if query.kind == "products":
        clauses.append(Post.product.has())

    stmt = (
        select(Post)
        .where(*clauses)
        .order_by(*order_clauses(Post.created_at, Post.id, Direction.BEFORE))
        .limit(limit)
        .options(*projection_load_options())
    )
    posts = list(session.scalars(stmt))
    logger.debug("Post search kind=%s words=%d results=%d", query.kind, len(query.words), len(posts))
    return posts


def search_users(session: Session, query: SearchQuery, *, limit: int) -> list[User]:
    """Return active users matching any word, newest accounts first.

    Raises:
        CursorNotFoundError: If ``query.before`` is not a user id.
    """
    window = _before_window(session, User, query.before)
    matches = [
        or_(
            User.username.icontains(word, autoescape=True),
            User.nickname.icontains(word, autoescape=True),
            User.bio.icontains(word, autoescape=True),
        )
        for word in query.words
    ]
    stmt = (
        select(User)
        .where(
            User.is_active.is_(True),
            or_(*matches),
            *position_predicates(User.created_at, User.id, window),
        )
        .order_by(*order_clauses(User.created_at, User.id, Direction.BEFORE))
        .limit(limit)
    )
    return list(session.scalars(stmt))


def followed_ids(session: Session, viewer_id: str, user_ids: list[str]) -> set[str]:
    """Return which of ``user_ids`` the viewer follows, in one query."""
    if viewer_id == ANONYMOUS or not user_ids:
        return set()
    stmt = select(Follow.followee_id).where(
        Follow.follower_id == viewer_id,
        Follow.followee_id.in_(user_ids),
    )
    return set(session.scalars(stmt))
