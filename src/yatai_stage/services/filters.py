"""Cursor and scope filter compilation for timeline queries.

A :class:`FeedWindow` describes one page request. :func:`compile_filters`
turns it into two independent predicate sets: one for the post query and
one for the repost query, whose content predicates apply to the repost's
joined target post. Nothing here mutates shared state; every call builds
fresh SQL expressions.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Any

from sqlalchemy import ColumnElement, and_, false, or_, select
from sqlalchemy.orm import Session, aliased
from sqlalchemy.orm.util import AliasedClass

from yatai_stage.db.time import ensure_utc
from yatai_stage.models import Follow, Post, Product, Repost, Tag, normalize_tag_name
from yatai_stage.schemas.post import FOLLOWING_TAG_ALIASES, LATEST_TAG_ALIASES
from yatai_stage.services.errors import CursorNotFoundError, UnknownScopeError
from yatai_stage.services.viewer import ANONYMOUS

# An empty ``tagName`` also selects the unfiltered timeline.
LATEST_TAGS = LATEST_TAG_ALIASES | {""}


class Direction(StrEnum):
    """Which side of the cursor a page covers."""

    LATEST = "latest"
    BEFORE = "before"
    AFTER = "after"


class ScopeKind(StrEnum):
    ALL = "all"
    TAG = "tag"
    FOLLOWING = "following"
    AUTHOR = "author"


@dataclass(frozen=True)
class Scope:
    """Named selection of eligible posts."""

    kind: ScopeKind = ScopeKind.ALL
    # Tag name for TAG, user id for AUTHOR.
    value: str | None = None


@dataclass(frozen=True)
class CursorAnchor:
    """Timeline position of the entry a cursor refers to."""

    entry_id: str
    created_at: datetime


@dataclass(frozen=True)
class FeedWindow:
    """Everything that decides which entries belong on a page."""

    viewer_id: str = ANONYMOUS
    direction: Direction = Direction.LATEST
    anchor: CursorAnchor | None = None
    scope: Scope = Scope()
    live_only: bool = False


@dataclass(frozen=True)
class CompiledFilters:
    """Predicates and ordering for both candidate queries.

    ``repost_target`` is the alias of ``Post`` the repost predicates were
    built against; the repost query must join through it.
    """

    posts: tuple[ColumnElement[bool], ...]
    post_order: tuple[Any, ...]
    reposts: tuple[ColumnElement[bool], ...]
    repost_order: tuple[Any, ...]
    repost_target: AliasedClass[Post]


def parse_scope(session: Session, tag_name: str | None) -> Scope:
    """Map a ``tagName`` value to a scope.

    Raises:
        UnknownScopeError: If the name is neither a pseudo-tag nor an existing tag.
    """
    if tag_name is None:
        return Scope()
    name = normalize_tag_name(tag_name)
    if name in FOLLOWING_TAG_ALIASES:
        return Scope(ScopeKind.FOLLOWING)
    if name in LATEST_TAGS:
        return Scope()

    exists = session.execute(select(Tag.id).where(Tag.name == name)).first()
    if exists is None:
        raise UnknownScopeError(tag_name)
    return Scope(ScopeKind.TAG, name)


def resolve_cursor(session: Session, cursor_id: str) -> CursorAnchor:
    """Resolve a cursor id to its timeline position.

    The id may belong to a post or a repost; posts are checked first.

    Raises:
        CursorNotFoundError: If neither table has the id.
    """
    created_at = session.execute(
        select(Post.created_at).where(Post.id == cursor_id)
    ).scalar_one_or_none()
    if created_at is None:
        created_at = session.execute(
            select(Repost.created_at).where(Repost.id == cursor_id)
        ).scalar_one_or_none()
    if created_at is None:
        raise CursorNotFoundError(cursor_id)
    return CursorAnchor(entry_id=cursor_id, created_at=ensure_utc(created_at))


def content_predicates(
    target: type[Post] | AliasedClass[Post],
    window: FeedWindow,
) -> list[ColumnElement[bool]]:
    """Build the content filters for ``target``, a post or a repost's target post."""
    clauses: list[ColumnElement[bool]] = [
        target.is_active.is_(True),
        target.replied_id.is_(None),
    ]
    scope = window.scope
    if scope.kind is ScopeKind.TAG:
        clauses.append(target.tags.any(Tag.name == scope.value))
    elif scope.kind is ScopeKind.FOLLOWING:
        clauses.append(_following_predicate(target, window.viewer_id))
    if window.live_only:
        clauses.append(target.product.has(Product.live_release.is_(True)))
    return clauses


def _following_predicate(
    target: type[Post] | AliasedClass[Post],
    viewer_id: str,
) -> ColumnElement[bool]:
    if viewer_id == ANONYMOUS:
        # Anonymous viewers follow nobody and author nothing.
        return false()
    followees = select(Follow.followee_id).where(Follow.follower_id == viewer_id)
    return or_(target.user_id.in_(followees), target.user_id == viewer_id)


def position_predicates(
    created_at: Any,
    entry_id: Any,
    window: FeedWindow,
) -> list[ColumnElement[bool]]:
    """Keyset predicates placing entries strictly on the requested side of the anchor.

    Feed order is ``created_at`` descending with ``id`` ascending on ties, so
    entries sharing the anchor's timestamp are split by id.
    """
    anchor = window.anchor
    if anchor is None or window.direction is Direction.LATEST:
        return []
    if window.direction is Direction.BEFORE:
        return [
            or_(
                created_at < anchor.created_at,
                and_(created_at == anchor.created_at, entry_id > anchor.entry_id),
            )
        ]
    return [
        or_(
            created_at > anchor.created_at,
            and_(created_at == anchor.created_at, entry_id < anchor.entry_id),
        )
    ]


def order_clauses(created_at: Any, entry_id: Any, direction: Direction) -> tuple[Any, ...]:
    """Return ORDER BY clauses walking away from the anchor."""
    if direction is Direction.AFTER:
        return (created_at.asc(), entry_id.desc())
    return (created_at.desc(), entry_id.asc())


def _owner_predicates(owner_id: Any, scope: Scope) -> list[ColumnElement[bool]]:
    # A profile timeline lists what the user authored or reposted.
    if scope.kind is ScopeKind.AUTHOR:
        return [owner_id == scope.value]
    return []


def compile_filters(window: FeedWindow) -> CompiledFilters:
    """Compile ``window`` into predicates for the post and repost queries."""
    target = aliased(Post, name="repost_target")

    posts = (
        *content_predicates(Post, window),
        *_owner_predicates(Post.user_id, window.scope),
        *position_predicates(Post.created_at, Post.id, window),
    )
    reposts = (
        *content_predicates(target, window),
        *_owner_predicates(Repost.user_id, window.scope),
        *position_predicates(Repost.created_at, Repost.id, window),
    )
    return CompiledFilters(
        posts=posts,
        post_order=order_clauses(Post.created_at, Post.id, window.direction),
        reposts=reposts,
        repost_order=order_clauses(Repost.created_at, Repost.id, window.direction),
        repost_target=target,
    )
