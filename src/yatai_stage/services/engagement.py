"""Write paths that keep post counters in step with their rows.

Every function flushes the row change and the matching counter update
through the same session; the caller commits once, so a failure leaves
neither behind. Counters are updated with SQL arithmetic
(``like_count = like_count + 1``), never read-modify-write.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from yatai_stage.models import (
    Like,
    Post,
    PostImage,
    PriceHistory,
    Product,
    Repost,
    Tag,
    User,
    normalize_tag_name,
)
from yatai_stage.repositories.post_repo import PostRepository
from yatai_stage.schemas.post import PostCreate, QuoteCreate, ReplyCreate
from yatai_stage.services.errors import (
    InvalidRequestError,
    NotFoundError,
    PermissionDeniedError,
)

logger = logging.getLogger(__name__)


def _bump(session: Session, post_id: str, column: str, delta: int) -> None:
    session.execute(
        update(Post)
        .where(Post.id == post_id)
        .values({column: getattr(Post, column) + delta})
    )


def _get_post_or_raise(session: Session, post_id: str) -> Post:
    post = PostRepository(session).get_active(post_id)
    if post is None:
        raise NotFoundError("Post not found")
    return post


def _resolve_tags(session: Session, names: Iterable[str]) -> list[Tag]:
    normalized: list[str] = []
    for name in names:
        tag_name = normalize_tag_name(name)
        if tag_name and tag_name not in normalized:
            normalized.append(tag_name)
    if not normalized:
        return []

    existing = {
        tag.name: tag
        for tag in session.scalars(select(Tag).where(Tag.name.in_(normalized)))
    }
    tags: list[Tag] = []
    for tag_name in normalized:
        tag = existing.get(tag_name)
        if tag is None:
            tag = Tag(name=tag_name)
            session.add(tag)
        tags.append(tag)
    return tags


def _images(names: Sequence[str]) -> list[PostImage]:
    return [PostImage(position=index, image_link=name) for index, name in enumerate(names)]


def like_post(session: Session, user: User, post_id: str) -> Post:
    """Record a like and increment ``like_count``."""
    post = _get_post_or_raise(session, post_id)
    if session.get(Like, (user.id, post_id)) is not None:
        raise InvalidRequestError("Post is already liked")
    session.add(Like(user_id=user.id, post_id=post_id))
    try:
        session.flush()
    except IntegrityError as exc:
        session.rollback()
        raise InvalidRequestError("Post is already liked") from exc
    _bump(session, post_id, "like_count", 1)
    return post


def unlike_post(session: Session, user: User, post_id: str) -> Post:
    """Remove a like and decrement ``like_count``."""
    post = _get_post_or_raise(session, post_id)
    result = session.execute(
        delete(Like)
        .where(Like.user_id == user.id, Like.post_id == post_id)
    )
    if result.rowcount == 0:
        raise InvalidRequestError("Post is not liked")
    _bump(session, post_id, "like_count", -1)
    return post


def repost_post(session: Session, user: User, post_id: str) -> Repost:
    """Create the user's repost of a top-level post and increment ``ref_count``."""
    post = _get_post_or_raise(session, post_id)
    if post.replied_id is not None:
        raise InvalidRequestError("Replies cannot be reposted")
    existing = session.scalars(
        select(Repost).where(Repost.user_id == user.id, Repost.post_id == post_id)
    ).first()
    if existing is not None:
        raise InvalidRequestError("Post is already reposted")
    repost = Repost(user_id=user.id, post_id=post_id)
    session.add(repost)
    try:
        session.flush()
    except IntegrityError as exc:
        session.rollback()
        raise InvalidRequestError("Post is already reposted") from exc
    _bump(session, post_id, "ref_count", 1)
    return repost


def unrepost_post(session: Session, user: User, post_id: str) -> Post:
    """Delete the user's repost and decrement ``ref_count``."""
    post = _get_post_or_raise(session, post_id)
    result = session.execute(
        delete(Repost)
        .where(Repost.user_id == user.id, Repost.post_id == post_id)
    )
    if result.rowcount == 0:
        raise InvalidRequestError("Post is not reposted")
    _bump(session, post_id, "ref_count", -1)
    return post


def create_post(session: Session, author: User, data: PostCreate) -> Post:
    """Create a top-level post, optionally listing a product."""
    post = Post(
        user_id=author.id,
        content=data.content,
        live_link=data.live_link,
        tags=_resolve_tags(session, data.tag_names),
        images=_images(data.image_names),
    )
    if data.product is not None:
        product = Product(
            name=data.product.name,
            thumbnail_link=data.product.thumbnail_link,
            product_link=data.product.product_link,
            live_release=data.product.live_release,
        )
        if data.product.price is not None:
            product.price_history.append(PriceHistory(price=data.product.price))
        post.product = product
    session.add(post)
    session.flush()
    logger.info("Created post %s by %s", post.id, author.id)
    return post


def create_reply(session: Session, author: User, parent_id: str, data: ReplyCreate) -> Post:
    """Reply to a post and increment its ``comment_count``."""
    _get_post_or_raise(session, parent_id)
    reply = Post(
        user_id=author.id,
        content=data.content,
        replied_id=parent_id,
        images=_images(data.image_names),
    )
    session.add(reply)
    session.flush()
    _bump(session, parent_id, "comment_count", 1)
    return reply


def create_quote(session: Session, author: User, quoted_id: str, data: QuoteCreate) -> Post:
    """Quote a post and increment its ``quote_count``."""
    _get_post_or_raise(session, quoted_id)
    quote = Post(
        user_id=author.id,
        content=data.content,
        quoted_id=quoted_id,
        tags=_resolve_tags(session, data.tag_names),
        images=_images(data.image_names),
    )
    session.add(quote)
    session.flush()
    _bump(session, quoted_id, "quote_count", 1)
    return quote


def delete_post(session: Session, actor: User, post_id: str) -> None:
    """Delete a post owned by ``actor`` (or any post for superusers).

    The replied-to and quoted posts lose the count this post contributed.
    """
    post = _get_post_or_raise(session, post_id)
    if post.user_id != actor.id and not actor.is_superuser:
        raise PermissionDeniedError("You can only delete your own posts")

    if post.replied_id is not None:
        _bump(session, post.replied_id, "comment_count", -1)
    if post.quoted_id is not None:
        _bump(session, post.quoted_id, "quote_count", -1)
    session.delete(post)
    session.flush()
    logger.info("Deleted post %s by %s", post_id, actor.id)
