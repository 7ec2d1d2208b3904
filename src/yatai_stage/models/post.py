"""SQLAlchemy models for posts, their images and tags."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from yatai_stage.db.session import Base
from yatai_stage.db.time import utcnow
from yatai_stage.utils.ids import new_id

from .user import User

if TYPE_CHECKING:
    from .engagement import Like, Repost
    from .product import Product


# Pure relation; carries no attributes of its own.
post_tag = Table(
    "post_tag",
    Base.metadata,
    Column("post_id", String(36), ForeignKey("post.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", String(36), ForeignKey("tag.id", ondelete="CASCADE"), primary_key=True),
)


def normalize_tag_name(name: str) -> str:
    """Return the canonical (trimmed, case-folded) form of a tag name."""
    return name.strip().casefold()


class Tag(Base):
    """Label attached to posts; names are stored normalized."""

    __tablename__ = "tag"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(128), unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )


class Post(Base):
    """Primary content entity.

    A post is a reply when ``replied_id`` is set (never shown on top-level
    timelines) and a quote when ``quoted_id`` is set. The counters are
    denormalized and only ever changed in the same transaction as the row
    that causes them.
    """

    __tablename__ = "post"
    __table_args__ = (
        Index("ix_post_created_at_id", "created_at", "id"),
        Index("ix_post_user_id", "user_id"),
        Index("ix_post_replied_id", "replied_id"),
        Index("ix_post_quoted_id", "quoted_id"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("user_account.id", ondelete="CASCADE"),
        nullable=False,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    live_link: Mapped[str | None] = mapped_column(Text, nullable=True)

    replied_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("post.id", ondelete="CASCADE"),
        nullable=True,
    )
    quoted_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("post.id", ondelete="SET NULL"),
        nullable=True,
    )

    like_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    ref_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    comment_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    quote_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    author: Mapped[User] = relationship("User")
    images: Mapped[list[PostImage]] = relationship(
        "PostImage",
        back_populates="post",
        cascade="all, delete-orphan",
        order_by="PostImage.position",
    )
    tags: Mapped[list[Tag]] = relationship("Tag", secondary=post_tag)
    product: Mapped[Product | None] = relationship(
        "Product",
        back_populates="post",
        cascade="all, delete-orphan",
        uselist=False,
    )

    replied: Mapped[Post | None] = relationship(
        "Post",
        remote_side=[id],
        foreign_keys=[replied_id],
        back_populates="replies",
    )
    replies: Mapped[list[Post]] = relationship(
        "Post",
        foreign_keys=[replied_id],
        back_populates="replied",
        cascade="all, delete-orphan",
        order_by="Post.created_at",
    )
    quoted: Mapped[Post | None] = relationship(
        "Post",
        remote_side=[id],
        foreign_keys=[quoted_id],
        back_populates="quotes",
    )
    quotes: Mapped[list[Post]] = relationship(
        "Post",
        foreign_keys=[quoted_id],
        back_populates="quoted",
    )

    likes: Mapped[list[Like]] = relationship(
        "Like", back_populates="post", cascade="all, delete-orphan"
    )
    reposts: Mapped[list[Repost]] = relationship(
        "Repost", back_populates="post", cascade="all, delete-orphan"
    )


class PostImage(Base):
    """Image blob attached to a post, kept in upload order."""

    __tablename__ = "post_image"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    post_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("post.id", ondelete="CASCADE"),
        nullable=False,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    image_link: Mapped[str] = mapped_column(Text, nullable=False)

    post: Mapped[Post] = relationship("Post", back_populates="images")
