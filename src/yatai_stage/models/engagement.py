"""Models capturing likes and reposts on posts."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from yatai_stage.db.session import Base
from yatai_stage.db.time import utcnow
from yatai_stage.utils.ids import new_id

from .post import Post
from .user import User


class Like(Base):
    """Per-user like on a post, mirrored by ``Post.like_count``."""

    __tablename__ = "post_like"
    __table_args__ = (Index("ix_post_like_post_id", "post_id"),)

    # Composite primary key prevents duplicate likes from the same user.
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("user_account.id", ondelete="CASCADE"),
        primary_key=True,
    )
    post_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("post.id", ondelete="CASCADE"),
        primary_key=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    post: Mapped[Post] = relationship("Post", back_populates="likes")


class Repost(Base):
    """Pointer that resurfaces a post at the repost's own timestamp."""

    __tablename__ = "repost"
    __table_args__ = (
        UniqueConstraint("user_id", "post_id", name="uq_repost_user_post"),
        Index("ix_repost_created_at_id", "created_at", "id"),
        Index("ix_repost_post_id", "post_id"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("user_account.id", ondelete="CASCADE"),
        nullable=False,
    )
    post_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("post.id", ondelete="CASCADE"),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    user: Mapped[User] = relationship("User")
    post: Mapped[Post] = relationship("Post", back_populates="reposts")
