"""SQLAlchemy models for user accounts and follow edges."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from yatai_stage.db.session import Base
from yatai_stage.db.time import utcnow
from yatai_stage.utils.ids import new_id


class User(Base):
    """Account that authors posts, follows others and rates products."""

    __tablename__ = "user_account"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    username: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    nickname: Mapped[str] = mapped_column(Text, nullable=False, default="")
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    homepage_link: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Blob name; the media service turns it into a URL.
    icon_link: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_superuser: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )


class Follow(Base):
    """Directed follow edge; presence implies the follower sees the followee."""

    __tablename__ = "follow"
    __table_args__ = (
        CheckConstraint("follower_id <> followee_id", name="ck_follow_not_self"),
        Index("ix_follow_followee_id", "followee_id"),
    )

    follower_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("user_account.id", ondelete="CASCADE"),
        primary_key=True,
    )
    followee_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("user_account.id", ondelete="CASCADE"),
        primary_key=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    follower: Mapped[User] = relationship("User", foreign_keys=[follower_id])
    followee: Mapped[User] = relationship("User", foreign_keys=[followee_id])
