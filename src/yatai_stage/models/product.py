"""Product listings with append-only price history and ratings."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    SmallInteger,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from yatai_stage.db.session import Base
from yatai_stage.db.time import utcnow
from yatai_stage.utils.ids import new_id

if TYPE_CHECKING:
    from .post import Post


class Product(Base):
    """Listing attached 1:1 to the post that advertises it."""

    __tablename__ = "product"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    post_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("post.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    thumbnail_link: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Deliverable blob; absent for live releases.
    product_link: Mapped[str | None] = mapped_column(Text, nullable=True)
    live_release: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    post: Mapped[Post] = relationship("Post", back_populates="product")
    price_history: Mapped[list[PriceHistory]] = relationship(
        "PriceHistory",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="PriceHistory.created_at",
    )
    ratings: Mapped[list[ProductRating]] = relationship(
        "ProductRating",
        back_populates="product",
        cascade="all, delete-orphan",
    )


class PriceHistory(Base):
    """Append-only price record; the newest row is the current price."""

    __tablename__ = "price_history"
    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_price_history_non_negative"),
        Index("ix_price_history_product_created", "product_id", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    product_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("product.id", ondelete="CASCADE"),
        nullable=False,
    )
    price: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    product: Mapped[Product] = relationship("Product", back_populates="price_history")


class ProductRating(Base):
    """One rating per user and product, overwritten on re-rate."""

    __tablename__ = "product_rating"
    __table_args__ = (
        UniqueConstraint("product_id", "user_id", name="uq_product_rating_product_user"),
        CheckConstraint("value BETWEEN 1 AND 5", name="ck_product_rating_value"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    product_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("product.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("user_account.id", ondelete="CASCADE"),
        nullable=False,
    )
    value: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    product: Mapped[Product] = relationship("Product", back_populates="ratings")
