"""initial schema

Revision ID: 3b9e6c1d2a70
Revises:
Create Date: 2026-10-19 10:12:41.508311

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "3b9e6c1d2a70"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _created_at() -> sa.Column:
    return sa.Column("created_at", sa.DateTime(timezone=True), nullable=False)


def upgrade() -> None:
    """Create accounts, posts, engagement, products and impression counters."""
    op.create_table(
        "user_account",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("username", sa.String(length=64), nullable=False),
        sa.Column("nickname", sa.Text(), nullable=False),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("homepage_link", sa.Text(), nullable=True),
        sa.Column("icon_link", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("is_superuser", sa.Boolean(), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("username"),
    )
    op.create_table(
        "follow",
        sa.Column("follower_id", sa.String(length=36), nullable=False),
        sa.Column("followee_id", sa.String(length=36), nullable=False),
        _created_at(),
        sa.CheckConstraint("follower_id <> followee_id", name="ck_follow_not_self"),
        sa.ForeignKeyConstraint(["follower_id"], ["user_account.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["followee_id"], ["user_account.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("follower_id", "followee_id"),
    )
    op.create_index("ix_follow_followee_id", "follow", ["followee_id"])

    op.create_table(
        "tag",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=128), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )
    op.create_table(
        "post",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("live_link", sa.Text(), nullable=True),
        sa.Column("replied_id", sa.String(length=36), nullable=True),
        sa.Column("quoted_id", sa.String(length=36), nullable=True),
        sa.Column("like_count", sa.Integer(), nullable=False),
        sa.Column("ref_count", sa.Integer(), nullable=False),
        sa.Column("comment_count", sa.Integer(), nullable=False),
        sa.Column("quote_count", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        _created_at(),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["user_account.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["replied_id"], ["post.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["quoted_id"], ["post.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_post_created_at_id", "post", ["created_at", "id"])
    op.create_index("ix_post_user_id", "post", ["user_id"])
    op.create_index("ix_post_replied_id", "post", ["replied_id"])
    op.create_index("ix_post_quoted_id", "post", ["quoted_id"])

    op.create_table(
        "post_tag",
        sa.Column("post_id", sa.String(length=36), nullable=False),
        sa.Column("tag_id", sa.String(length=36), nullable=False),
        sa.ForeignKeyConstraint(["post_id"], ["post.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["tag_id"], ["tag.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("post_id", "tag_id"),
    )
    op.create_table(
        "post_image",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("post_id", sa.String(length=36), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("image_link", sa.Text(), nullable=False),
        sa.ForeignKeyConstraint(["post_id"], ["post.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "post_like",
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("post_id", sa.String(length=36), nullable=False),
        _created_at(),
        sa.ForeignKeyConstraint(["user_id"], ["user_account.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["post_id"], ["post.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("user_id", "post_id"),
    )
    op.create_index("ix_post_like_post_id", "post_like", ["post_id"])
    op.create_table(
        "repost",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("post_id", sa.String(length=36), nullable=False),
        _created_at(),
        sa.ForeignKeyConstraint(["user_id"], ["user_account.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["post_id"], ["post.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "post_id", name="uq_repost_user_post"),
    )
    op.create_index("ix_repost_created_at_id", "repost", ["created_at", "id"])
    op.create_index("ix_repost_post_id", "repost", ["post_id"])

    op.create_table(
        "product",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("post_id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("thumbnail_link", sa.Text(), nullable=True),
        sa.Column("product_link", sa.Text(), nullable=True),
        sa.Column("live_release", sa.Boolean(), nullable=False),
        _created_at(),
        sa.ForeignKeyConstraint(["post_id"], ["post.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("post_id"),
    )
    op.create_table(
        "price_history",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("product_id", sa.String(length=36), nullable=False),
        sa.Column("price", sa.Integer(), nullable=False),
        _created_at(),
        sa.CheckConstraint("price >= 0", name="ck_price_history_non_negative"),
        sa.ForeignKeyConstraint(["product_id"], ["product.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_price_history_product_created", "price_history", ["product_id", "created_at"]
    )
    op.create_table(
        "product_rating",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("product_id", sa.String(length=36), nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("value", sa.SmallInteger(), nullable=False),
        _created_at(),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("value BETWEEN 1 AND 5", name="ck_product_rating_value"),
        sa.ForeignKeyConstraint(["product_id"], ["product.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["user_account.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("product_id", "user_id", name="uq_product_rating_product_user"),
    )

    op.create_table(
        "daily_post_impression",
        sa.Column("post_id", sa.String(length=36), nullable=False),
        sa.Column("date_key", sa.String(length=10), nullable=False),
        sa.Column("impression", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["post_id"], ["post.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("post_id", "date_key"),
    )


def downgrade() -> None:
    """Drop every table in reverse dependency order."""
    op.drop_table("daily_post_impression")
    op.drop_table("product_rating")
    op.drop_index("ix_price_history_product_created", table_name="price_history")
    op.drop_table("price_history")
    op.drop_table("product")
    op.drop_index("ix_repost_post_id", table_name="repost")
    op.drop_index("ix_repost_created_at_id", table_name="repost")
    op.drop_table("repost")
    op.drop_index("ix_post_like_post_id", table_name="post_like")
    op.drop_table("post_like")
    op.drop_table("post_image")
    op.drop_table("post_tag")
    op.drop_index("ix_post_quoted_id", table_name="post")
    op.drop_index("ix_post_replied_id", table_name="post")
    op.drop_index("ix_post_user_id", table_name="post")
    op.drop_index("ix_post_created_at_id", table_name="post")
    op.drop_table("post")
    op.drop_table("tag")
    op.drop_index("ix_follow_followee_id", table_name="follow")
    op.drop_table("follow")
    op.drop_table("user_account")
