"""Price and rating writes for product listings."""
from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from yatai_stage.db.time import utcnow
from yatai_stage.db.upsert import upsert
from yatai_stage.models import Post, PriceHistory, Product, ProductRating, User
from yatai_stage.services.errors import (
    InvalidRequestError,
    NotFoundError,
    PermissionDeniedError,
)
from yatai_stage.services.snapshots import ProductStats, SnapshotResolver
from yatai_stage.utils.ids import new_id

__all__ = [
    "append_price",
    "get_product",
    "rate_product",
]

logger = logging.getLogger(__name__)


def get_product(session: Session, product_id: str) -> Product:
    """Return a product whose listing post is still active."""
    product = session.scalars(
        select(Product)
        .join(Post, Post.id == Product.post_id)
        .where(Product.id == product_id, Post.is_active.is_(True))
        .options(selectinload(Product.post))
    ).first()
    if product is None:
        raise NotFoundError("Product not found")
    return product


def append_price(session: Session, seller: User, product_id: str, price: int) -> PriceHistory:
    """Append a new price; the newest row becomes the current price."""
    product = get_product(session, product_id)
    if product.post.user_id != seller.id and not seller.is_superuser:
        raise PermissionDeniedError("Only the seller can change the price")
    if product.live_release:
        raise InvalidRequestError("Live releases cannot be priced")

    entry = PriceHistory(product_id=product.id, price=price)
    session.add(entry)
    session.flush()
    logger.info("Product %s repriced to %d", product.id, price)
    return entry


def rate_product(session: Session, rater: User, product_id: str, value: int) -> ProductStats:
    """Insert or overwrite the rater's rating and return the refreshed stats."""
    product = get_product(session, product_id)
    if product.post.user_id == rater.id:
        raise InvalidRequestError("Sellers cannot rate their own products")

    now = utcnow()
    table = ProductRating.__table__
    upsert(
        session,
        table,
        {
            "id": new_id(),
            "product_id": product.id,
            "user_id": rater.id,
            "value": value,
            "created_at": now,
            "updated_at": now,
        },
        conflict_columns=("product_id", "user_id"),
        update={"value": value, "updated_at": now},
    )
    return SnapshotResolver(session).resolve([product.id])[product.id]
