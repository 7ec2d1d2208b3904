"""Current price and average rating derived from append-only history."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from yatai_stage.models import PriceHistory, ProductRating


@dataclass(frozen=True)
class ProductStats:
    """Derived state of one product.

    ``current_price`` is None when the product has no price rows yet and
    ``avg_rating`` is None when it has no ratings; neither is ever 0 by
    default.
    """

    current_price: int | None = None
    avg_rating: float | None = None
    rating_count: int = 0


NO_STATS = ProductStats()


class SnapshotResolver:
    """Batch resolver: two queries per page regardless of product count."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def resolve(self, product_ids: Iterable[str]) -> dict[str, ProductStats]:
        ids = sorted(set(product_ids))
        if not ids:
            return {}

        prices = self._latest_prices(ids)
        ratings = self._ratings(ids)
        return {
            product_id: ProductStats(
                current_price=prices.get(product_id),
                avg_rating=ratings.get(product_id, (None, 0))[0],
                rating_count=ratings.get(product_id, (None, 0))[1],
            )
            for product_id in ids
        }

    def _latest_prices(self, ids: list[str]) -> dict[str, int]:
        rank = func.row_number().over(
            partition_by=PriceHistory.product_id,
            order_by=(PriceHistory.created_at.desc(), PriceHistory.id.desc()),
        )
        ranked = (
            select(
                PriceHistory.product_id.label("product_id"),
                PriceHistory.price.label("price"),
                rank.label("rank"),
            )
            .where(PriceHistory.product_id.in_(ids))
            .subquery()
        )
        rows = self.session.execute(
            select(ranked.c.product_id, ranked.c.price).where(ranked.c.rank == 1)
        )
        return {product_id: int(price) for product_id, price in rows}

    def _ratings(self, ids: list[str]) -> dict[str, tuple[float, int]]:
        rows = self.session.execute(
            select(
                ProductRating.product_id,
                func.avg(ProductRating.value),
                func.count(ProductRating.id),
            )
            .where(ProductRating.product_id.in_(ids))
            .group_by(ProductRating.product_id)
        )
        return {
            product_id: (float(average), int(count))
            for product_id, average, count in rows
        }
