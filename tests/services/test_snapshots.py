# tests/services/test_snapshots.py
"""Tests for batched price and rating snapshots."""

from collections.abc import Iterator

import pytest
from sqlalchemy import event

from yatai_stage.services.snapshots import SnapshotResolver


@pytest.fixture()
def statements(db_session) -> Iterator[list[str]]:
    """Record every SQL statement issued on the test connection."""
    seen: list[str] = []
    connection = db_session.connection()

    def _record(conn, cursor, statement, parameters, context, executemany) -> None:
        seen.append(statement)

    event.listen(connection, "before_cursor_execute", _record)
    try:
        yield seen
    finally:
        event.remove(connection, "before_cursor_execute", _record)


def test_resolves_many_products_in_two_queries(
    db_session, make_user, make_post, make_product, rate, statements
) -> None:
    """Price and rating lookups do not grow with the number of products."""
    seller = make_user()
    products = [
        make_product(make_post(seller, n), prices=((100 * n, 1), (100 * n + 5, 2)))
        for n in range(1, 6)
    ]
    rate(products[0], make_user(), 2)
    rate(products[0], make_user(), 3)
    statements.clear()

    stats = SnapshotResolver(db_session).resolve([product.id for product in products])

    assert len(statements) == 2
    assert [stats[product.id].current_price for product in products] == [105, 205, 305, 405, 505]
    assert stats[products[0].id].avg_rating == pytest.approx(2.5)
    assert stats[products[0].id].rating_count == 2
    assert stats[products[1].id].avg_rating is None


def test_empty_batch_issues_no_queries(db_session, statements) -> None:
    assert SnapshotResolver(db_session).resolve([]) == {}
    assert statements == []


def test_latest_price_wins_regardless_of_insert_order(
    db_session, make_user, make_post, make_product
) -> None:
    """The newest ``created_at`` is the current price, not the last inserted row."""
    product = make_product(make_post(make_user(), 1), prices=((150, 20), (100, 10)))

    stats = SnapshotResolver(db_session).resolve([product.id])
    assert stats[product.id].current_price == 150


def test_product_without_history(db_session, make_user, make_post, make_product) -> None:
    product = make_product(make_post(make_user(), 1))

    stats = SnapshotResolver(db_session).resolve([product.id])[product.id]
    assert stats.current_price is None
    assert stats.avg_rating is None
    assert stats.rating_count == 0
