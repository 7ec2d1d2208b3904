# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from contextlib import nullcontext
from datetime import UTC, datetime, timedelta
from itertools import count
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from yatai_stage.api.v1.dependencies import get_side_effect_dispatcher
from yatai_stage.core.security import create_access_token
from yatai_stage.core.settings import settings
from yatai_stage.db.session import Base
from yatai_stage.db.session import get_db as app_get_session
from yatai_stage.main import app as fastapi_app
from yatai_stage.models import (
    Follow,
    Post,
    PostImage,
    PriceHistory,
    Product,
    ProductRating,
    Repost,
    Tag,
    User,
)
from yatai_stage.services.impressions import SideEffectDispatcher

TEST_DB_URL = "sqlite://"

# Fixed origin so timeline order is fully determined by the offsets tests pass.
BASE_TIME = datetime(2024, 1, 1, 3, 0, tzinfo=UTC)

_USER_COUNTER = count(1)


def at(seconds: int) -> datetime:
    """Return ``BASE_TIME`` shifted by ``seconds``."""
    return BASE_TIME + timedelta(seconds=seconds)


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    connection = engine.connect()
    transaction = connection.begin()
    SessionLocal = sessionmaker(
        bind=connection,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    session = SessionLocal()
    session.begin_nested()

    @event.listens_for(session, "after_transaction_end")
    def restart_savepoint(sess: Session, trans) -> None:  # pragma: no cover - SQLAlchemy internals
        if trans.nested and not getattr(trans._parent, "nested", False):
            session.begin_nested()

    try:
        yield session
    finally:
        event.remove(session, "after_transaction_end", restart_savepoint)
        session.close()

        if transaction.is_active:
            transaction.rollback()
        connection.close()

        # Ensure each test sees a clean database even if commits occurred.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    def _get_dispatcher_override() -> SideEffectDispatcher:
        # Background tasks write through the test session so tests can see them.
        return SideEffectDispatcher(lambda: nullcontext(db_session))

    app.dependency_overrides[app_get_session] = _get_session_override
    app.dependency_overrides[get_side_effect_dispatcher] = _get_dispatcher_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)
        app.dependency_overrides.pop(get_side_effect_dispatcher, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def login(client: TestClient) -> Callable[[User | None], TestClient]:
    """Return a helper that sets (or clears) the session cookie on ``client``."""

    def _login(user: User | None) -> TestClient:
        client.cookies.clear()
        if user is not None:
            client.cookies.set(settings.access_token_cookie_name, create_access_token(user.id))
        return client

    return _login


@pytest.fixture()
def make_user(db_session: Session) -> Callable[..., User]:
    def _make_user(username: str | None = None, **fields: Any) -> User:
        number = next(_USER_COUNTER)
        user = User(
            username=username or f"user{number}",
            nickname=fields.pop("nickname", f"User {number}"),
            **fields,
        )
        db_session.add(user)
        db_session.flush()
        return user

    return _make_user


@pytest.fixture()
def make_post(db_session: Session) -> Callable[..., Post]:
    def _make_post(
        author: User,
        seconds: int,
        *,
        post_id: str | None = None,
        content: str = "post body",
        tags: tuple[str, ...] = (),
        images: tuple[str, ...] = (),
        **fields: Any,
    ) -> Post:
        post = Post(
            user_id=author.id,
            content=content,
            created_at=at(seconds),
            updated_at=at(seconds),
            **fields,
        )
        if post_id is not None:
            post.id = post_id
        for name in tags:
            tag = db_session.query(Tag).filter(Tag.name == name).first() or Tag(name=name)
            post.tags.append(tag)
        post.images = [
            PostImage(position=index, image_link=link) for index, link in enumerate(images)
        ]
        db_session.add(post)
        db_session.flush()
        return post

    return _make_post


@pytest.fixture()
def make_repost(db_session: Session) -> Callable[..., Repost]:
    def _make_repost(
        user: User,
        post: Post,
        seconds: int,
        *,
        repost_id: str | None = None,
    ) -> Repost:
        repost = Repost(user_id=user.id, post_id=post.id, created_at=at(seconds))
        if repost_id is not None:
            repost.id = repost_id
        post.ref_count += 1
        db_session.add(repost)
        db_session.flush()
        return repost

    return _make_repost


@pytest.fixture()
def make_product(db_session: Session) -> Callable[..., Product]:
    def _make_product(
        post: Post,
        *,
        prices: tuple[tuple[int, int], ...] = (),
        live_release: bool = False,
        name: str = "Sample kit",
    ) -> Product:
        """Attach a listing to ``post``; ``prices`` holds ``(price, seconds)`` pairs."""
        product = Product(
            post_id=post.id,
            name=name,
            product_link=None if live_release else "kit.zip",
            live_release=live_release,
        )
        product.price_history = [
            PriceHistory(price=price, created_at=at(seconds)) for price, seconds in prices
        ]
        db_session.add(product)
        db_session.flush()
        return product

    return _make_product


@pytest.fixture()
def rate(db_session: Session) -> Callable[[Product, User, int], ProductRating]:
    def _rate(product: Product, user: User, value: int) -> ProductRating:
        rating = ProductRating(product_id=product.id, user_id=user.id, value=value)
        db_session.add(rating)
        db_session.flush()
        return rating

    return _rate


@pytest.fixture()
def follow(db_session: Session) -> Callable[[User, User], Follow]:
    def _follow(follower: User, followee: User) -> Follow:
        edge = Follow(follower_id=follower.id, followee_id=followee.id)
        db_session.add(edge)
        db_session.flush()
        return edge

    return _follow


@pytest.fixture()
def page_size() -> Iterator[int]:
    """Shrink the timeline page so paging tests stay small."""
    original = settings.timeline_page_size
    settings.timeline_page_size = 3
    try:
        yield 3
    finally:
        settings.timeline_page_size = original
