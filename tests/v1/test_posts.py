# mypy: ignore-errors
# tests/v1/test_posts.py
"""Tests for post creation, detail, quotes and deletion endpoints."""

import pytest
from fastapi import status

from yatai_stage.models import DailyPostImpression, Post, Tag


@pytest.fixture()
def author(make_user):
    return make_user("author")


def test_create_post_requires_session(client) -> None:
    response = client.post("/api/v1/posts", json={"content": "hello"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["success"] is False


def test_create_post_with_tags_and_images(client, login, db_session, author) -> None:
    """Tags are normalized and deduplicated; images keep their order."""
    login(author)
    response = client.post(
        "/api/v1/posts",
        json={
            "content": "New sample pack",
            "tag_names": ["Drums", " drums", "Lo-Fi"],
            "image_names": ["cover.png", "back.png"],
        },
    )
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()["data"]
    assert data["content"] == "New sample pack"
    assert data["author"]["username"] == "author"
    assert sorted(data["tags"]) == ["drums", "lo-fi"]
    assert data["images"] == ["cover.png", "back.png"]
    assert db_session.query(Tag).count() == 2


def test_create_post_with_product(client, login, author) -> None:
    login(author)
    response = client.post(
        "/api/v1/posts",
        json={
            "content": "Selling my kit",
            "product": {"name": "Kit", "product_link": "kit.zip", "price": 1200},
        },
    )
    assert response.status_code == status.HTTP_201_CREATED
    product = response.json()["data"]["product"]
    assert product["name"] == "Kit"
    assert product["current_price"] == 1200
    assert product["rating_count"] == 0


def test_live_release_rejects_price(client, login, author) -> None:
    login(author)
    response = client.post(
        "/api/v1/posts",
        json={
            "content": "Live tonight",
            "product": {"name": "Show", "live_release": True, "price": 10},
        },
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["success"] is False


def test_create_post_validates_content(client, login, author) -> None:
    login(author)
    response = client.post("/api/v1/posts", json={"content": ""})
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["error"][0].startswith("content:")


@pytest.mark.parametrize("tag_name", ["Following", "フォロー中", " latest ", "最新"])
def test_create_post_rejects_timeline_pseudo_tags(client, login, db_session, author, tag_name) -> None:
    login(author)
    response = client.post(
        "/api/v1/posts",
        json={"content": "hello", "tag_names": ["music", tag_name]},
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["error"][0].startswith("tag_names:")
    assert db_session.query(Post).count() == 0


def test_quote_rejects_timeline_pseudo_tags(client, login, db_session, author, make_post) -> None:
    make_post(author, 10, post_id="original")
    login(author)
    response = client.post(
        "/api/v1/posts/original/quote",
        json={"content": "see this", "tag_names": ["following"]},
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert db_session.query(Tag).filter(Tag.name == "following").count() == 0


class TestPostDetail:
    """Tests for GET /posts/{id}."""

    def test_detail_includes_replies(self, client, db_session, author, make_user, make_post) -> None:
        parent = make_post(author, 10, post_id="parent")
        make_post(make_user(), 20, post_id="reply-1", replied_id=parent.id)
        make_post(make_user(), 30, post_id="reply-2", replied_id=parent.id)

        response = client.get("/api/v1/posts/parent")
        assert response.status_code == status.HTTP_200_OK
        data = response.json()["data"]
        assert data["id"] == "parent"
        assert [reply["id"] for reply in data["replies"]] == ["reply-1", "reply-2"]

        row = db_session.query(DailyPostImpression).one()
        assert (row.post_id, row.impression) == ("parent", 1)

    def test_missing_post(self, client) -> None:
        response = client.get("/api/v1/posts/missing")
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json() == {"success": False, "error": "Post not found"}

    def test_inactive_quoted_post_is_hidden(self, client, author, make_post) -> None:
        hidden = make_post(author, 10, is_active=False)
        make_post(author, 20, post_id="quote", quoted_id=hidden.id)

        data = client.get("/api/v1/posts/quote").json()["data"]
        assert data["quoted_id"] == hidden.id
        assert data["quoted"] is None


class TestQuotes:
    """Tests for GET /posts/{id}/quotes."""

    @pytest.fixture()
    def quoted(self, author, make_user, make_post, make_product):
        original = make_post(author, 1, post_id="original")
        quoter = make_user()
        make_post(quoter, 10, post_id="q1", quoted_id=original.id)
        listing = make_post(quoter, 20, post_id="q2", quoted_id=original.id)
        make_product(listing, prices=((800, 1),))
        make_post(quoter, 30, post_id="q3", quoted_id=original.id)
        return original

    def test_quotes_are_returned_oldest_first(self, client, quoted) -> None:
        response = client.get("/api/v1/posts/original/quotes")
        assert response.status_code == status.HTTP_200_OK
        assert [post["id"] for post in response.json()["data"]] == ["q1", "q2", "q3"]

    def test_products_only(self, client, quoted) -> None:
        data = client.get("/api/v1/posts/original/quotes", params={"type": "products"}).json()["data"]
        assert [post["id"] for post in data] == ["q2"]
        assert data[0]["product"]["current_price"] == 800

    def test_before_cursor(self, client, quoted) -> None:
        data = client.get("/api/v1/posts/original/quotes", params={"before": "q3"}).json()["data"]
        assert [post["id"] for post in data] == ["q1", "q2"]

    def test_before_cursor_keeps_quotes_sharing_a_timestamp(
        self, client, author, make_user, make_post, page_size
    ) -> None:
        original = make_post(author, 1, post_id="original")
        quoter = make_user()
        for post_id, seconds in (("q1", 10), ("q2", 10), ("q3", 20), ("q4", 30)):
            make_post(quoter, seconds, post_id=post_id, quoted_id=original.id)

        first = client.get("/api/v1/posts/original/quotes").json()["data"]
        assert [post["id"] for post in first] == ["q1", "q3", "q4"]

        older = client.get(
            "/api/v1/posts/original/quotes", params={"before": first[0]["id"]}
        ).json()["data"]
        assert [post["id"] for post in older] == ["q2"]

    def test_unknown_before_cursor(self, client, quoted) -> None:
        response = client.get("/api/v1/posts/original/quotes", params={"before": "missing"})
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_rendered_quotes_count_as_impressions(self, client, db_session, quoted) -> None:
        client.get("/api/v1/posts/original/quotes")

        rows = {
            row.post_id: row.impression
            for row in db_session.query(DailyPostImpression).all()
        }
        assert rows == {"q1": 1, "q2": 1, "q3": 1}

    def test_invalid_type(self, client, quoted) -> None:
        response = client.get("/api/v1/posts/original/quotes", params={"type": "videos"})
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"][0].startswith("type:")


class TestRepliesAndQuotes:
    """Tests for reply and quote creation counters."""

    def test_reply_increments_comment_count(self, client, login, db_session, author, make_user, make_post) -> None:
        parent = make_post(author, 10)
        login(make_user())

        response = client.post(f"/api/v1/posts/{parent.id}/reply", json={"content": "nice"})
        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["data"]["replied_id"] == parent.id

        db_session.refresh(parent)
        assert parent.comment_count == 1

    def test_reply_to_missing_post(self, client, login, author) -> None:
        login(author)
        response = client.post("/api/v1/posts/missing/reply", json={"content": "nice"})
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_quote_increments_quote_count(self, client, login, db_session, author, make_user, make_post) -> None:
        original = make_post(author, 10)
        login(make_user())

        response = client.post(
            f"/api/v1/posts/{original.id}/quote",
            json={"content": "look at this", "tag_names": ["Art"]},
        )
        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()["data"]
        assert data["quoted"]["id"] == original.id
        assert data["tags"] == ["art"]

        db_session.refresh(original)
        assert original.quote_count == 1


class TestDeletePost:
    """Tests for DELETE /posts/{id}."""

    def test_delete_reply_decrements_parent(self, client, login, db_session, author, make_post) -> None:
        parent = make_post(author, 10, comment_count=1)
        reply = make_post(author, 20, replied_id=parent.id)
        login(author)

        response = client.delete(f"/api/v1/posts/{reply.id}")
        assert response.status_code == status.HTTP_204_NO_CONTENT

        db_session.refresh(parent)
        assert parent.comment_count == 0
        assert db_session.get(Post, reply.id) is None

    def test_delete_quote_decrements_quoted(self, client, login, db_session, author, make_post) -> None:
        original = make_post(author, 10, quote_count=1)
        quote = make_post(author, 20, quoted_id=original.id)
        login(author)

        assert client.delete(f"/api/v1/posts/{quote.id}").status_code == status.HTTP_204_NO_CONTENT
        db_session.refresh(original)
        assert original.quote_count == 0

    def test_only_author_can_delete(self, client, login, author, make_user, make_post) -> None:
        post = make_post(author, 10)
        login(make_user())

        response = client.delete(f"/api/v1/posts/{post.id}")
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_superuser_can_delete(self, client, login, author, make_user, make_post) -> None:
        post = make_post(author, 10)
        login(make_user(is_superuser=True))

        assert client.delete(f"/api/v1/posts/{post.id}").status_code == status.HTTP_204_NO_CONTENT
